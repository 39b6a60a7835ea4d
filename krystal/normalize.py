"""Tolerant reading of list responses.

The API returns the same collection either wrapped (``{"pools": [...]}``) or
bare (``[...]``). Records are decoded all-or-nothing: one bad element fails the
whole response.
"""
from __future__ import annotations

import logging
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from krystal.errors import InvalidResponseError, JsonError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def extract_records(payload: Any, field: str, *, required: bool = False) -> List[Any]:
    if isinstance(payload, dict) and isinstance(payload.get(field), list):
        return payload[field]
    if isinstance(payload, list):
        return payload
    if required:
        raise InvalidResponseError(f"Invalid {field} response format")
    logger.debug(f"No '{field}' list in response, treating as empty")
    return []


def decode_record(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise JsonError(f"{model.__name__}: {e}") from e


def decode_records(model: Type[M], items: List[Any]) -> List[M]:
    return [decode_record(model, item) for item in items]
