"""Filter builders for list endpoints.

Queries are immutable; build one with keyword arguments or derive a new one
with ``replace``. ``validate`` only looks at the final values, so the order in
which fields were set never matters.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from krystal.errors import InvalidParamsError
from krystal.models import PoolSortBy, PositionStatus

logger = logging.getLogger(__name__)

MAX_POOLS_LIMIT = 1000
MAX_MIN_TVL = 1_000_000_000
MAX_TRANSACTIONS_LIMIT = 10_000


class _Query:
    def replace(self, **changes):
        return dataclasses.replace(self, **changes)

    def validate(self) -> None:
        raise NotImplementedError

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidParamsError:
            return False
        return True


@dataclass(frozen=True)
class PoolsQuery(_Query):
    chain_id: Optional[int] = None
    factory_address: Optional[str] = None
    protocol: Optional[str] = None
    # Matches either token0 or token1
    token: Optional[str] = None
    sort_by: Optional[PoolSortBy] = None
    min_tvl: Optional[int] = None
    min_volume_24h: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    with_incentives: Optional[bool] = None

    def validate(self) -> None:
        if self.limit is not None and not 1 <= self.limit <= MAX_POOLS_LIMIT:
            raise InvalidParamsError(f"Limit must be between 1 and {MAX_POOLS_LIMIT}")
        if self.min_tvl is not None and self.min_tvl > MAX_MIN_TVL:
            raise InvalidParamsError("Minimum TVL threshold too high")


@dataclass(frozen=True)
class PositionsQuery(_Query):
    wallet: str
    chain_id: Optional[int] = None
    status: Optional[PositionStatus] = None
    protocols: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.protocols is not None and not isinstance(self.protocols, tuple):
            object.__setattr__(self, "protocols", tuple(self.protocols))

    def add_protocol(self, protocol: str) -> "PositionsQuery":
        return self.replace(protocols=(self.protocols or ()) + (protocol,))

    def validate(self) -> None:
        if not self.wallet:
            raise InvalidParamsError("Wallet address cannot be empty")
        # Shape check only; checksum and hex digits are left to the API
        if not self.wallet.startswith("0x") or len(self.wallet) != 42:
            raise InvalidParamsError("Invalid Ethereum address format")


@dataclass(frozen=True)
class TransactionQuery(_Query):
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    @classmethod
    def time_range(cls, start: int, end: int, **kwargs) -> "TransactionQuery":
        return cls(start_time=start, end_time=end, **kwargs)

    def validate(self) -> None:
        if self.start_time is not None and self.end_time is not None and self.start_time >= self.end_time:
            raise InvalidParamsError("Start time must be before end time")
        if self.limit is not None and not 1 <= self.limit <= MAX_TRANSACTIONS_LIMIT:
            raise InvalidParamsError(f"Limit must be between 1 and {MAX_TRANSACTIONS_LIMIT}")


def check_query(query: _Query, strict: bool = True) -> None:
    """Validate ``query`` before dispatch.

    In non-strict mode a failure is only logged and the request goes out as-is.
    """
    if strict:
        query.validate()
        return
    try:
        query.validate()
    except InvalidParamsError as e:
        logger.warning(f"Sending {type(query).__name__} despite validation failure: {e.message}")
