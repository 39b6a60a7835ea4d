from __future__ import annotations

import logging
from typing import Any, List

from krystal.http import HttpClient
from krystal.models import ChainInfo
from krystal.normalize import decode_records, extract_records

logger = logging.getLogger(__name__)


async def get_chains(http: HttpClient) -> List[ChainInfo]:
    """List supported chains. An empty or unrecognised body is an error here."""
    data = await http.get_json(http.build_url("/v1/chains"))
    chains = decode_records(ChainInfo, extract_records(data, "chains", required=True))
    logger.debug(f"Retrieved {len(chains)} chains")
    return chains


async def get_chain_stats(http: HttpClient, chain_id: int) -> Any:
    return await http.get_json(http.build_url(f"/v1/chains/{chain_id}"))
