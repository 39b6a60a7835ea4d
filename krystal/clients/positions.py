from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from urllib.parse import quote

from krystal.http import HttpClient, add_param
from krystal.models import Position, Transaction
from krystal.normalize import decode_record, decode_records, extract_records
from krystal.query import PositionsQuery, TransactionQuery, check_query

logger = logging.getLogger(__name__)


def positions_params(query: PositionsQuery) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = [("wallet", query.wallet)]
    add_param(params, "chainId", query.chain_id)
    if query.status is not None:
        add_param(params, "positionStatus", query.status.api_value)
    for protocol in query.protocols or ():
        params.append(("protocols", protocol))
    return params


async def get_positions(http: HttpClient, query: PositionsQuery, *, strict: bool = True) -> List[Position]:
    check_query(query, strict)
    data = await http.get_json(http.build_url("/v1/positions", positions_params(query)))
    positions = decode_records(Position, extract_records(data, "positions"))
    logger.debug(f"Retrieved {len(positions)} positions for {query.wallet}")
    return positions


async def get_position_detail(http: HttpClient, chain_id: int, position_id: str) -> Position:
    data = await http.get_json(http.build_url(f"/v1/positions/{chain_id}/{quote(position_id, safe='')}"))
    return decode_record(Position, data)


async def get_position_transactions(
    http: HttpClient,
    chain_id: int,
    token_address: str,
    wallet: Optional[str] = None,
    token_id: Optional[str] = None,
    query: Optional[TransactionQuery] = None,
    *,
    strict: bool = True,
) -> List[Transaction]:
    params: List[Tuple[str, str]] = [("tokenAddress", token_address)]
    add_param(params, "wallet", wallet)
    add_param(params, "tokenId", token_id)
    if query is not None:
        check_query(query, strict)
        # This endpoint names its range bounds differently from the pool one
        add_param(params, "startTimestamp", query.start_time)
        add_param(params, "endTimestamp", query.end_time)
        add_param(params, "limit", query.limit)
    data = await http.get_json(http.build_url(f"/v1/positions/{chain_id}/transactions", params))
    return decode_records(Transaction, extract_records(data, "transactions"))
