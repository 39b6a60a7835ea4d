from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

from krystal.http import HttpClient, add_param
from krystal.models import Pool, Transaction
from krystal.normalize import decode_record, decode_records, extract_records
from krystal.query import PoolsQuery, TransactionQuery, check_query

logger = logging.getLogger(__name__)


def pools_params(query: PoolsQuery) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    add_param(params, "chainId", query.chain_id)
    add_param(params, "factoryAddress", query.factory_address)
    add_param(params, "protocol", query.protocol)
    add_param(params, "token", query.token)
    add_param(params, "sortBy", query.sort_by)
    add_param(params, "tvlFrom", query.min_tvl)
    add_param(params, "volume24hFrom", query.min_volume_24h)
    add_param(params, "limit", query.limit)
    add_param(params, "offset", query.offset)
    add_param(params, "withIncentives", query.with_incentives)
    return params


def _pool_path(chain_id: int, pool_address: str, suffix: str = "") -> str:
    return f"/v1/pools/{chain_id}/{quote(pool_address, safe='')}{suffix}"


async def get_pools(http: HttpClient, query: PoolsQuery, *, strict: bool = True) -> List[Pool]:
    check_query(query, strict)
    data = await http.get_json(http.build_url("/v1/pools", pools_params(query)))
    pools = decode_records(Pool, extract_records(data, "pools"))
    logger.debug(f"Retrieved {len(pools)} pools")
    return pools


async def get_pool_detail(
    http: HttpClient,
    chain_id: int,
    pool_address: str,
    factory_address: Optional[str] = None,
    with_incentives: bool = False,
) -> Pool:
    params: List[Tuple[str, str]] = []
    add_param(params, "factoryAddress", factory_address)
    add_param(params, "withIncentives", with_incentives)
    data = await http.get_json(http.build_url(_pool_path(chain_id, pool_address), params))
    return decode_record(Pool, data)


async def get_pool_historical(
    http: HttpClient,
    chain_id: int,
    pool_address: str,
    factory_address: Optional[str] = None,
    query: Optional[TransactionQuery] = None,
    *,
    strict: bool = True,
) -> Any:
    params: List[Tuple[str, str]] = []
    add_param(params, "factoryAddress", factory_address)
    if query is not None:
        check_query(query, strict)
        add_param(params, "startTime", query.start_time)
        add_param(params, "endTime", query.end_time)
    return await http.get_json(http.build_url(_pool_path(chain_id, pool_address, "/historical"), params))


async def get_pool_transactions(
    http: HttpClient,
    chain_id: int,
    pool_address: str,
    factory_address: Optional[str] = None,
    query: Optional[TransactionQuery] = None,
    *,
    strict: bool = True,
) -> List[Transaction]:
    params: List[Tuple[str, str]] = []
    add_param(params, "factoryAddress", factory_address)
    if query is not None:
        check_query(query, strict)
        add_param(params, "startTime", query.start_time)
        add_param(params, "endTime", query.end_time)
        add_param(params, "limit", query.limit)
        add_param(params, "offset", query.offset)
    data = await http.get_json(http.build_url(_pool_path(chain_id, pool_address, "/transactions"), params))
    return decode_records(Transaction, extract_records(data, "transactions"))
