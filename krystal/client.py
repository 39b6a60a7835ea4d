from __future__ import annotations

from typing import Any, List, Optional

import httpx

from krystal.clients import chains, pools, positions, protocols
from krystal.config import Settings, get_settings
from krystal.http import HttpClient
from krystal.models import ChainInfo, Pool, PoolSortBy, Position, PositionStatus, Transaction
from krystal.query import PoolsQuery, PositionsQuery, TransactionQuery


class KrystalClient:
    """Typed async client for the Krystal Cloud API.

    One instance owns one connection pool and may be shared across concurrent
    calls; nothing on it changes after construction.
    """

    def __init__(
        self,
        api_key: str,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        strict_validation: Optional[bool] = None,
    ):
        self.settings = settings or get_settings()
        self.strict = self.settings.STRICT_VALIDATION if strict_validation is None else strict_validation
        self.http = HttpClient(
            api_key,
            base_url=self.settings.KRYSTAL_BASE_URL,
            timeout=self.settings.KRYSTAL_TIMEOUT_SECONDS,
            user_agent=self.settings.KRYSTAL_USER_AGENT,
            transport=transport,
        )

    @classmethod
    def from_env(cls, api_key: Optional[str] = None, **kwargs) -> "KrystalClient":
        """Build a client, taking the key from ``KRYSTAL_API_KEY`` when none is given."""
        settings = kwargs.pop("settings", None) or get_settings()
        return cls(settings.require_api_key(api_key), settings, **kwargs)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "KrystalClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # Chains

    async def get_chains(self) -> List[ChainInfo]:
        return await chains.get_chains(self.http)

    async def get_chain_stats(self, chain_id: int) -> Any:
        return await chains.get_chain_stats(self.http, chain_id)

    # Pools

    async def get_pools(self, query: PoolsQuery) -> List[Pool]:
        return await pools.get_pools(self.http, query, strict=self.strict)

    async def get_pool_detail(
        self,
        chain_id: int,
        pool_address: str,
        factory_address: Optional[str] = None,
        with_incentives: bool = False,
    ) -> Pool:
        return await pools.get_pool_detail(self.http, chain_id, pool_address, factory_address, with_incentives)

    async def get_pool_historical(
        self,
        chain_id: int,
        pool_address: str,
        factory_address: Optional[str] = None,
        query: Optional[TransactionQuery] = None,
    ) -> Any:
        return await pools.get_pool_historical(
            self.http, chain_id, pool_address, factory_address, query, strict=self.strict
        )

    async def get_pool_transactions(
        self,
        chain_id: int,
        pool_address: str,
        factory_address: Optional[str] = None,
        query: Optional[TransactionQuery] = None,
    ) -> List[Transaction]:
        return await pools.get_pool_transactions(
            self.http, chain_id, pool_address, factory_address, query, strict=self.strict
        )

    # Positions

    async def get_positions(self, query: PositionsQuery) -> List[Position]:
        return await positions.get_positions(self.http, query, strict=self.strict)

    async def get_position_detail(self, chain_id: int, position_id: str) -> Position:
        return await positions.get_position_detail(self.http, chain_id, position_id)

    async def get_position_transactions(
        self,
        chain_id: int,
        token_address: str,
        wallet: Optional[str] = None,
        token_id: Optional[str] = None,
        query: Optional[TransactionQuery] = None,
    ) -> List[Transaction]:
        return await positions.get_position_transactions(
            self.http, chain_id, token_address, wallet, token_id, query, strict=self.strict
        )

    # Protocols

    async def get_protocols(self) -> Any:
        return await protocols.get_protocols(self.http)

    # Convenience queries

    async def get_top_pools_by_tvl(self, chain_id: int, limit: int) -> List[Pool]:
        return await self.get_pools(PoolsQuery(chain_id=chain_id, sort_by=PoolSortBy.TVL, limit=limit))

    async def get_top_pools_by_volume(self, chain_id: int, limit: int) -> List[Pool]:
        return await self.get_pools(PoolsQuery(chain_id=chain_id, sort_by=PoolSortBy.VOLUME_24H, limit=limit))

    async def get_pools_for_token(self, token: str, chain_id: Optional[int] = None) -> List[Pool]:
        return await self.get_pools(PoolsQuery(token=token, chain_id=chain_id))

    async def get_pools_for_protocol(
        self, protocol: str, chain_id: Optional[int] = None, limit: Optional[int] = None
    ) -> List[Pool]:
        return await self.get_pools(PoolsQuery(protocol=protocol, chain_id=chain_id, limit=limit))

    async def get_open_positions(self, wallet: str, chain_id: Optional[int] = None) -> List[Position]:
        return await self.get_positions(PositionsQuery(wallet, chain_id=chain_id, status=PositionStatus.OPEN))

    async def get_closed_positions(self, wallet: str, chain_id: Optional[int] = None) -> List[Position]:
        return await self.get_positions(PositionsQuery(wallet, chain_id=chain_id, status=PositionStatus.CLOSED))

    async def get_all_positions(self, wallet: str, chain_id: Optional[int] = None) -> List[Position]:
        return await self.get_positions(PositionsQuery(wallet, chain_id=chain_id, status=PositionStatus.ALL))

    async def get_recent_pool_transactions(self, chain_id: int, pool_address: str, limit: int) -> List[Transaction]:
        return await self.get_pool_transactions(chain_id, pool_address, query=TransactionQuery(limit=limit))
