from __future__ import annotations

import time
from enum import Enum, IntEnum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class KrystalModel(BaseModel):
    """Immutable API record that keeps any field it does not recognise.

    Unknown keys land in ``model_extra`` and are written back by
    ``to_api_dict()``, so a newer upstream schema round-trips without loss.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    @property
    def additional_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    def to_api_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ChainInfo(KrystalModel):
    id: int
    name: str
    logo: Optional[str] = None
    explorer: Optional[str] = None


class ProtocolInfo(KrystalModel):
    key: str
    name: str
    factory_address: str = Field(..., alias="factoryAddress")
    logo: Optional[str] = None


class TokenInfo(KrystalModel):
    address: str
    symbol: str
    name: str
    decimals: int = Field(..., ge=0, le=255)
    logo: Optional[str] = None


class PoolStats(KrystalModel):
    volume: float
    fee: float
    apr: float


class IncentiveInfo(KrystalModel):
    incentive_type: str = Field(..., alias="incentiveType")
    token: TokenInfo
    amount_per_day: float = Field(..., alias="amountPerDay")
    daily_reward_usd: float = Field(..., alias="dailyRewardUsd")
    apr24h: float


class Pool(KrystalModel):
    chain: Optional[ChainInfo] = None
    address: str = Field(..., alias="poolAddress")
    pool_price: float = Field(..., alias="poolPrice", description="token0 priced in token1")
    protocol: Optional[ProtocolInfo] = None
    fee_tier: int = Field(..., alias="feeTier", description="Fee tier in basis points")
    token0: Optional[TokenInfo] = None
    token1: Optional[TokenInfo] = None
    tvl: float = Field(..., description="Total Value Locked in USD")
    stats1h: Optional[PoolStats] = None
    stats24h: Optional[PoolStats] = None
    stats7d: Optional[PoolStats] = None
    stats30d: Optional[PoolStats] = None
    incentives: Optional[List[IncentiveInfo]] = None

    def volume_24h(self) -> float:
        return self.stats24h.volume if self.stats24h else 0.0

    def apr(self) -> Optional[float]:
        return self.stats24h.apr if self.stats24h else None

    def volume_tvl_ratio(self) -> float:
        if self.tvl > 0 and self.stats24h:
            return self.stats24h.volume / self.tvl
        return 0.0

    def is_high_activity(self) -> bool:
        # 24h volume at or above 10% of TVL
        return self.volume_tvl_ratio() >= 0.1

    def token_pair(self) -> str:
        if self.token0 and self.token1:
            return f"{self.token0.symbol}/{self.token1.symbol}"
        return "Unknown/Unknown"

    def display_name(self) -> str:
        t0 = self.token0.symbol if self.token0 else "?"
        t1 = self.token1.symbol if self.token1 else "?"
        protocol = self.protocol.name if self.protocol else "Unknown"
        return f"{t0}/{t1} ({protocol}) Pool"


class PoolInfo(KrystalModel):
    id: str
    pool_address: str = Field(..., alias="poolAddress")
    protocol: Optional[ProtocolInfo] = None


class TokenWithValue(KrystalModel):
    token: TokenInfo
    balance: str
    price: float
    value: float


class FeeInfo(KrystalModel):
    pending: Optional[List[TokenWithValue]] = None
    claimed: Optional[List[TokenWithValue]] = None


class AprBreakdown(KrystalModel):
    total_apr: float = Field(..., alias="totalApr")
    fee_apr: float = Field(..., alias="feeApr")
    farm_apr: float = Field(..., alias="farmApr")


class PositionPerformance(KrystalModel):
    total_deposit_value: float = Field(..., alias="totalDepositValue")
    total_withdraw_value: float = Field(..., alias="totalWithdrawValue")
    impermanent_loss: float = Field(..., alias="impermanentLoss")
    pnl: float
    return_on_investment: float = Field(..., alias="returnOnInvestment")
    compare_to_hold: Optional[float] = Field(default=None, alias="compareToHold")
    apr: Optional[AprBreakdown] = None


ACTIVE_STATUSES = {"IN_RANGE", "OUT_RANGE"}


class Position(KrystalModel):
    id: str
    chain: Optional[ChainInfo] = None
    pool: Optional[PoolInfo] = None
    owner_address: str = Field(..., alias="ownerAddress")
    token_address: str = Field(..., alias="tokenAddress")
    token_id: str = Field(..., alias="tokenId")
    # Kept as a string: uint128 liquidity does not fit a float
    liquidity: str
    min_price: float = Field(..., alias="minPrice")
    max_price: float = Field(..., alias="maxPrice")
    current_position_value: float = Field(..., alias="currentPositionValue")
    status: str
    current_amounts: Optional[List[TokenWithValue]] = Field(default=None, alias="currentAmounts")
    provided_amounts: Optional[List[TokenWithValue]] = Field(default=None, alias="providedAmounts")
    trading_fee: Optional[FeeInfo] = Field(default=None, alias="tradingFee")
    farming_reward: Optional[FeeInfo] = Field(default=None, alias="farmingReward")
    performance: Optional[PositionPerformance] = None

    def is_active(self) -> bool:
        return self.status.upper() in ACTIVE_STATUSES

    def is_closed(self) -> bool:
        return self.status.upper() == "CLOSED"

    def total_value(self) -> float:
        if self.current_amounts is not None:
            return sum(amount.value for amount in self.current_amounts)
        return self.current_position_value


class Transaction(KrystalModel):
    hash: str
    timestamp: int = Field(..., ge=0, description="Unix timestamp in seconds")
    transaction_type: str = Field(..., alias="type")
    amount0: float
    amount1: float

    def age_seconds(self, now: Optional[int] = None) -> int:
        now = int(time.time()) if now is None else now
        return max(0, now - self.timestamp)

    def is_recent(self, now: Optional[int] = None) -> bool:
        return self.age_seconds(now) < 3600


class PaginatedResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    data: List[T]
    total: Optional[int] = None
    offset: Optional[int] = None
    limit: Optional[int] = None
    has_more: Optional[bool] = Field(default=None, alias="hasMore")


class PoolSortBy(IntEnum):
    APR = 0
    TVL = 1
    VOLUME_24H = 2
    FEE = 3


class PositionStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    ALL = "ALL"

    @property
    def api_value(self) -> Optional[str]:
        """Value for the ``positionStatus`` parameter; ALL sends nothing."""
        if self is PositionStatus.ALL:
            return None
        return self.value
