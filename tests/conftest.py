import json
import logging
from typing import Callable, List

import httpx
import pytest

from krystal.client import KrystalClient
from krystal.config import Settings
from krystal.http import HttpClient
from krystal.utils.logging import HANDLER_NAME

BASE_URL = "https://cloud-api.krystal.app"
WALLET = "0x742C5c2eDF43e426C4bb9caCBb8D99b8C1f29b7d"
POOL_ADDRESS = "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"

POOL_JSON = {
    "chain": {
        "name": "Ethereum",
        "id": 1,
        "logo": "https://files.krystal.app/DesignAssets/chains/ethereum.png",
        "explorer": "https://etherscan.io",
    },
    "poolAddress": POOL_ADDRESS,
    "poolPrice": 3512.4471,
    "protocol": {
        "key": "uniswapv3",
        "name": "Uniswap V3",
        "factoryAddress": "0x1f98431c8ad98523631ae4a59f267346ea31f984",
        "logo": "https://files.krystal.app/DesignAssets/platformIcons/uniswap.png",
    },
    "feeTier": 500,
    "token0": {
        "address": "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
        "symbol": "USDC",
        "name": "USD Coin",
        "decimals": 6,
    },
    "token1": {
        "address": "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
        "symbol": "WETH",
        "name": "Wrapped Ether",
        "decimals": 18,
    },
    "tvl": 150000000.5,
    "stats24h": {"volume": 30000000.0, "fee": 15000.0, "apr": 3.65},
    "stats7d": {"volume": 200000000.0, "fee": 100000.0, "apr": 3.47},
}

POSITION_JSON = {
    "id": "1-0xc36442b4a4522e871399cd717abdd847ab11fe88-123456",
    "chain": {"name": "Ethereum", "id": 1},
    "pool": {
        "id": "1-" + POOL_ADDRESS,
        "poolAddress": POOL_ADDRESS,
        "protocol": {"key": "uniswapv3", "name": "Uniswap V3", "factoryAddress": "0x1f98"},
    },
    "ownerAddress": WALLET,
    "tokenAddress": "0xc36442b4a4522e871399cd717abdd847ab11fe88",
    "tokenId": "123456",
    "liquidity": "340282366920938463463374607431768211455",
    "minPrice": 3000.0,
    "maxPrice": 4000.0,
    "currentPositionValue": 1250.75,
    "status": "IN_RANGE",
}

TRANSACTION_JSON = {
    "hash": "0x5c504ed432cb51138bcf09aa5e8a410dd4a1e204ef84bfed1be16dfba1b22060",
    "timestamp": 1700000000,
    "type": "swap",
    "amount0": 1500.25,
    "amount1": -0.42,
}


class Recorder:
    """Collects requests seen by a MockTransport handler."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def json_response(payload, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status_code, text=json.dumps(payload))


@pytest.fixture
def settings():
    return Settings(KRYSTAL_API_KEY="test-key", STRICT_VALIDATION=True, LOG_LEVEL="WARNING")


@pytest.fixture
def make_http():
    def factory(responder) -> tuple:
        recorder = Recorder(responder)
        return HttpClient("test-key", BASE_URL, transport=recorder.transport), recorder

    return factory


@pytest.fixture
def make_client(settings):
    def factory(responder, **kwargs) -> tuple:
        recorder = Recorder(responder)
        return KrystalClient("test-key", settings, transport=recorder.transport, **kwargs), recorder

    return factory


@pytest.fixture(autouse=True)
def restore_logging():
    """Drop the CLI log handler after each test; it holds a per-invocation stream."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)
    root.setLevel(level)
