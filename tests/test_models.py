import pytest
from pydantic import ValidationError

from krystal.models import ChainInfo, PaginatedResponse, Pool, Position, Transaction

from conftest import POOL_ADDRESS, POOL_JSON, POSITION_JSON, TRANSACTION_JSON


class TestPool:
    def test_decode_real_payload(self):
        pool = Pool.model_validate(POOL_JSON)
        assert pool.address == POOL_ADDRESS
        assert pool.fee_tier == 500
        assert pool.chain.id == 1
        assert pool.protocol.factory_address.startswith("0x1f98")
        assert pool.token0.decimals == 6
        assert pool.stats1h is None
        assert pool.incentives is None

    def test_derived_metrics(self):
        pool = Pool.model_validate(POOL_JSON)
        assert pool.volume_24h() == 30000000.0
        assert pool.apr() == 3.65
        assert pool.volume_tvl_ratio() == pytest.approx(0.2, rel=1e-6)
        assert pool.is_high_activity()
        assert pool.token_pair() == "USDC/WETH"
        assert pool.display_name() == "USDC/WETH (Uniswap V3) Pool"

    def test_metrics_without_stats(self):
        payload = {k: v for k, v in POOL_JSON.items() if k not in ("stats24h", "token0")}
        pool = Pool.model_validate(payload)
        assert pool.volume_24h() == 0.0
        assert pool.apr() is None
        assert pool.volume_tvl_ratio() == 0.0
        assert not pool.is_high_activity()
        assert pool.token_pair() == "Unknown/Unknown"

    def test_zero_tvl_ratio(self):
        pool = Pool.model_validate({**POOL_JSON, "tvl": 0})
        assert pool.volume_tvl_ratio() == 0.0

    def test_unknown_fields_round_trip(self):
        payload = {**POOL_JSON, "newUpstreamField": {"nested": [1, 2]}}
        pool = Pool.model_validate(payload)
        assert pool.additional_fields == {"newUpstreamField": {"nested": [1, 2]}}
        again = Pool.model_validate(pool.to_api_dict())
        assert again.to_api_dict() == pool.to_api_dict()
        assert pool.to_api_dict()["newUpstreamField"] == {"nested": [1, 2]}

    def test_wire_names_on_output(self):
        data = Pool.model_validate(POOL_JSON).to_api_dict()
        assert "poolAddress" in data
        assert "feeTier" in data
        assert data["protocol"]["factoryAddress"].startswith("0x1f98")

    def test_missing_required_field(self):
        payload = {k: v for k, v in POOL_JSON.items() if k != "tvl"}
        with pytest.raises(ValidationError):
            Pool.model_validate(payload)

    def test_decimals_out_of_range(self):
        bad = {**POOL_JSON, "token0": {**POOL_JSON["token0"], "decimals": 300}}
        with pytest.raises(ValidationError):
            Pool.model_validate(bad)


class TestChainInfo:
    def test_numeric_string_id(self):
        assert ChainInfo.model_validate({"id": "137", "name": "Polygon"}).id == 137

    def test_optional_fields(self):
        chain = ChainInfo.model_validate({"id": 1, "name": "Ethereum"})
        assert chain.logo is None
        assert chain.explorer is None
        assert chain.additional_fields == {}


class TestPosition:
    def test_decode(self):
        position = Position.model_validate(POSITION_JSON)
        assert position.liquidity == "340282366920938463463374607431768211455"
        assert position.token_id == "123456"
        assert position.pool.protocol.key == "uniswapv3"

    @pytest.mark.parametrize(
        "status,active,closed",
        [("IN_RANGE", True, False), ("out_range", True, False), ("CLOSED", False, True), ("closed", False, True)],
    )
    def test_status_helpers(self, status, active, closed):
        position = Position.model_validate({**POSITION_JSON, "status": status})
        assert position.is_active() is active
        assert position.is_closed() is closed

    def test_total_value_prefers_current_amounts(self):
        token = {"address": "0xa", "symbol": "A", "name": "A", "decimals": 18}
        amounts = [
            {"token": token, "balance": "1", "price": 2.0, "value": 100.0},
            {"token": token, "balance": "2", "price": 2.0, "value": 50.5},
        ]
        position = Position.model_validate({**POSITION_JSON, "currentAmounts": amounts})
        assert position.total_value() == 150.5

    def test_unknown_fields_round_trip(self):
        position = Position.model_validate({**POSITION_JSON, "newField": {"source": "v2"}})
        assert position.additional_fields == {"newField": {"source": "v2"}}
        assert Position.model_validate(position.to_api_dict()) == position

    def test_total_value_falls_back(self):
        assert Position.model_validate(POSITION_JSON).total_value() == 1250.75


class TestTransaction:
    def test_type_alias(self):
        tx = Transaction.model_validate(TRANSACTION_JSON)
        assert tx.transaction_type == "swap"
        assert tx.to_api_dict()["type"] == "swap"

    def test_age_and_recency(self):
        tx = Transaction.model_validate(TRANSACTION_JSON)
        assert tx.age_seconds(now=1700000600) == 600
        assert tx.is_recent(now=1700000600)
        assert not tx.is_recent(now=1700003600)
        assert tx.age_seconds(now=1600000000) == 0

    def test_unknown_fields_round_trip(self):
        tx = Transaction.model_validate({**TRANSACTION_JSON, "blockNumber": 18500000})
        assert tx.additional_fields == {"blockNumber": 18500000}
        assert Transaction.model_validate(tx.to_api_dict()) == tx

    def test_negative_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            Transaction.model_validate({**TRANSACTION_JSON, "timestamp": -1})


def test_paginated_response():
    page = PaginatedResponse[ChainInfo].model_validate(
        {"data": [{"id": 1, "name": "Ethereum"}], "total": 3, "hasMore": True}
    )
    assert page.data[0].name == "Ethereum"
    assert page.has_more is True
    assert page.offset is None
