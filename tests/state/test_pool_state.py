from __future__ import annotations

import math

import pytest

from poolsim.errors import PoolInvariantError, PoolSimError
from poolsim.state.intents import LiquidityIntent, LiquidityKind, TradeIntent, TradeKind
from poolsim.state.pools import PoolState, pool_from_dict, pool_to_dict


class TestPoolInvariant:
    def test_defaults(self):
        pool = PoolState()
        assert (pool.token1_symbol, pool.token2_symbol) == ("ETH", "SILK")
        assert pool.token1_reserve == 3.8
        assert pool.token2_reserve == 10_000_000
        assert pool.token1_price == 2700
        assert pool.token2_total_supply == 1_000_000_000

    def test_ints_are_normalized_to_floats(self):
        pool = PoolState(token1_reserve=4, token2_reserve=100, token2_total_supply=1_000)
        assert isinstance(pool.token1_reserve, float)
        assert pool == PoolState(token1_reserve=4.0, token2_reserve=100.0, token2_total_supply=1_000.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"token1_reserve": 0},
            {"token2_reserve": -1},
            {"token1_price": 0},
            {"token2_total_supply": 0},
            {"token2_reserve": 1_000.5, "token2_total_supply": 1_000},
            {"token1_reserve": math.inf},
            {"token2_reserve": math.nan},
            {"token1_reserve": True},
            {"token2_symbol": "  "},
        ],
    )
    def test_rejects_invalid_state(self, kwargs):
        with pytest.raises(PoolInvariantError):
            PoolState(**kwargs)

    def test_invariant_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            PoolState(token1_reserve=-3)
        assert issubclass(PoolInvariantError, PoolSimError)

    def test_reserve_may_equal_supply(self):
        pool = PoolState(token2_reserve=1_000, token2_total_supply=1_000)
        assert pool.token2_reserve == pool.token2_total_supply

    def test_with_reserves_revalidates(self):
        pool = PoolState(token1_reserve=10, token2_reserve=900, token2_total_supply=1_000)
        moved = pool.with_reserves(11, 950)
        assert (moved.token1_reserve, moved.token2_reserve) == (11, 950)
        assert (pool.token1_reserve, pool.token2_reserve) == (10, 900)
        with pytest.raises(PoolInvariantError):
            pool.with_reserves(11, 1_001)

    def test_constant_product(self):
        assert PoolState(token1_reserve=4, token2_reserve=25).get_constant_product() == 100

    def test_dict_round_trip(self):
        pool = PoolState(token2_symbol="FOO", token1_reserve=2, token2_reserve=500, token2_total_supply=600)
        d = pool_to_dict(pool)
        assert d["token2_symbol"] == "FOO"
        assert pool_from_dict(d) == pool

    def test_from_dict_missing_field(self):
        d = pool_to_dict(PoolState())
        del d["token1_price"]
        with pytest.raises(KeyError):
            pool_from_dict(d)


class TestIntents:
    def test_trade_kind_coerced_from_value(self):
        intent = TradeIntent("sell", 5)
        assert intent.kind is TradeKind.SELL
        assert intent.amount == 5.0

    def test_trade_noop(self):
        assert TradeIntent(TradeKind.BUY).is_noop
        assert TradeIntent(TradeKind.BUY, -1).is_noop
        assert not TradeIntent(TradeKind.BUY, 0.001).is_noop

    def test_unknown_trade_kind(self):
        with pytest.raises(ValueError):
            TradeIntent("swap", 1)

    def test_non_finite_amounts_rejected(self):
        with pytest.raises(ValueError):
            TradeIntent(TradeKind.BUY, math.nan)
        with pytest.raises(ValueError):
            LiquidityIntent(LiquidityKind.ADD, 1, math.inf)

    def test_liquidity_noop_needs_both_sides_empty(self):
        assert LiquidityIntent(LiquidityKind.ADD).is_noop
        assert not LiquidityIntent(LiquidityKind.ADD, 0, 1).is_noop
        assert not LiquidityIntent("remove", 1, 0).is_noop
