# [TESTER] v1

from __future__ import annotations

from types import SimpleNamespace

import pytest

from poolsim.core.cpmm import (
    calculate_output_amount,
    calculate_price_impact,
    get_current_price,
    get_k,
    get_slippage_percentage,
    get_token2_price_usd,
    quote_trade,
)
from poolsim.errors import PoolInvariantError
from poolsim.state.intents import TradeIntent, TradeKind
from poolsim.state.pools import PoolState


def test_default_pool_prices() -> None:
    pool = PoolState()
    assert get_current_price(pool) == pytest.approx(10_000_000 / 3.8)
    assert get_token2_price_usd(pool) == pytest.approx(0.001026)
    assert get_k(pool) == pytest.approx(38_000_000)


def test_current_price_on_zero_reserve_is_an_invariant_violation() -> None:
    broken = SimpleNamespace(token1_reserve=0.0, token2_reserve=100.0)
    with pytest.raises(PoolInvariantError):
        get_current_price(broken)  # type: ignore[arg-type]


def test_slippage_formula_is_degenerate_zero() -> None:
    for pool in (PoolState(), PoolState(token1_reserve=7.3, token2_reserve=123_456.0, token1_price=1999.5)):
        assert get_slippage_percentage(pool) == pytest.approx(0.0, abs=1e-9)


def test_buy_one_token1_from_reference_pool() -> None:
    pool = PoolState(token1_reserve=3.8, token2_reserve=10_000_000)
    out = calculate_output_amount(pool, 1, pool.token1_reserve, pool.token2_reserve)
    assert out == pytest.approx(2_083_333.33, abs=0.01)


def test_output_amount_uses_pool_k_not_argument_product() -> None:
    pool = PoolState(token1_reserve=3.8, token2_reserve=10_000_000)
    # k stays 38_000_000 even though the reserve arguments are unrelated.
    out = calculate_output_amount(pool, 1, 1, 1)
    assert out == pytest.approx(1 - 38_000_000 / 2)


@pytest.mark.parametrize("amount", [0, -1, -0.5])
def test_non_positive_input_previews_nothing(amount: float) -> None:
    pool = PoolState()
    assert calculate_output_amount(pool, amount, pool.token1_reserve, pool.token2_reserve) == 0
    assert calculate_price_impact(pool, amount, pool.token1_reserve, pool.token2_reserve) == "0.00"


def test_price_impact_two_decimals() -> None:
    pool = PoolState(token1_reserve=3.8, token2_reserve=10_000_000)
    # effective / marginal = 3.8 / 4.8 -> 20.8333% impact
    assert calculate_price_impact(pool, 1, pool.token1_reserve, pool.token2_reserve) == "20.83"


def test_price_impact_grows_with_trade_size() -> None:
    pool = PoolState()
    small = float(calculate_price_impact(pool, 0.01, pool.token1_reserve, pool.token2_reserve))
    large = float(calculate_price_impact(pool, 2.0, pool.token1_reserve, pool.token2_reserve))
    assert small < large


def test_output_preview_does_not_mutate_pool() -> None:
    pool = PoolState()
    before = (pool.token1_reserve, pool.token2_reserve)
    calculate_output_amount(pool, 5, pool.token1_reserve, pool.token2_reserve)
    quote_trade(pool, TradeIntent(TradeKind.SELL, 1_000))
    assert (pool.token1_reserve, pool.token2_reserve) == before


def test_quote_buy_reports_token2_output_and_post_price() -> None:
    pool = PoolState(token1_reserve=3.8, token2_reserve=10_000_000)
    q = quote_trade(pool, TradeIntent(TradeKind.BUY, 1))
    assert q.output_token == "SILK"
    assert q.output_amount == pytest.approx(2_083_333.333, abs=0.01)
    assert q.price_impact == "20.83"
    assert q.price_after == pytest.approx((38_000_000 / 4.8) / 4.8)


def test_quote_sell_reports_token1_output() -> None:
    pool = PoolState(token1_reserve=10, token2_reserve=1_000)
    q = quote_trade(pool, TradeIntent(TradeKind.SELL, 1_000))
    # k = 10_000; t2 -> 2_000, t1 -> 5
    assert q.output_token == "ETH"
    assert q.output_amount == pytest.approx(5)
    assert q.price_after == pytest.approx(2_000 / 5)


def test_quote_noop_keeps_current_price() -> None:
    pool = PoolState()
    q = quote_trade(pool, TradeIntent(TradeKind.BUY, 0))
    assert q.output_amount == 0
    assert q.price_after == get_current_price(pool)
