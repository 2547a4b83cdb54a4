"""
Derived market metrics for display.

Everything here is computed from a ``PoolState`` and a price history; no
metric is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..state.history import PriceHistoryPoint
from ..state.pools import PoolState
from .cpmm import get_current_price, get_k, get_slippage_percentage, get_token2_price_usd

HIGH_SLIPPAGE_THRESHOLD_PCT = 5.0


def market_cap(pool: PoolState) -> float:
    """USD value of the pooled token2 (share of supply in pool * supply * USD price)."""
    share = pool.token2_reserve / pool.token2_total_supply
    return share * pool.token2_total_supply * get_token2_price_usd(pool)


def pool_share_percentage(pool: PoolState) -> float:
    """Fraction of token2 total supply held by the pool, in percent."""
    return pool.token2_reserve / pool.token2_total_supply * 100


def available_supply(pool: PoolState) -> float:
    """token2 not held by the pool."""
    return pool.token2_total_supply - pool.token2_reserve


def reserve_values_usd(pool: PoolState) -> Tuple[float, float]:
    """(token1 reserve value, token2 reserve value) in USD."""
    return (
        pool.token1_reserve * pool.token1_price,
        pool.token2_reserve * get_token2_price_usd(pool),
    )


def is_high_slippage(slippage_pct: float) -> bool:
    return abs(slippage_pct) > HIGH_SLIPPAGE_THRESHOLD_PCT


def price_change_percentage(history: Sequence[PriceHistoryPoint]) -> float:
    """USD price change from the oldest to the newest point (0.0 with fewer than two)."""
    if len(history) < 2:
        return 0.0
    first = history[0].price_usd
    last = history[-1].price_usd
    return (last - first) / first * 100


@dataclass(frozen=True)
class HistoryStats:
    low: float
    high: float
    average: float


def history_stats(history: Sequence[PriceHistoryPoint]) -> HistoryStats:
    """Min / max / mean USD price over the history (zeros when empty)."""
    if not history:
        return HistoryStats(low=0.0, high=0.0, average=0.0)
    prices = [p.price_usd for p in history]
    return HistoryStats(low=min(prices), high=max(prices), average=sum(prices) / len(prices))


@dataclass(frozen=True)
class PoolMetrics:
    """Everything a dashboard renders for the current pool."""
    price: float
    price_usd: float
    slippage_pct: float
    high_slippage: bool
    k: float
    market_cap: float
    pool_share_pct: float
    available_supply: float
    token1_reserve_usd: float
    token2_reserve_usd: float
    price_change_pct: float
    history: HistoryStats


def pool_metrics(pool: PoolState, history: Sequence[PriceHistoryPoint] = ()) -> PoolMetrics:
    slippage = get_slippage_percentage(pool)
    token1_value, token2_value = reserve_values_usd(pool)
    return PoolMetrics(
        price=get_current_price(pool),
        price_usd=get_token2_price_usd(pool),
        slippage_pct=slippage,
        high_slippage=is_high_slippage(slippage),
        k=get_k(pool),
        market_cap=market_cap(pool),
        pool_share_pct=pool_share_percentage(pool),
        available_supply=available_supply(pool),
        token1_reserve_usd=token1_value,
        token2_reserve_usd=token2_value,
        price_change_pct=price_change_percentage(history),
        history=history_stats(history),
    )
