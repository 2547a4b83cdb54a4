"""
Constant Product Market Maker (CPMM) pricing for the simulated pool.

Zero-fee, floating-point variant of the x * y = k curve:
- token1 is the base asset, token2 the pooled token
- price is quoted as token2 per token1
- token2's USD value is derived from token1's external USD reference price

Every function here is read-only: it previews an effect without mutating
the pool.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import PoolInvariantError
from ..state.intents import TradeIntent, TradeKind
from ..state.pools import PoolState


def get_current_price(pool: PoolState) -> float:
    """
    Pool exchange rate: token2 per token1.

    Raises:
        PoolInvariantError: If the token1 reserve is zero
    """
    if pool.token1_reserve == 0:
        raise PoolInvariantError("token1_reserve is zero; price is undefined")
    return pool.token2_reserve / pool.token1_reserve


def get_token2_price_usd(pool: PoolState) -> float:
    """USD value of one token2, converted through the pool rate."""
    return pool.token1_price / get_current_price(pool)


def get_slippage_percentage(pool: PoolState) -> float:
    """
    Signed deviation (%) of the pool-implied token1 USD price from the reference.

    The implied price is back-computed as ``token2_price_usd * current_price``,
    which equals ``token1_price`` up to rounding, so the result is ~0.
    """
    current_price = get_current_price(pool)
    market_price = pool.token1_price
    implied_token1_price = get_token2_price_usd(pool) * current_price
    return (implied_token1_price - market_price) / market_price * 100


def get_k(pool: PoolState) -> float:
    """CPMM invariant k = token1_reserve * token2_reserve."""
    return pool.get_constant_product()


def calculate_output_amount(
    pool: PoolState,
    input_amount: float,
    input_reserve: float,
    output_reserve: float,
) -> float:
    """
    Output of an exact-in swap.

    Formula:
        output = output_reserve - k / (input_reserve + input_amount)

    ``k`` is the live pool product, not ``input_reserve * output_reserve``;
    pass the pool's own reserves for a meaningful quote.

    Returns:
        Output amount (0.0 when input_amount <= 0)
    """
    if input_amount <= 0:
        return 0.0
    k = get_k(pool)
    new_input_reserve = input_reserve + input_amount
    new_output_reserve = k / new_input_reserve
    return output_reserve - new_output_reserve


def calculate_price_impact(
    pool: PoolState,
    input_amount: float,
    input_reserve: float,
    output_reserve: float,
) -> str:
    """
    Absolute deviation (%) of a trade's effective price from the marginal price.

    Returns:
        The percentage formatted with two decimals ("0.00" when input_amount <= 0)
    """
    if input_amount <= 0:
        return "0.00"

    initial_price = output_reserve / input_reserve
    output_amount = calculate_output_amount(pool, input_amount, input_reserve, output_reserve)
    effective_price = output_amount / input_amount
    price_impact = abs((effective_price - initial_price) / initial_price) * 100
    return f"{price_impact:.2f}"


def trade_reserves(pool: PoolState, kind: TradeKind) -> Tuple[float, float]:
    """(input_reserve, output_reserve) for a trade direction."""
    if kind is TradeKind.BUY:
        return pool.token1_reserve, pool.token2_reserve
    return pool.token2_reserve, pool.token1_reserve


@dataclass(frozen=True)
class TradeQuote:
    """Preview of a single trade against the current pool."""
    output_amount: float
    output_token: str
    price_impact: str
    price_after: float


def quote_trade(pool: PoolState, intent: TradeIntent) -> TradeQuote:
    """Preview a trade intent without mutating the pool."""
    input_reserve, output_reserve = trade_reserves(pool, intent.kind)
    if intent.kind is TradeKind.BUY:
        output_token = pool.token2_symbol
    else:
        output_token = pool.token1_symbol

    output_amount = calculate_output_amount(pool, intent.amount, input_reserve, output_reserve)
    price_impact = calculate_price_impact(pool, intent.amount, input_reserve, output_reserve)

    if intent.is_noop:
        price_after = get_current_price(pool)
    elif intent.kind is TradeKind.BUY:
        price_after = (pool.token2_reserve - output_amount) / (pool.token1_reserve + intent.amount)
    else:
        price_after = (pool.token2_reserve + intent.amount) / (pool.token1_reserve - output_amount)

    return TradeQuote(
        output_amount=output_amount,
        output_token=output_token,
        price_impact=price_impact,
        price_after=price_after,
    )
