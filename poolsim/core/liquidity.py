"""
Liquidity management: supply validation, proportional amounts, add/remove.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..errors import LiquidityRejectedError, PoolInvariantError
from ..state.intents import LiquidityIntent, LiquidityKind, Token2Operation
from ..state.pools import PoolState


def format_amount(amount: float) -> str:
    """Human-readable amount with thousands separators and at most 3 decimals."""
    s = f"{amount:,.3f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def validate_token2_amount(
    pool: PoolState,
    amount: float,
    operation: Token2Operation,
) -> Optional[str]:
    """
    Check a token2 amount against the pool's supply limits.

    Rules:
        add:    amount <= token2_total_supply - token2_reserve
        remove: amount <= token2_reserve
        sell:   amount <= token2_total_supply - token2_reserve

    For ``sell`` the non-pooled supply is treated as what is circulating and
    therefore sellable.

    Returns:
        None if the amount is acceptable, otherwise a descriptive message
    """
    operation = Token2Operation(operation)
    available_supply = pool.token2_total_supply - pool.token2_reserve
    sym = pool.token2_symbol

    if operation is Token2Operation.ADD and amount > available_supply:
        return (
            f"Cannot add {format_amount(amount)} {sym}. "
            f"Only {format_amount(available_supply)} available from total supply."
        )

    if operation is Token2Operation.REMOVE and amount > pool.token2_reserve:
        return (
            f"Cannot remove {format_amount(amount)} {sym}. "
            f"Only {format_amount(pool.token2_reserve)} available in pool."
        )

    if operation is Token2Operation.SELL and amount > available_supply:
        return (
            f"Cannot sell {format_amount(amount)} {sym}. "
            f"Only {format_amount(available_supply)} available from circulating supply."
        )

    return None


def calculate_proportional_amount(
    pool: PoolState,
    input_amount: float,
    input_is_token1: bool,
) -> float:
    """
    Amount of the other token that keeps the current pool ratio.

    ratio = token2_reserve / token1_reserve
        token1 drives: output = input_amount * ratio
        token2 drives: output = input_amount / ratio
    """
    current_ratio = pool.token2_reserve / pool.token1_reserve
    if input_is_token1:
        return input_amount * current_ratio
    return input_amount / current_ratio


def rebalance_intent(
    pool: PoolState,
    intent: LiquidityIntent,
    *,
    token1_amount: Optional[float] = None,
    token2_amount: Optional[float] = None,
) -> LiquidityIntent:
    """
    Return a copy of ``intent`` with one side edited and the other recomputed.

    Exactly one of ``token1_amount`` / ``token2_amount`` must be given.
    """
    if (token1_amount is None) == (token2_amount is None):
        raise ValueError("exactly one of token1_amount, token2_amount must be given")
    if token1_amount is not None:
        return replace(
            intent,
            token1_amount=token1_amount,
            token2_amount=calculate_proportional_amount(pool, token1_amount, True),
        )
    return replace(
        intent,
        token1_amount=calculate_proportional_amount(pool, token2_amount, False),
        token2_amount=token2_amount,
    )


def _require_non_negative(intent: LiquidityIntent) -> None:
    if intent.token1_amount < 0 or intent.token2_amount < 0:
        raise LiquidityRejectedError(
            f"Liquidity amounts must be non-negative: ({intent.token1_amount}, {intent.token2_amount})"
        )


def apply_add_liquidity(pool: PoolState, intent: LiquidityIntent) -> PoolState:
    """
    Add the intent's amounts to the reserves as given (no ratio enforcement).

    Raises:
        LiquidityRejectedError: If the new token2 reserve would exceed total supply
    """
    if intent.kind is not LiquidityKind.ADD:
        raise ValueError(f"expected an add intent, got {intent.kind.value}")
    _require_non_negative(intent)
    try:
        return pool.with_reserves(
            pool.token1_reserve + intent.token1_amount,
            pool.token2_reserve + intent.token2_amount,
        )
    except PoolInvariantError as exc:
        raise LiquidityRejectedError(f"Cannot add liquidity: {exc}") from exc


def apply_remove_liquidity(pool: PoolState, intent: LiquidityIntent) -> PoolState:
    """
    Remove the intent's amounts from the reserves.

    Raises:
        LiquidityRejectedError: If the removal exceeds current reserves or
            would leave either reserve at zero or below
    """
    if intent.kind is not LiquidityKind.REMOVE:
        raise ValueError(f"expected a remove intent, got {intent.kind.value}")
    _require_non_negative(intent)

    if intent.token1_amount > pool.token1_reserve or intent.token2_amount > pool.token2_reserve:
        raise LiquidityRejectedError("Cannot remove more liquidity than available in pool")

    new_token1_reserve = pool.token1_reserve - intent.token1_amount
    new_token2_reserve = pool.token2_reserve - intent.token2_amount
    if new_token1_reserve <= 0 or new_token2_reserve <= 0:
        raise LiquidityRejectedError("Cannot remove all liquidity from pool")

    return pool.with_reserves(new_token1_reserve, new_token2_reserve)
