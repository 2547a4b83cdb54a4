"""
Batch execution (functional core).

A batch is an ordered list of intents executed against one pool:
1. Validate every intent against the pre-batch pool (fail-closed: the first
   failure rejects the whole batch and nothing is applied)
2. Apply intents in order, each one against the running post-state of the
   previous one
3. Return (next_pool, records); the caller commits the pool once

Intents with non-positive amounts are skipped without a record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..errors import BatchValidationError, LiquidityRejectedError, PoolInvariantError
from ..state.history import Transaction, TransactionKind
from ..state.intents import LiquidityIntent, LiquidityKind, Token2Operation, TradeIntent, TradeKind
from ..state.pools import PoolState
from .cpmm import get_current_price
from .liquidity import apply_add_liquidity, apply_remove_liquidity, validate_token2_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentRejection:
    """A single intent skipped during the apply phase."""
    index: int
    message: str


@dataclass(frozen=True)
class BatchResult:
    """
    Result of executing one batch.

    On ``ok=False`` the batch was rejected as a whole: ``pool`` is the
    unchanged input pool and ``transactions`` is empty.
    """
    ok: bool
    pool: PoolState
    transactions: Tuple[Transaction, ...] = ()
    rejected: Tuple[IntentRejection, ...] = ()
    error: Optional[str] = None

    @property
    def applied(self) -> int:
        return len(self.transactions)


def _validate_trades(pool: PoolState, intents: Sequence[TradeIntent]) -> Optional[str]:
    for intent in intents:
        if intent.is_noop:
            continue
        if intent.kind is TradeKind.SELL:
            err = validate_token2_amount(pool, intent.amount, Token2Operation.SELL)
            if err:
                return err
    return None


def _apply_trade(pool: PoolState, intent: TradeIntent) -> Tuple[PoolState, float]:
    # k from the running pool, so earlier trades in the batch move the price.
    k = pool.get_constant_product()
    if intent.kind is TradeKind.BUY:
        new_token1_reserve = pool.token1_reserve + intent.amount
        new_token2_reserve = k / new_token1_reserve
        output_amount = pool.token2_reserve - new_token2_reserve
    else:
        new_token2_reserve = pool.token2_reserve + intent.amount
        new_token1_reserve = k / new_token2_reserve
        output_amount = pool.token1_reserve - new_token1_reserve
    return pool.with_reserves(new_token1_reserve, new_token2_reserve), output_amount


def execute_trade_batch(
    pool: PoolState,
    intents: Sequence[TradeIntent],
    timestamp: float,
) -> BatchResult:
    """
    Execute a batch of trades sequentially.

    Sell amounts are validated against the pre-batch pool. A running state
    that would break the pool invariant (e.g. several sells pushing the token2
    reserve past total supply) also rejects the whole batch.
    """
    err = _validate_trades(pool, intents)
    if err:
        logger.warning("trade batch rejected: %s", err)
        return BatchResult(ok=False, pool=pool, error=err)

    current = pool
    results: List[Transaction] = []
    for index, intent in enumerate(intents):
        if intent.is_noop:
            continue
        try:
            current, output_amount = _apply_trade(current, intent)
        except PoolInvariantError as exc:
            msg = f"Trade {index + 1} ({intent.kind.value} {intent.amount}) rejected: {exc}"
            logger.warning("trade batch rejected: %s", msg)
            return BatchResult(ok=False, pool=pool, error=msg)

        is_buy = intent.kind is TradeKind.BUY
        results.append(
            Transaction(
                timestamp=timestamp,
                kind=TransactionKind.BUY if is_buy else TransactionKind.SELL,
                input_amount=intent.amount,
                input_token=pool.token1_symbol if is_buy else pool.token2_symbol,
                output_amount=output_amount,
                output_token=pool.token2_symbol if is_buy else pool.token1_symbol,
                price=get_current_price(current),
            )
        )
        logger.debug(
            "trade %d %s %s -> %s (k=%s)",
            index, intent.kind.value, intent.amount, output_amount, current.get_constant_product(),
        )

    return BatchResult(ok=True, pool=current, transactions=tuple(results))


def _validate_liquidity(pool: PoolState, intents: Sequence[LiquidityIntent]) -> Optional[str]:
    for index, intent in enumerate(intents):
        if intent.is_noop:
            continue
        if intent.token1_amount < 0 or intent.token2_amount < 0:
            return f"Liquidity operation {index + 1} has a negative amount"
        if intent.kind is LiquidityKind.ADD:
            err = validate_token2_amount(pool, intent.token2_amount, Token2Operation.ADD)
        else:
            err = validate_token2_amount(pool, intent.token2_amount, Token2Operation.REMOVE)
        if err:
            return err
    return None


def execute_liquidity_batch(
    pool: PoolState,
    intents: Sequence[LiquidityIntent],
    timestamp: float,
) -> BatchResult:
    """
    Execute a batch of liquidity operations sequentially.

    Token2 amounts are validated against the pre-batch pool (all-or-nothing).
    In the apply phase an intent that cannot be applied to the running pool
    is skipped and reported in ``rejected``; the rest of the batch proceeds.
    """
    err = _validate_liquidity(pool, intents)
    if err:
        logger.warning("liquidity batch rejected: %s", err)
        return BatchResult(ok=False, pool=pool, error=err)

    current = pool
    results: List[Transaction] = []
    rejected: List[IntentRejection] = []
    for index, intent in enumerate(intents):
        if intent.is_noop:
            continue
        try:
            if intent.kind is LiquidityKind.ADD:
                current = apply_add_liquidity(current, intent)
                kind = TransactionKind.ADD_LIQUIDITY
            else:
                current = apply_remove_liquidity(current, intent)
                kind = TransactionKind.REMOVE_LIQUIDITY
        except LiquidityRejectedError as exc:
            logger.warning("liquidity operation %d skipped: %s", index, exc)
            rejected.append(IntentRejection(index=index, message=str(exc)))
            continue

        results.append(
            Transaction(
                timestamp=timestamp,
                kind=kind,
                input_amount=intent.token1_amount,
                input_token=pool.token1_symbol,
                output_amount=intent.token2_amount,
                output_token=pool.token2_symbol,
                price=get_current_price(current),
                token1_amount=intent.token1_amount,
                token2_amount=intent.token2_amount,
            )
        )
        logger.debug(
            "liquidity %d %s (%s, %s) -> reserves (%s, %s)",
            index, intent.kind.value, intent.token1_amount, intent.token2_amount,
            current.token1_reserve, current.token2_reserve,
        )

    return BatchResult(ok=True, pool=current, transactions=tuple(results), rejected=tuple(rejected))


def execute_trade_batch_or_raise(
    pool: PoolState,
    intents: Sequence[TradeIntent],
    timestamp: float,
) -> BatchResult:
    """Like ``execute_trade_batch()`` but raises ``BatchValidationError`` on rejection."""
    result = execute_trade_batch(pool, intents, timestamp)
    if not result.ok:
        raise BatchValidationError(result.error or "trade batch rejected")
    return result


def execute_liquidity_batch_or_raise(
    pool: PoolState,
    intents: Sequence[LiquidityIntent],
    timestamp: float,
) -> BatchResult:
    """Like ``execute_liquidity_batch()`` but raises ``BatchValidationError`` on rejection."""
    result = execute_liquidity_batch(pool, intents, timestamp)
    if not result.ok:
        raise BatchValidationError(result.error or "liquidity batch rejected")
    return result
