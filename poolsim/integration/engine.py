"""
Pool simulation session (imperative shell around the functional core).

``PoolEngine`` is the single owner of a session's mutable state:
- the current ``PoolState`` (swapped wholesale on every commit)
- the bounded price history and transaction log
- the configuration lock (UNLOCKED -> LOCKED via ``simulate()``,
  back to UNLOCKED via ``reset()``)

Each batch runs validate-then-apply under one lock acquisition.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..core.batch import BatchResult, execute_liquidity_batch, execute_trade_batch
from ..core.cpmm import (
    TradeQuote,
    calculate_output_amount,
    calculate_price_impact,
    get_current_price,
    get_k,
    get_slippage_percentage,
    get_token2_price_usd,
    quote_trade,
)
from ..core.liquidity import calculate_proportional_amount, rebalance_intent, validate_token2_amount
from ..core.metrics import PoolMetrics, pool_metrics
from ..errors import ConfigError, PoolInvariantError, SessionLockedError
from ..state.history import PriceHistory, PriceHistoryPoint, Transaction, TransactionLog
from ..state.intents import LiquidityIntent, Token2Operation, TradeIntent
from ..state.pools import CONFIGURABLE_FIELDS, PoolState
from .config import SimConfig, load_config

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    """Configuration lock state."""
    UNLOCKED = "unlocked"
    LOCKED = "locked"


def _check_config_value(name: str, value: Any) -> Any:
    if name == "token2_symbol":
        if not isinstance(value, str) or not value.strip():
            raise ConfigError("token2_symbol must be a non-empty string")
        return value.strip()
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {type(value).__name__}")
    v = float(value)
    if not math.isfinite(v) or v <= 0:
        raise ConfigError(f"{name} must be a finite positive number: {value}")
    return v


class PoolEngine:
    """
    One simulation session over one pool.

    Args:
        config: Defaults the session starts from and resets to
        clock: Wall-clock source for history timestamps
    """

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or SimConfig()
        self._clock = clock
        self._lock = threading.RLock()
        self._pool = self._config.initial_pool()
        self._price_history = PriceHistory(limit=self._config.price_history_limit)
        self._transactions = TransactionLog(limit=self._config.transaction_log_limit)
        self._status = SessionStatus.UNLOCKED

    @classmethod
    def from_config(
        cls,
        path: Optional[Union[str, Path]] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> "PoolEngine":
        """Build a session from ``load_config()`` (YAML file + environment)."""
        return cls(load_config(path), clock=clock)

    # -------------------- Session state ----------------------------

    @property
    def config(self) -> SimConfig:
        return self._config

    @property
    def pool(self) -> PoolState:
        return self._pool

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_locked(self) -> bool:
        return self._status is SessionStatus.LOCKED

    def price_history(self) -> List[PriceHistoryPoint]:
        """Price points, oldest first."""
        with self._lock:
            return self._price_history.points()

    def transactions(self) -> List[Transaction]:
        """Transaction records, newest first."""
        with self._lock:
            return self._transactions.records()

    # -------------------- Read-only pricing ----------------------------

    def get_current_price(self) -> float:
        return get_current_price(self._pool)

    def get_token2_price_usd(self) -> float:
        return get_token2_price_usd(self._pool)

    def get_slippage_percentage(self) -> float:
        return get_slippage_percentage(self._pool)

    def get_k(self) -> float:
        return get_k(self._pool)

    def calculate_output_amount(
        self, input_amount: float, input_reserve: float, output_reserve: float
    ) -> float:
        return calculate_output_amount(self._pool, input_amount, input_reserve, output_reserve)

    def calculate_price_impact(
        self, input_amount: float, input_reserve: float, output_reserve: float
    ) -> str:
        return calculate_price_impact(self._pool, input_amount, input_reserve, output_reserve)

    def validate_token2_amount(
        self, amount: float, operation: Union[Token2Operation, str]
    ) -> Optional[str]:
        return validate_token2_amount(self._pool, amount, Token2Operation(operation))

    def calculate_proportional_amount(self, input_amount: float, input_is_token1: bool) -> float:
        return calculate_proportional_amount(self._pool, input_amount, input_is_token1)

    def rebalance_intent(
        self,
        intent: LiquidityIntent,
        *,
        token1_amount: Optional[float] = None,
        token2_amount: Optional[float] = None,
    ) -> LiquidityIntent:
        return rebalance_intent(
            self._pool, intent, token1_amount=token1_amount, token2_amount=token2_amount
        )

    def quote_trade(self, intent: TradeIntent) -> TradeQuote:
        return quote_trade(self._pool, intent)

    def metrics(self) -> PoolMetrics:
        with self._lock:
            return pool_metrics(self._pool, self._price_history.points())

    # -------------------- State machine ----------------------------

    def configure(self, **changes: Any) -> PoolState:
        """
        Edit pool configuration while the session is unlocked.

        Accepted fields: token2_symbol, token2_total_supply, token1_price,
        token1_reserve, token2_reserve.

        Raises:
            SessionLockedError: If ``simulate()`` has locked the session
            ConfigError: On unknown fields or invalid values
        """
        unknown = set(changes) - set(CONFIGURABLE_FIELDS)
        if unknown:
            raise ConfigError(f"cannot configure fields: {sorted(unknown)}")
        checked = {name: _check_config_value(name, value) for name, value in changes.items()}

        with self._lock:
            if self.is_locked:
                raise SessionLockedError("pool configuration is locked; reset to edit")

            supply = checked.get("token2_total_supply", self._pool.token2_total_supply)
            reserve = checked.get("token2_reserve", self._pool.token2_reserve)
            if reserve > supply:
                raise ConfigError(f"Reserve cannot exceed total supply of {supply:,.0f}")
            try:
                new_pool = replace(self._pool, **checked)
            except PoolInvariantError as exc:
                raise ConfigError(str(exc)) from exc

            price_moved = (
                new_pool.token1_reserve != self._pool.token1_reserve
                or new_pool.token2_reserve != self._pool.token2_reserve
                or new_pool.token1_price != self._pool.token1_price
            )
            self._pool = new_pool
            if price_moved:
                self._record_price()
            logger.info("pool configured: %s", sorted(checked))
            return new_pool

    def simulate(self) -> PriceHistoryPoint:
        """Lock the configuration and record the starting price point."""
        with self._lock:
            if self.is_locked:
                raise SessionLockedError("session is already locked")
            self._status = SessionStatus.LOCKED
            point = self._record_price()
            logger.info("session locked at price %s", point.price)
            return point

    def reset(self) -> PoolState:
        """
        Restore default reserves, clear both histories and unlock.

        Symbols, reference price and total supply keep their edited values
        unless the default reserve no longer fits the edited supply, in which
        case the whole default pool is restored.
        """
        with self._lock:
            try:
                self._pool = self._pool.with_reserves(
                    self._config.token1_reserve, self._config.token2_reserve
                )
            except PoolInvariantError:
                self._pool = self._config.initial_pool()
            self._price_history.clear()
            self._transactions.clear()
            self._status = SessionStatus.UNLOCKED
            logger.info("session reset: %r", self._pool)
            return self._pool

    # -------------------- Batches ----------------------------

    def execute_trade_batch(self, intents: Sequence[TradeIntent]) -> BatchResult:
        """Validate and execute a trade batch, committing the pool once."""
        with self._lock:
            result = execute_trade_batch(self._pool, intents, self._clock())
            self._commit(result, log_limit=self._config.trade_log_limit)
            return result

    def execute_liquidity_batch(self, intents: Sequence[LiquidityIntent]) -> BatchResult:
        """Validate and execute a liquidity batch, committing the pool once."""
        with self._lock:
            result = execute_liquidity_batch(self._pool, intents, self._clock())
            self._commit(result, log_limit=self._config.liquidity_log_limit)
            return result

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the whole session."""
        from .snapshot import snapshot_from_engine

        return snapshot_from_engine(self)

    # -------------------- Internals ----------------------------

    def _commit(self, result: BatchResult, *, log_limit: int) -> None:
        if not result.ok:
            return
        if result.transactions:
            self._pool = result.pool
            self._transactions.prepend(result.transactions, limit=log_limit)
            self._record_price()
        logger.info(
            "batch committed: %d applied, %d skipped, reserves=(%s, %s)",
            result.applied, len(result.rejected),
            self._pool.token1_reserve, self._pool.token2_reserve,
        )

    def _record_price(self) -> PriceHistoryPoint:
        point = PriceHistoryPoint(
            timestamp=float(self._clock()),
            price=get_current_price(self._pool),
            price_usd=get_token2_price_usd(self._pool),
        )
        self._price_history.append(point)
        return point

    def __repr__(self) -> str:
        return f"PoolEngine({self._pool!r}, status={self._status.value})"
