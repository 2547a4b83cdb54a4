"""
Intent data models for the pool simulator.

Intents are user-authored requests (trade, add/remove liquidity) that are
collected into a batch and executed in order against one pool.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class TradeKind(Enum):
    """Trade direction. BUY spends token1 for token2, SELL spends token2 for token1."""
    BUY = "buy"
    SELL = "sell"


class LiquidityKind(Enum):
    """Liquidity operation type."""
    ADD = "add"
    REMOVE = "remove"


class Token2Operation(Enum):
    """Operations whose token2 amount is checked against supply limits."""
    ADD = "add"
    REMOVE = "remove"
    SELL = "sell"


def _require_finite(value: object, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {type(value).__name__}")
    v = float(value)
    if not math.isfinite(v):
        raise ValueError(f"{name} must be finite: {value}")
    return v


@dataclass(frozen=True)
class TradeIntent:
    """
    One slot of a trade batch.

    Amounts <= 0 are accepted here and skipped at execution time.
    """
    kind: TradeKind
    amount: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.kind, TradeKind):
            object.__setattr__(self, "kind", TradeKind(self.kind))
        object.__setattr__(self, "amount", _require_finite(self.amount, name="amount"))

    @property
    def is_noop(self) -> bool:
        return self.amount <= 0


@dataclass(frozen=True)
class LiquidityIntent:
    """
    One slot of a liquidity batch.

    The caller is expected to keep the two amounts at the pool ratio (see
    ``poolsim.core.liquidity.rebalance_intent``); execution does not enforce it.
    """
    kind: LiquidityKind
    token1_amount: float = 0.0
    token2_amount: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.kind, LiquidityKind):
            object.__setattr__(self, "kind", LiquidityKind(self.kind))
        object.__setattr__(
            self, "token1_amount", _require_finite(self.token1_amount, name="token1_amount")
        )
        object.__setattr__(
            self, "token2_amount", _require_finite(self.token2_amount, name="token2_amount")
        )

    @property
    def is_noop(self) -> bool:
        return self.token1_amount <= 0 and self.token2_amount <= 0
