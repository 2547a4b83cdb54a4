"""
Pool state for the two-asset constant-product pool.

The pool is an immutable value: every transition (trade, liquidity change,
configuration edit) produces a new ``PoolState`` via ``dataclasses.replace``
and the invariant is re-checked on construction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Dict

from ..errors import PoolInvariantError


DEFAULT_TOKEN1_SYMBOL = "ETH"
DEFAULT_TOKEN2_SYMBOL = "SILK"
DEFAULT_TOKEN1_RESERVE = 3.8
DEFAULT_TOKEN2_RESERVE = 10_000_000.0
DEFAULT_TOKEN1_PRICE = 2700.0
DEFAULT_TOKEN2_TOTAL_SUPPLY = 1_000_000_000.0

# Fields a caller may change through a configuration edit.
CONFIGURABLE_FIELDS = (
    "token2_symbol",
    "token2_total_supply",
    "token1_price",
    "token1_reserve",
    "token2_reserve",
)


def _require_finite(value: Any, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PoolInvariantError(f"{name} must be a number, got {type(value).__name__}")
    v = float(value)
    if not math.isfinite(v):
        raise PoolInvariantError(f"{name} must be finite: {value}")
    return v


@dataclass(frozen=True)
class PoolState:
    """
    State of the simulated liquidity pool.

    Attributes:
        token1_symbol: Base asset symbol (e.g. "ETH")
        token2_symbol: Pooled token symbol
        token1_reserve: Reserve of token1 (> 0)
        token2_reserve: Reserve of token2 (> 0, <= token2_total_supply)
        token1_price: External USD reference price of token1 (> 0)
        token2_total_supply: Total token2 supply, ceiling for token2_reserve
    """

    token1_symbol: str = DEFAULT_TOKEN1_SYMBOL
    token2_symbol: str = DEFAULT_TOKEN2_SYMBOL
    token1_reserve: float = DEFAULT_TOKEN1_RESERVE
    token2_reserve: float = DEFAULT_TOKEN2_RESERVE
    token1_price: float = DEFAULT_TOKEN1_PRICE
    token2_total_supply: float = DEFAULT_TOKEN2_TOTAL_SUPPLY

    def __post_init__(self) -> None:
        """Validate pool state invariants."""
        for name in ("token1_symbol", "token2_symbol"):
            sym = getattr(self, name)
            if not isinstance(sym, str) or not sym.strip():
                raise PoolInvariantError(f"{name} must be a non-empty string")

        # Normalize ints to floats so equality and snapshots are stable.
        for name in ("token1_reserve", "token2_reserve", "token1_price", "token2_total_supply"):
            object.__setattr__(self, name, _require_finite(getattr(self, name), name=name))

        if self.token1_reserve <= 0 or self.token2_reserve <= 0:
            raise PoolInvariantError(
                f"Reserves must be positive: ({self.token1_reserve}, {self.token2_reserve})"
            )
        if self.token1_price <= 0:
            raise PoolInvariantError(f"token1_price must be positive: {self.token1_price}")
        if self.token2_total_supply <= 0:
            raise PoolInvariantError(
                f"token2_total_supply must be positive: {self.token2_total_supply}"
            )
        if self.token2_reserve > self.token2_total_supply:
            raise PoolInvariantError(
                f"token2_reserve ({self.token2_reserve}) exceeds "
                f"token2_total_supply ({self.token2_total_supply})"
            )

    def get_constant_product(self) -> float:
        """Compute k = token1_reserve * token2_reserve."""
        return self.token1_reserve * self.token2_reserve

    def with_reserves(self, token1_reserve: float, token2_reserve: float) -> "PoolState":
        """Return a copy with new reserves (re-validated)."""
        return replace(self, token1_reserve=token1_reserve, token2_reserve=token2_reserve)

    def __repr__(self) -> str:
        return (
            f"PoolState({self.token1_symbol}/{self.token2_symbol}, "
            f"reserves=({self.token1_reserve}, {self.token2_reserve}), "
            f"token1_price={self.token1_price}, supply={self.token2_total_supply})"
        )


def pool_to_dict(pool: PoolState) -> Dict[str, Any]:
    """Serialize a PoolState to a plain dict."""
    return {
        "token1_symbol": pool.token1_symbol,
        "token2_symbol": pool.token2_symbol,
        "token1_reserve": pool.token1_reserve,
        "token2_reserve": pool.token2_reserve,
        "token1_price": pool.token1_price,
        "token2_total_supply": pool.token2_total_supply,
    }


def pool_from_dict(d: Dict[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    return PoolState(
        token1_symbol=d["token1_symbol"],
        token2_symbol=d["token2_symbol"],
        token1_reserve=d["token1_reserve"],
        token2_reserve=d["token2_reserve"],
        token1_price=d["token1_price"],
        token2_total_supply=d["token2_total_supply"],
    )
