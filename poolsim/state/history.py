"""
Bounded price and transaction histories for a simulation session.

- ``PriceHistory`` is chronological (oldest first) and keeps the most recent
  ``limit`` points.
- ``TransactionLog`` is newest first; each batch's records are put in front
  of the existing ones and the log is truncated.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Dict, Iterable, List, Optional


DEFAULT_PRICE_HISTORY_LIMIT = 20
DEFAULT_TRANSACTION_LOG_LIMIT = 20


class TransactionKind(Enum):
    """Transaction record type."""
    BUY = "buy"
    SELL = "sell"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"


@dataclass(frozen=True)
class PriceHistoryPoint:
    """
    Pool price at one moment.

    Attributes:
        timestamp: Wall-clock time (seconds since the epoch)
        price: token2 per token1
        price_usd: USD value of one token2
    """
    timestamp: float
    price: float
    price_usd: float

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "price": self.price, "price_usd": self.price_usd}


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of one executed trade or liquidity operation.

    For liquidity records ``input_*`` is the token1 side and ``output_*`` the
    token2 side; ``token1_amount``/``token2_amount`` are set only for them.
    """
    timestamp: float
    kind: TransactionKind
    input_amount: float
    input_token: str
    output_amount: float
    output_token: str
    price: float
    token1_amount: Optional[float] = None
    token2_amount: Optional[float] = None

    @property
    def is_liquidity(self) -> bool:
        return self.kind in (TransactionKind.ADD_LIQUIDITY, TransactionKind.REMOVE_LIQUIDITY)

    @property
    def effective_rate(self) -> float:
        """Output per unit of input (0.0 for an empty input)."""
        if self.input_amount == 0:
            return 0.0
        return self.output_amount / self.input_amount

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "input_amount": self.input_amount,
            "input_token": self.input_token,
            "output_amount": self.output_amount,
            "output_token": self.output_token,
            "price": self.price,
        }
        if self.token1_amount is not None:
            d["token1_amount"] = self.token1_amount
        if self.token2_amount is not None:
            d["token2_amount"] = self.token2_amount
        return d


def _require_limit(limit: int) -> int:
    if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
        raise ValueError(f"limit must be a positive int: {limit!r}")
    return limit


class PriceHistory:
    """Chronological ring buffer of price points."""

    def __init__(self, limit: int = DEFAULT_PRICE_HISTORY_LIMIT) -> None:
        self._limit = _require_limit(limit)
        self._points: Deque[PriceHistoryPoint] = deque(maxlen=self._limit)

    @property
    def limit(self) -> int:
        return self._limit

    def append(self, point: PriceHistoryPoint) -> None:
        """Append a point, dropping the oldest one when full."""
        self._points.append(point)

    def points(self) -> List[PriceHistoryPoint]:
        """Return the stored points, oldest first."""
        return list(self._points)

    def latest(self) -> Optional[PriceHistoryPoint]:
        return self._points[-1] if self._points else None

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(list(self._points))

    def __repr__(self) -> str:
        return f"PriceHistory({len(self._points)}/{self._limit} points)"


class TransactionLog:
    """Newest-first log of transaction records."""

    def __init__(self, limit: int = DEFAULT_TRANSACTION_LOG_LIMIT) -> None:
        self._limit = _require_limit(limit)
        self._records: List[Transaction] = []

    @property
    def limit(self) -> int:
        return self._limit

    def prepend(self, records: Iterable[Transaction], limit: Optional[int] = None) -> None:
        """
        Put a batch's records in front of the log and truncate.

        Args:
            records: Batch records in execution order; the last executed
                record ends up first
            limit: Truncation length for this call (defaults to the log's limit)
        """
        cap = self._limit if limit is None else _require_limit(limit)
        newest_first = list(reversed(list(records)))
        self._records = (newest_first + self._records)[:cap]

    def records(self) -> List[Transaction]:
        """Return the stored records, newest first."""
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def __repr__(self) -> str:
        return f"TransactionLog({len(self._records)}/{self._limit} records)"
