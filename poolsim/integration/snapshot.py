"""
Session snapshot encoding for UI collaborators.

Goals:
- Plain JSON-ready dicts (no custom types) for rendering
- Deterministic JSON text (sorted keys, no whitespace, no NaN)
- Explicit versioning

A snapshot is a view of the current session, not a persistence format.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Dict, Mapping

from ..core.metrics import pool_metrics
from ..state.pools import PoolState, pool_from_dict, pool_to_dict

if TYPE_CHECKING:
    from .engine import PoolEngine


SNAPSHOT_VERSION = 1


def canonical_json(value: Any) -> str:
    """Deterministic JSON text (sorted keys, compact separators, NaN rejected)."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def snapshot_from_engine(engine: "PoolEngine", *, version: int = SNAPSHOT_VERSION) -> Dict[str, Any]:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")

    history = engine.price_history()
    metrics = pool_metrics(engine.pool, history)
    return {
        "version": version,
        "status": engine.status.value,
        "pool": pool_to_dict(engine.pool),
        "metrics": asdict(metrics),
        "price_history": [p.to_dict() for p in history],
        "transactions": [t.to_dict() for t in engine.transactions()],
    }


def pool_from_snapshot(snapshot: Mapping[str, Any]) -> PoolState:
    """Rebuild the pool from a snapshot (re-validating the invariant)."""
    version = snapshot.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")
    pool = snapshot.get("pool")
    if not isinstance(pool, dict):
        raise TypeError("snapshot.pool must be an object")
    return pool_from_dict(pool)
