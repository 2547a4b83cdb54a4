"""
Session layer: engine, configuration and snapshots
"""

from .config import SimConfig, load_config
from .engine import PoolEngine, SessionStatus
from .snapshot import canonical_json, pool_from_snapshot, snapshot_from_engine

__all__ = [
    "SimConfig",
    "load_config",
    "PoolEngine",
    "SessionStatus",
    "canonical_json",
    "pool_from_snapshot",
    "snapshot_from_engine",
]
