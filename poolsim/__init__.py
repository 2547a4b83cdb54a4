"""
poolsim: constant-product liquidity pool simulator
"""

from .errors import (
    BatchValidationError,
    ConfigError,
    LiquidityRejectedError,
    PoolInvariantError,
    PoolSimError,
    SessionLockedError,
)
from .state import LiquidityIntent, LiquidityKind, PoolState, TradeIntent, TradeKind
from .integration import PoolEngine, SessionStatus, SimConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "BatchValidationError",
    "ConfigError",
    "LiquidityRejectedError",
    "PoolInvariantError",
    "PoolSimError",
    "SessionLockedError",
    "LiquidityIntent",
    "LiquidityKind",
    "PoolState",
    "TradeIntent",
    "TradeKind",
    "PoolEngine",
    "SessionStatus",
    "SimConfig",
    "load_config",
]
