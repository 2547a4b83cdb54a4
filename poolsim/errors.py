"""Exception types for the pool simulator.

Batch execution reports failures as ``BatchResult`` values; these exceptions
are for callers that prefer raising (``*_or_raise`` helpers) and for
violations that must never be turned into a silent no-op.
"""

from __future__ import annotations


class PoolSimError(Exception):
    """Base class for all simulator errors."""


class PoolInvariantError(PoolSimError, ValueError):
    """Raised when a pool state would break the reserve invariant."""


class BatchValidationError(PoolSimError):
    """Raised when a batch is rejected before any state is committed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class LiquidityRejectedError(PoolSimError):
    """Raised when a single liquidity intent cannot be applied to the running pool."""


class SessionLockedError(PoolSimError):
    """Raised on a configuration change after the session has been locked."""


class ConfigError(PoolSimError, ValueError):
    """Raised on invalid configuration values or a malformed config file."""
