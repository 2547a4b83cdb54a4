"""
State types for the pool simulator
"""

from .pools import PoolState, pool_from_dict, pool_to_dict
from .intents import LiquidityIntent, LiquidityKind, Token2Operation, TradeIntent, TradeKind
from .history import (
    PriceHistory,
    PriceHistoryPoint,
    Transaction,
    TransactionKind,
    TransactionLog,
)

__all__ = [
    "PoolState",
    "pool_from_dict",
    "pool_to_dict",
    "LiquidityIntent",
    "LiquidityKind",
    "Token2Operation",
    "TradeIntent",
    "TradeKind",
    "PriceHistory",
    "PriceHistoryPoint",
    "Transaction",
    "TransactionKind",
    "TransactionLog",
]
