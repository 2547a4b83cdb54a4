"""
Core pool algorithms
"""

from .cpmm import (
    TradeQuote,
    calculate_output_amount,
    calculate_price_impact,
    get_current_price,
    get_k,
    get_slippage_percentage,
    get_token2_price_usd,
    quote_trade,
)
from .liquidity import (
    apply_add_liquidity,
    apply_remove_liquidity,
    calculate_proportional_amount,
    rebalance_intent,
    validate_token2_amount,
)
from .batch import (
    BatchResult,
    IntentRejection,
    execute_liquidity_batch,
    execute_liquidity_batch_or_raise,
    execute_trade_batch,
    execute_trade_batch_or_raise,
)
from .metrics import HistoryStats, PoolMetrics, market_cap, pool_metrics

__all__ = [
    "TradeQuote",
    "calculate_output_amount",
    "calculate_price_impact",
    "get_current_price",
    "get_k",
    "get_slippage_percentage",
    "get_token2_price_usd",
    "quote_trade",
    "apply_add_liquidity",
    "apply_remove_liquidity",
    "calculate_proportional_amount",
    "rebalance_intent",
    "validate_token2_amount",
    "BatchResult",
    "IntentRejection",
    "execute_liquidity_batch",
    "execute_liquidity_batch_or_raise",
    "execute_trade_batch",
    "execute_trade_batch_or_raise",
    "HistoryStats",
    "PoolMetrics",
    "market_cap",
    "pool_metrics",
]
