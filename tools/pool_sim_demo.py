#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from poolsim import LiquidityIntent, LiquidityKind, PoolEngine, TradeIntent, TradeKind


def _print_pool(engine: PoolEngine, label: str) -> None:
    pool = engine.pool
    m = engine.metrics()
    print(
        f"[pool-demo] {label}: reserves {pool.token1_reserve:.4f} {pool.token1_symbol} / "
        f"{pool.token2_reserve:,.2f} {pool.token2_symbol}  "
        f"price=1 {pool.token1_symbol} = {m.price:,.2f} {pool.token2_symbol}  "
        f"usd=${m.price_usd:.6f}  mcap=${m.market_cap / 1_000_000:.2f}M  k={m.k / 1_000_000:.2f}M"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run a scripted liquidity pool session offline.")
    ap.add_argument("--config", default=None, help="YAML config file (defaults to $POOLSIM_CONFIG)")
    ap.add_argument("--buy", type=float, default=1.0, help="token1 amount per buy (two buys)")
    ap.add_argument("--sell", type=float, default=1_000_000.0, help="token2 amount to sell")
    ap.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    engine = PoolEngine.from_config(args.config)
    engine.simulate()
    _print_pool(engine, "start")

    batch = [TradeIntent(TradeKind.BUY, args.buy), TradeIntent(TradeKind.BUY, args.buy)]
    for intent in batch:
        quote = engine.quote_trade(intent)
        print(f"[pool-demo] quote {intent.kind.value} {intent.amount}: {quote.output_amount:,.2f} {quote.output_token} (impact {quote.price_impact}%)")
    res = engine.execute_trade_batch(batch)
    if not res.ok:
        print(f"[pool-demo] FAIL (buy batch): {res.error}")
        return 1
    for tx in res.transactions:
        print(f"[pool-demo] {tx.kind.value}: {tx.input_amount:,.4f} {tx.input_token} -> {tx.output_amount:,.4f} {tx.output_token}")
    _print_pool(engine, "after buys")

    res = engine.execute_trade_batch([TradeIntent(TradeKind.SELL, args.sell)])
    if not res.ok:
        print(f"[pool-demo] FAIL (sell batch): {res.error}")
        return 1
    _print_pool(engine, "after sell")

    add = engine.rebalance_intent(LiquidityIntent(LiquidityKind.ADD), token1_amount=0.5)
    res = engine.execute_liquidity_batch([add])
    if not res.ok:
        print(f"[pool-demo] FAIL (add liquidity): {res.error}")
        return 1
    _print_pool(engine, "after add liquidity")

    drain = LiquidityIntent(LiquidityKind.REMOVE, engine.pool.token1_reserve, engine.pool.token2_reserve)
    res = engine.execute_liquidity_batch([drain])
    for rej in res.rejected:
        print(f"[pool-demo] remove #{rej.index} rejected as expected: {rej.message}")

    print(f"[pool-demo] history: {len(engine.price_history())} points, {len(engine.transactions())} transactions")
    engine.reset()
    _print_pool(engine, "after reset")
    print("[pool-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
