"""
Session configuration.

Layers, lowest first:
1. Built-in defaults (``SimConfig()``)
2. Optional YAML file (``POOLSIM_CONFIG`` or an explicit path)
3. ``POOLSIM_*`` environment variables

A malformed environment value falls back to the layer below. A malformed
YAML file raises ``ConfigError``.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..errors import ConfigError, PoolInvariantError
from ..state.history import DEFAULT_PRICE_HISTORY_LIMIT
from ..state.pools import (
    DEFAULT_TOKEN1_PRICE,
    DEFAULT_TOKEN1_RESERVE,
    DEFAULT_TOKEN1_SYMBOL,
    DEFAULT_TOKEN2_RESERVE,
    DEFAULT_TOKEN2_SYMBOL,
    DEFAULT_TOKEN2_TOTAL_SUPPLY,
    PoolState,
)

CONFIG_PATH_ENV = "POOLSIM_CONFIG"

LIMIT_LO = 1
LIMIT_HI = 10_000

_POOL_KEYS = (
    "token1_symbol",
    "token2_symbol",
    "token1_reserve",
    "token2_reserve",
    "token1_price",
    "token2_total_supply",
)
_HISTORY_KEYS = ("price_history_limit", "trade_log_limit", "liquidity_log_limit")


@dataclass(frozen=True)
class SimConfig:
    """Defaults a session starts from (and resets to)."""

    token1_symbol: str = DEFAULT_TOKEN1_SYMBOL
    token2_symbol: str = DEFAULT_TOKEN2_SYMBOL
    token1_reserve: float = DEFAULT_TOKEN1_RESERVE
    token2_reserve: float = DEFAULT_TOKEN2_RESERVE
    token1_price: float = DEFAULT_TOKEN1_PRICE
    token2_total_supply: float = DEFAULT_TOKEN2_TOTAL_SUPPLY

    price_history_limit: int = DEFAULT_PRICE_HISTORY_LIMIT
    # Trade batches keep a shorter log than liquidity batches.
    trade_log_limit: int = 10
    liquidity_log_limit: int = 20

    def __post_init__(self) -> None:
        for name in _HISTORY_KEYS:
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or not (LIMIT_LO <= v <= LIMIT_HI):
                raise ConfigError(f"{name} must be an int in [{LIMIT_LO}, {LIMIT_HI}]: {v!r}")
        try:
            self.initial_pool()
        except PoolInvariantError as exc:
            raise ConfigError(f"invalid default pool: {exc}") from exc

    def initial_pool(self) -> PoolState:
        return PoolState(
            token1_symbol=self.token1_symbol,
            token2_symbol=self.token2_symbol,
            token1_reserve=self.token1_reserve,
            token2_reserve=self.token2_reserve,
            token1_price=self.token1_price,
            token2_total_supply=self.token2_total_supply,
        )

    @property
    def transaction_log_limit(self) -> int:
        return max(self.trade_log_limit, self.liquidity_log_limit)


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return float(default)
    try:
        v = float(raw.strip())
    except ValueError:
        return float(default)
    if not math.isfinite(v) or v <= 0:
        return float(default)
    return v


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _require_mapping(obj: Any, *, name: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _require_number(obj: Any, *, name: str) -> float:
    if isinstance(obj, bool) or not isinstance(obj, (int, float)):
        raise ConfigError(f"{name} must be a number")
    v = float(obj)
    if not math.isfinite(v) or v <= 0:
        raise ConfigError(f"{name} must be a finite positive number")
    return v


def _require_limit(obj: Any, *, name: str) -> int:
    if isinstance(obj, bool) or not isinstance(obj, int):
        raise ConfigError(f"{name} must be an int")
    if not (LIMIT_LO <= obj <= LIMIT_HI):
        raise ConfigError(f"{name} must be in [{LIMIT_LO}, {LIMIT_HI}]")
    return int(obj)


def config_from_mapping(obj: Mapping[str, Any], *, base: Optional[SimConfig] = None) -> SimConfig:
    """
    Build a SimConfig from a parsed config document.

    Expected shape (both sections optional):
        pool:
          token2_symbol: SILK
          token1_reserve: 3.8
          ...
        history:
          price_history_limit: 20
    """
    root = _require_mapping(obj, name="config")
    unknown = set(root) - {"pool", "history"}
    if unknown:
        raise ConfigError(f"unknown config sections: {sorted(unknown)}")

    changes: Dict[str, Any] = {}
    pool = _require_mapping(root.get("pool") or {}, name="config.pool")
    for key, value in pool.items():
        if key not in _POOL_KEYS:
            raise ConfigError(f"unknown config.pool key: {key}")
        if key.endswith("_symbol"):
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"config.pool.{key} must be a non-empty string")
            changes[key] = value.strip()
        else:
            changes[key] = _require_number(value, name=f"config.pool.{key}")

    history = _require_mapping(root.get("history") or {}, name="config.history")
    for key, value in history.items():
        if key not in _HISTORY_KEYS:
            raise ConfigError(f"unknown config.history key: {key}")
        changes[key] = _require_limit(value, name=f"config.history.{key}")

    return replace(base or SimConfig(), **changes)


def load_config_file(path: Union[str, Path], *, base: Optional[SimConfig] = None) -> SimConfig:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {p}: {exc}") from exc
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {p}: {exc}") from exc
    return config_from_mapping(doc or {}, base=base)


def apply_env_overrides(config: SimConfig) -> SimConfig:
    """Apply ``POOLSIM_*`` environment overrides on top of ``config``."""
    changes: Dict[str, Any] = {}
    for f in fields(SimConfig):
        env_name = f"POOLSIM_{f.name.upper()}"
        current = getattr(config, f.name)
        if f.name in _HISTORY_KEYS:
            changes[f.name] = _env_int(env_name, current, lo=LIMIT_LO, hi=LIMIT_HI)
        elif f.name.endswith("_symbol"):
            changes[f.name] = _env_str(env_name, current)
        else:
            changes[f.name] = _env_float(env_name, current)
    return replace(config, **changes)


def load_config(path: Optional[Union[str, Path]] = None) -> SimConfig:
    """
    Load the session configuration.

    Args:
        path: YAML config file; defaults to ``$POOLSIM_CONFIG`` when set
    """
    config = SimConfig()
    if path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV, "").strip()
        path = env_path or None
    if path is not None:
        config = load_config_file(path, base=config)
    return apply_env_overrides(config)
