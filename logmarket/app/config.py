"""Runtime settings.

Values come from the environment (a ``.env`` file is loaded first if present).
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv  # type: ignore

from ..core.errors import ConfigError
from ..core.types import DEFAULT_MARKET_NAME


@dataclass(frozen=True)
class Settings:
    genesis_pool: float = 512.0
    default_name: str = DEFAULT_MARKET_NAME
    no_stake_epsilon: float = 1e-7
    log_level: str = "WARNING"


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ConfigError(f"{key} must be finite, got {raw!r}")
    return value


def load_settings(dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    genesis = _env_float("LOGMARKET_GENESIS_POOL", Settings.genesis_pool)
    if genesis <= 1.0:
        raise ConfigError(f"LOGMARKET_GENESIS_POOL must exceed 1, got {genesis}")
    epsilon = _env_float("LOGMARKET_NO_STAKE_EPSILON", Settings.no_stake_epsilon)
    if epsilon < 0:
        raise ConfigError(f"LOGMARKET_NO_STAKE_EPSILON must be >= 0, got {epsilon}")
    return Settings(
        genesis_pool=genesis,
        default_name=os.getenv("LOGMARKET_DEFAULT_NAME") or DEFAULT_MARKET_NAME,
        no_stake_epsilon=epsilon,
        log_level=(os.getenv("LOGMARKET_LOG_LEVEL") or "WARNING").upper(),
    )
