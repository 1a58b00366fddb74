"""Error taxonomy for the market core.

Code ranges:
  3xxx: Snapshot / document
  4xxx: Trade
  5xxx: Pricing
  9xxx: Configuration
"""

from __future__ import annotations

from typing import Any


class MarketError(Exception):
    """Base market error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


# --- 3xxx: Snapshot ---


class MalformedSnapshot(MarketError):
    def __init__(self, reason: str) -> None:
        super().__init__(3001, f"Malformed market snapshot: {reason}")
        self.reason = reason


# --- 4xxx: Trade ---


class TradeNotFound(MarketError, KeyError):
    def __init__(self, trade_id: Any) -> None:
        super().__init__(4001, f"Trade not found: {trade_id}")
        self.trade_id = trade_id

    def __str__(self) -> str:
        return self.message


class InvalidAmount(MarketError, ValueError):
    def __init__(self, amount: Any) -> None:
        super().__init__(4002, f"Trade amount must be a positive finite number, got {amount!r}")
        self.amount = amount


class InvalidDirection(MarketError, ValueError):
    def __init__(self, direction: Any) -> None:
        super().__init__(4003, f"Trade direction must be YES or NO, got {direction!r}")
        self.direction = direction


# --- 5xxx: Pricing ---


class DegenerateOdds(MarketError):
    def __init__(self, pool: Any) -> None:
        super().__init__(5001, f"Pool sides must both exceed 1, got {pool!r}")
        self.pool = pool


# --- 9xxx: Configuration ---


class ConfigError(MarketError):
    def __init__(self, message: str) -> None:
        super().__init__(9001, message)
