"""Core type definitions for the log-product market.

The market is binary (YES/NO). Pool sides, trades and replay output are plain
dataclasses; derived trade fields are only ever filled in by a replay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .errors import InvalidDirection

DEFAULT_MARKET_NAME = "Prediction Market"


class Direction(str, Enum):
    BUY_YES = "YES"
    BUY_NO = "NO"

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        """Accept a Direction, its wire value ("YES"/"NO") or its name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().upper()
            for d in cls:
                if text in (d.value, d.name):
                    return d
        raise InvalidDirection(value)

    @property
    def flip(self) -> bool:
        return self is Direction.BUY_NO


@dataclass(frozen=True)
class PoolState:
    yes: float
    no: float

    def as_tuple(self) -> Tuple[float, float]:
        return self.yes, self.no


@dataclass(frozen=True)
class OddsState:
    probability: float
    log2odds: float


@dataclass
class Trade:
    id: int
    timestamp: datetime
    amount: float
    direction: Direction
    comment: Optional[str] = None
    # populated by replay only
    shares_received: Optional[float] = None
    log2odds_before: Optional[float] = None
    log2odds_after: Optional[float] = None

    @property
    def annotated(self) -> bool:
        return self.shares_received is not None

    def clear_derived(self):
        self.shares_received = None
        self.log2odds_before = None
        self.log2odds_after = None


@dataclass
class ReplayResult:
    yes_shares: float
    no_shares: float
    mana: float
    trades: List[Trade]
    pool: PoolState
    odds: OddsState

    @property
    def net_position(self) -> float:
        """Signed exposure: positive for YES, negative for NO.

        Equal totals fall through to the NO branch, which after netting is
        ``-0.0``.
        """
        return self.yes_shares if self.yes_shares > self.no_shares else -self.no_shares

    def trajectory(self, now: datetime) -> List[Tuple[datetime, float]]:
        """Per-trade odds before each trade, shifted so the current odds sit at 0."""
        points = [
            (t.timestamp, (t.log2odds_before or 0.0) - self.odds.log2odds)
            for t in self.trades
        ]
        points.append((now, 0.0))
        return points


@dataclass(frozen=True)
class Resolution:
    outcome: Direction


@dataclass
class MarketSnapshot:
    name: str = DEFAULT_MARKET_NAME
    bets: List[Trade] = field(default_factory=list)
    pool: PoolState = field(default_factory=lambda: PoolState(512.0, 512.0))
    k: float = 81.0
    log2odds: float = 0.0
    user_shares: float = 0.0
    resolution: Optional[Resolution] = None
