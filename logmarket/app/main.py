"""Market bootstrap: one ledger, one replay engine, one snapshot.

A ``Market`` is the single owner of a market document while it is open. Every
mutation is replayed against a draft of the ledger first and only committed
once that replay succeeds, so the snapshot it exposes is always consistent
with the ledger.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .config import Settings
from ..core.clock import MarketClock
from ..core.errors import MalformedSnapshot, MarketError
from ..core.types import Direction, MarketSnapshot, PoolState, ReplayResult, Resolution, Trade
from ..core.utils import is_no_stake
from ..io.metrics import inc_snapshot_fallbacks, inc_trades_amended, inc_trades_placed
from ..io.persistence import parse_snapshot, read_text, snapshot_to_dict, write_json
from ..pricing.log_product import LogProductInvariant
from ..replay.engine import ReplayEngine
from ..state.ledger import TradeLedger

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> ReplayEngine:
    g = settings.genesis_pool
    return ReplayEngine(LogProductInvariant(PoolState(g, g)))


class Market:
    def __init__(
        self,
        name: Optional[str] = None,
        ledger: Optional[TradeLedger] = None,
        engine: Optional[ReplayEngine] = None,
        resolution: Optional[Resolution] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.name = name or self.settings.default_name
        self.ledger = ledger if ledger is not None else TradeLedger()
        self.engine = engine if engine is not None else build_engine(self.settings)
        self.resolution = resolution
        self._result: Optional[ReplayResult] = None
        self._snapshot: Optional[MarketSnapshot] = None
        self.refresh()

    @classmethod
    def fresh(cls, settings: Optional[Settings] = None) -> "Market":
        return cls(settings=settings)

    @property
    def display_name(self) -> str:
        return self.name or self.settings.default_name

    @property
    def result(self) -> ReplayResult:
        assert self._result is not None
        return self._result

    @property
    def snapshot(self) -> MarketSnapshot:
        assert self._snapshot is not None
        return self._snapshot

    @property
    def probability(self) -> float:
        return self.result.odds.probability

    @property
    def log2odds(self) -> float:
        return self.result.odds.log2odds

    @property
    def net_position(self) -> float:
        return self.snapshot.user_shares

    def _apply(self, result: ReplayResult) -> ReplayResult:
        self._result = result
        self._snapshot = MarketSnapshot(
            name=self.name,
            bets=list(result.trades),
            pool=result.pool,
            k=self.engine.k,
            log2odds=result.odds.log2odds,
            # + 0.0 turns the -0.0 of an empty or fully netted book into 0.0
            user_shares=result.net_position + 0.0,
            resolution=self.resolution,
        )
        return result

    def refresh(self) -> ReplayResult:
        return self._apply(self.engine.replay(self.ledger))

    def place(
        self,
        amount: float,
        direction: Direction | str,
        comment: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> Trade:
        pending = self.ledger.draft(amount, direction, comment, timestamp)
        result = self.engine.replay(self.ledger.entries() + [pending])
        trade = self.ledger.place(pending.amount, pending.direction, pending.comment, pending.timestamp)
        inc_trades_placed()
        logger.info(
            "%s: trade %d placed (%s %.2f)", self.name, trade.id, trade.direction.value, trade.amount
        )
        return self._apply(result).trades[trade.id]

    def amend(
        self,
        trade_id: int,
        amount: float,
        direction: Direction | str,
        comment: Optional[str] = None,
    ) -> Trade:
        pending = self.ledger.amended(trade_id, amount, direction, comment)
        entries = self.ledger.entries()
        entries[pending.id] = pending
        result = self.engine.replay(entries)
        trade = self.ledger.amend(trade_id, pending.amount, pending.direction, pending.comment)
        inc_trades_amended()
        logger.info(
            "%s: trade %d amended (%s %.2f)", self.name, trade.id, trade.direction.value, trade.amount
        )
        return self._apply(result).trades[trade.id]

    def trajectory(self, now: Optional[datetime] = None) -> List[Tuple[datetime, float]]:
        return self.result.trajectory(now or self.ledger.clock.now())

    def belief_summary(self) -> str:
        return f"Belief: {self.log2odds:.2f} bits ({self.probability * 100:.1f}%)"

    def stake_summary(self) -> str:
        shares = self.net_position
        if is_no_stake(shares, self.settings.no_stake_epsilon):
            return "No stake"
        if shares < 0:
            return f"Payout {-shares:.2f} upon NO"
        return f"Payout {shares:.2f} upon YES"


def load_market(
    text: str | bytes,
    settings: Optional[Settings] = None,
    clock: Optional[MarketClock] = None,
) -> Market:
    """Open a market document, falling back to a fresh market if it cannot be used.

    The ledger is rebuilt by placing every bet again in document order, so ids
    follow document order (not timestamp order). Stored derived fields are
    discarded in favour of a fresh replay. A document whose bets cannot be
    replayed counts as malformed too.
    """
    settings = settings or Settings()
    try:
        snap = parse_snapshot(text, settings.default_name)
        ledger = TradeLedger(clock)
        for bet in snap.bets:
            ledger.place(bet.amount, bet.direction, bet.comment, bet.timestamp)
        return Market(
            name=snap.name, ledger=ledger, resolution=snap.resolution, settings=settings
        )
    except MarketError as e:
        reason = e if isinstance(e, MalformedSnapshot) else MalformedSnapshot(e.message)
        logger.warning("%s; opening a fresh market instead", reason.message)
        inc_snapshot_fallbacks()
        return Market(ledger=TradeLedger(clock), settings=settings)


def open_market(path: str | Path, settings: Optional[Settings] = None) -> Market:
    return load_market(read_text(path), settings)


def save_market(path: str | Path, market: Market):
    write_json(path, snapshot_to_dict(market.snapshot))
