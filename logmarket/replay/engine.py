"""Replay engine.

Folds the ledger through the invariant from the genesis pool. Every call
recomputes the whole history; nothing is carried between calls, so the same
ledger always yields the same result.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, List, Optional

from ..core.types import ReplayResult, Trade
from ..io.metrics import inc_replays
from ..pricing.base import Invariant
from ..pricing.log_product import LogProductInvariant

logger = logging.getLogger(__name__)


class ReplayEngine:
    def __init__(self, invariant: Optional[Invariant] = None):
        self.invariant = invariant or LogProductInvariant()

    @property
    def k(self) -> float:
        return self.invariant.k

    def replay(self, ledger: Iterable[Trade]) -> ReplayResult:
        pool = self.invariant.genesis
        yes_total = no_total = mana = 0.0
        annotated: List[Trade] = []

        for trade in sorted(ledger, key=lambda t: t.id):
            before = self.invariant.state(pool).log2odds
            flip = trade.direction.flip
            pool, shares = self.invariant.trade(pool, abs(trade.amount), trade.direction)
            after = self.invariant.state(pool).log2odds

            if flip:
                no_total += shares
                mana += trade.amount
            else:
                yes_total += shares
                mana -= trade.amount

            annotated.append(
                dataclasses.replace(
                    trade,
                    shares_received=shares,
                    log2odds_before=before,
                    log2odds_after=after,
                )
            )

        # a YES and a NO share together always pay out one unit
        redeemed = min(yes_total, no_total)
        odds = self.invariant.state(pool)
        inc_replays()
        logger.debug(
            "replayed %d trades: pool=(%.4f, %.4f) log2odds=%.4f",
            len(annotated),
            pool.yes,
            pool.no,
            odds.log2odds,
        )
        return ReplayResult(
            yes_shares=yes_total - redeemed,
            no_shares=no_total - redeemed,
            mana=mana,
            trades=annotated,
            pool=pool,
            odds=odds,
        )
