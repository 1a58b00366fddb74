"""Append-only trade ledger.

Trade ids are list indices: assigned as the ledger size at insertion, never
reused and never reordered. Iteration order is ascending id, which is also
insertion order, and replay depends on that.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Iterator, List, Optional

from ..core.clock import MarketClock
from ..core.errors import TradeNotFound
from ..core.types import Direction, Trade
from ..core.utils import to_utc, validate_amount

logger = logging.getLogger(__name__)


class TradeLedger:
    def __init__(self, clock: Optional[MarketClock] = None):
        self.clock = clock or MarketClock()
        self._trades: List[Trade] = []

    def __len__(self) -> int:
        return len(self._trades)

    def __iter__(self) -> Iterator[Trade]:
        return iter(self._trades)

    def draft(
        self,
        amount: float,
        direction: Direction | str,
        comment: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> Trade:
        """Validate and build the trade ``place`` would append, without appending it."""
        value = validate_amount(amount)
        side = Direction.parse(direction)
        ts = to_utc(timestamp) if timestamp is not None else self.clock.now()
        return Trade(
            id=len(self._trades),
            timestamp=ts,
            amount=value,
            direction=side,
            comment=comment,
        )

    def place(
        self,
        amount: float,
        direction: Direction | str,
        comment: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> Trade:
        trade = self.draft(amount, direction, comment, timestamp)
        self._trades.append(trade)
        logger.debug("placed trade %d: %s %.4f", trade.id, trade.direction.value, trade.amount)
        return trade

    def get(self, trade_id: int) -> Trade:
        # bool is an int; negative indices would wrap around
        if isinstance(trade_id, bool) or not isinstance(trade_id, int):
            raise TradeNotFound(trade_id)
        if not 0 <= trade_id < len(self._trades):
            raise TradeNotFound(trade_id)
        return self._trades[trade_id]

    def amended(
        self,
        trade_id: int,
        amount: float,
        direction: Direction | str,
        comment: Optional[str] = None,
    ) -> Trade:
        """Return a copy of the trade as ``amend`` would leave it; the ledger is untouched."""
        trade = self.get(trade_id)
        return dataclasses.replace(
            trade,
            amount=validate_amount(amount),
            direction=Direction.parse(direction),
            comment=comment,
            shares_received=None,
            log2odds_before=None,
            log2odds_after=None,
        )

    def amend(
        self,
        trade_id: int,
        amount: float,
        direction: Direction | str,
        comment: Optional[str] = None,
    ) -> Trade:
        updated = self.amended(trade_id, amount, direction, comment)
        trade = self._trades[updated.id]
        trade.amount = updated.amount
        trade.direction = updated.direction
        trade.comment = updated.comment
        trade.clear_derived()
        logger.debug("amended trade %d: %s %.4f", trade.id, trade.direction.value, trade.amount)
        return trade

    def entries(self) -> List[Trade]:
        return list(self._trades)
