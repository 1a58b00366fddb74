"""Clock used to stamp new trades."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class MarketClock:
    fixed: Optional[datetime] = None  # pin the clock in tests

    def now(self) -> datetime:
        if self.fixed is not None:
            return self.fixed
        return datetime.now(timezone.utc)
