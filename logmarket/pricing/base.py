"""Bonding-curve abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from ..core.types import Direction, OddsState, PoolState


class Invariant(ABC):
    @property
    @abstractmethod
    def k(self) -> float: ...

    @property
    @abstractmethod
    def genesis(self) -> PoolState: ...

    @abstractmethod
    def trade(
        self, pool: PoolState, amount: float, direction: Direction
    ) -> Tuple[PoolState, float]:
        """Return the pool after staking ``amount`` on ``direction`` and the shares issued."""
        ...

    @abstractmethod
    def state(self, pool: PoolState) -> OddsState:
        """Return the belief implied by ``pool``."""
        ...
