"""Log-product bonding curve for binary pools.

Invariant: log2(y) * log2(n) = k, with k fixed from the genesis pool.
A stake of ``a`` is added to both sides, then the side being bought is
re-solved against the other so the invariant holds again; the amount that
side shrinks by is paid out as shares.
"""

from __future__ import annotations

import math
from typing import Tuple

from .base import Invariant
from .odds import check_pool, state as odds_state
from ..core.errors import DegenerateOdds, InvalidAmount
from ..core.types import Direction, OddsState, PoolState
from ..core.utils import validate_amount

GENESIS_POOL = 512.0


class LogProductInvariant(Invariant):
    def __init__(self, genesis: PoolState | None = None):
        genesis = genesis or PoolState(GENESIS_POOL, GENESIS_POOL)
        check_pool(genesis)
        self._genesis = genesis
        self._k = math.log2(genesis.yes) * math.log2(genesis.no)

    @property
    def k(self) -> float:
        return self._k

    @property
    def genesis(self) -> PoolState:
        return PoolState(self._genesis.yes, self._genesis.no)

    def trade(
        self, pool: PoolState, amount: float, direction: Direction
    ) -> Tuple[PoolState, float]:
        amount = validate_amount(amount)
        direction = Direction.parse(direction)
        check_pool(pool)
        y = pool.yes + amount
        n = pool.no + amount
        try:
            if direction is Direction.BUY_YES:
                new_y = 2.0 ** (self._k / math.log2(n))
                new_pool, shares = PoolState(new_y, n), y - new_y
            else:
                new_n = 2.0 ** (self._k / math.log2(y))
                new_pool, shares = PoolState(y, new_n), n - new_n
        except OverflowError:
            # a side barely above 1 sends the exponent past float range
            raise DegenerateOdds(pool) from None
        # stakes near float max overflow the pool or its odds
        try:
            odds_state(new_pool)
        except DegenerateOdds:
            raise InvalidAmount(amount) from None
        if not math.isfinite(shares):
            raise InvalidAmount(amount)
        return new_pool, shares

    def state(self, pool: PoolState) -> OddsState:
        return odds_state(pool)
