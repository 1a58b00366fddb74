"""Odds derivation for the log-product pool.

p_yes = n*log2(n) / (n*log2(n) + y*log2(y))
log2odds = log2(p / (1 - p))

This is not an LMSR price; the NO side's pool-times-log sits in the numerator.
"""

from __future__ import annotations

import math

from ..core.errors import DegenerateOdds
from ..core.types import OddsState, PoolState


def check_pool(pool: PoolState) -> None:
    """Raise DegenerateOdds unless both sides are finite and strictly above 1."""
    for side in pool.as_tuple():
        if not math.isfinite(side) or side <= 1.0:
            raise DegenerateOdds(pool)


def state(pool: PoolState) -> OddsState:
    check_pool(pool)
    y, n = pool.as_tuple()
    weight_yes = n * math.log2(n)
    weight_no = y * math.log2(y)
    total = weight_yes + weight_no
    if not math.isfinite(total):
        raise DegenerateOdds(pool)
    probability = weight_yes / total
    # a lopsided pool can round p to exactly 0 or 1
    if not 0.0 < probability < 1.0:
        raise DegenerateOdds(pool)
    log2odds = math.log2(probability / (1 - probability))
    return OddsState(probability=probability, log2odds=log2odds)
