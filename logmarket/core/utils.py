"""Small utilities."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from numbers import Real
from typing import Any

from .errors import InvalidAmount


def validate_amount(amount: Any) -> float:
    """Return ``amount`` as a float, or raise InvalidAmount.

    Booleans, strings, NaN, infinities and anything <= 0 are rejected.
    """
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise InvalidAmount(amount)
    value = float(amount)
    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount(amount)
    return value


def to_utc(ts: datetime) -> datetime:
    # naive datetimes are taken to be UTC already
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    text = to_utc(ts).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


_FRACTION = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_timestamp(text: str) -> datetime:
    """Inverse of :func:`format_timestamp`; also accepts offsets and naive stamps.

    Fractional seconds of any length are cut or padded to microseconds.
    """
    s = _FRACTION.sub(lambda m: f"{m.group(1)}.{(m.group(2) + '000000')[:6]}", text.strip())
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(s))


def probability_from_log2odds(log2odds: float) -> float:
    return 1.0 / (1.0 + 2.0 ** (-log2odds))


def is_no_stake(position: float, epsilon: float = 1e-7) -> bool:
    return abs(position) < epsilon
