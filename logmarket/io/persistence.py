"""Market document persistence.

A market document is UTF-8 JSON:

    {"name": ..., "bets": [...], "pool": {"yesShares", "noShares", "k"},
     "log2odds": ..., "userShares": ..., "resolution": {"outcome": "YES"}}

Only ``bets`` is load-bearing, and within a bet only ``timestamp``, ``size``
and ``comment``. Everything else is derived and gets recomputed by a replay
as soon as the document is opened, so it is read leniently: a derived value
that is missing or not a number is simply dropped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.errors import InvalidAmount, InvalidDirection, MalformedSnapshot
from ..core.types import (
    DEFAULT_MARKET_NAME,
    Direction,
    MarketSnapshot,
    PoolState,
    Resolution,
    Trade,
)
from ..core.utils import format_timestamp, parse_timestamp, validate_amount


def _derived_number(obj: Any, key: str) -> Optional[float]:
    if not isinstance(obj, dict):
        return None
    value = obj.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _direction(value: Any) -> Direction:
    try:
        return Direction.parse(value)
    except InvalidDirection as e:
        raise MalformedSnapshot(e.message) from e


def _parse_bet(index: int, raw: Any) -> Trade:
    if not isinstance(raw, dict):
        raise MalformedSnapshot(f"bet {index} is not an object")
    ts = raw.get("timestamp")
    if not isinstance(ts, str):
        raise MalformedSnapshot(f"bet {index} has no timestamp")
    try:
        timestamp = parse_timestamp(ts)
    except ValueError as e:
        raise MalformedSnapshot(f"bet {index} timestamp {ts!r}: {e}") from e
    size = raw.get("size")
    if not isinstance(size, dict):
        raise MalformedSnapshot(f"bet {index} has no size")
    try:
        amount = validate_amount(size.get("mana"))
    except InvalidAmount as e:
        raise MalformedSnapshot(f"bet {index}: {e.message}") from e
    comment = raw.get("comment")
    if comment is not None and not isinstance(comment, str):
        raise MalformedSnapshot(f"bet {index} comment must be text")
    return Trade(
        id=index,
        timestamp=timestamp,
        amount=amount,
        direction=_direction(size.get("direction")),
        comment=comment,
        shares_received=_derived_number(raw, "sharesReceived"),
        log2odds_before=_derived_number(raw, "log2oddsBefore"),
        log2odds_after=_derived_number(raw, "log2oddsAfter"),
    )


def parse_snapshot(text: str | bytes, default_name: str = DEFAULT_MARKET_NAME) -> MarketSnapshot:
    """Parse a market document; a defect in a load-bearing field raises MalformedSnapshot."""
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedSnapshot(str(e)) from e
    if not isinstance(data, dict):
        raise MalformedSnapshot("document is not an object")

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise MalformedSnapshot("name must be text")

    bets_raw = data.get("bets")
    if not isinstance(bets_raw, list):
        raise MalformedSnapshot("bets must be a list")
    bets: List[Trade] = [_parse_bet(i, b) for i, b in enumerate(bets_raw)]

    resolution = None
    res_raw = data.get("resolution")
    if res_raw is not None:
        if not isinstance(res_raw, dict):
            raise MalformedSnapshot("resolution must be an object")
        resolution = Resolution(outcome=_direction(res_raw.get("outcome")))

    snap = MarketSnapshot(name=name or default_name, bets=bets, resolution=resolution)
    pool_raw = data.get("pool")
    yes = _derived_number(pool_raw, "yesShares")
    no = _derived_number(pool_raw, "noShares")
    if yes is not None and no is not None:
        snap.pool = PoolState(yes, no)
    k = _derived_number(pool_raw, "k")
    if k is not None:
        snap.k = k
    log2odds = _derived_number(data, "log2odds")
    if log2odds is not None:
        snap.log2odds = log2odds
    user_shares = _derived_number(data, "userShares")
    if user_shares is not None:
        snap.user_shares = user_shares
    return snap


def _derived(value: Optional[float]) -> float:
    return 0.0 if value is None else value


def bet_to_dict(trade: Trade) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "timestamp": format_timestamp(trade.timestamp),
        "size": {"mana": trade.amount, "direction": trade.direction.value},
    }
    if trade.comment is not None:
        out["comment"] = trade.comment
    out["sharesReceived"] = _derived(trade.shares_received)
    out["log2oddsBefore"] = _derived(trade.log2odds_before)
    out["log2oddsAfter"] = _derived(trade.log2odds_after)
    return out


def snapshot_to_dict(snapshot: MarketSnapshot) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "name": snapshot.name,
        "bets": [bet_to_dict(b) for b in snapshot.bets],
        "pool": {
            "yesShares": snapshot.pool.yes,
            "noShares": snapshot.pool.no,
            "k": snapshot.k,
        },
        "log2odds": snapshot.log2odds,
        "userShares": snapshot.user_shares,
    }
    if snapshot.resolution is not None:
        out["resolution"] = {"outcome": snapshot.resolution.outcome.value}
    return out


def dump_snapshot(snapshot: MarketSnapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot))


def read_text(path: str | Path) -> str:
    """Return the document text, or "" for a file that does not exist yet."""
    p = Path(path)
    if not p.exists():
        return ""
    return p.read_text(encoding="utf-8")


def write_json(path: str | Path, obj: Any):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)
