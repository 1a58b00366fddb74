import json
from datetime import datetime, timezone

import pytest

from logmarket.app.main import load_market, open_market, save_market
from logmarket.core.errors import MalformedSnapshot
from logmarket.core.types import Direction
from logmarket.io.persistence import dump_snapshot, parse_snapshot, read_text

DOC = {
    "name": "Will it rain tomorrow?",
    "bets": [
        {
            "timestamp": "2024-01-02T10:00:00.000Z",
            "size": {"mana": 40, "direction": "YES"},
            "comment": "clouds",
            "sharesReceived": 0,
            "log2oddsBefore": 0,
            "log2oddsAfter": 0,
        },
        {
            "timestamp": "2024-01-01T09:00:00.000Z",
            "size": {"mana": 15, "direction": "NO"},
            "sharesReceived": 123,
            "log2oddsBefore": 7,
            "log2oddsAfter": 8,
        },
    ],
    "pool": {"yesShares": 1, "noShares": 1, "k": 1},
    "log2odds": 42,
    "userShares": 42,
    "resolution": {"outcome": "NO"},
}


def test_load_rebuilds_ledger_in_document_order():
    market = load_market(json.dumps(DOC))
    trades = market.ledger.entries()
    assert [t.id for t in trades] == [0, 1]
    assert [t.amount for t in trades] == [40, 15]
    assert trades[0].timestamp == datetime(2024, 1, 2, 10, tzinfo=timezone.utc)
    assert trades[0].comment == "clouds"
    assert trades[1].comment is None
    assert market.name == "Will it rain tomorrow?"
    assert market.resolution.outcome is Direction.BUY_NO


def test_load_recomputes_derived_state():
    snap = load_market(json.dumps(DOC)).snapshot
    assert snap.k == 81.0
    assert snap.log2odds != 42
    assert snap.bets[1].shares_received != 123
    assert snap.bets[0].log2odds_before == 0.0
    assert snap.bets[1].log2odds_before == snap.bets[0].log2odds_after


@pytest.mark.parametrize(
    "text",
    [
        "",
        "not json",
        "null",
        "[]",
        '{"name": "x"}',
        '{"bets": {}}',
        '{"bets": [1]}',
        '{"bets": [{"timestamp": "yesterday", "size": {"mana": 1, "direction": "YES"}}]}',
        '{"bets": [{"timestamp": "2024-01-01T00:00:00Z", "size": {"mana": -1, "direction": "YES"}}]}',
        '{"bets": [{"timestamp": "2024-01-01T00:00:00Z", "size": {"mana": 1, "direction": "UP"}}]}',
        '{"bets": [], "resolution": {"outcome": "MAYBE"}}',
        '{"bets": [], "name": 7}',
        b"\xff\xfe",
    ],
)
def test_malformed_document_falls_back_to_fresh_market(text):
    market = load_market(text)
    snap = market.snapshot
    assert snap.name == "Prediction Market"
    assert snap.bets == []
    assert snap.pool.as_tuple() == (512.0, 512.0)
    assert snap.k == 81.0
    assert snap.log2odds == 0
    assert snap.user_shares == 0
    assert snap.resolution is None


def test_parse_snapshot_raises():
    with pytest.raises(MalformedSnapshot):
        parse_snapshot('{"bets": "none"}')


def test_minimal_document_defaults_name():
    snap = parse_snapshot('{"bets": []}')
    assert snap.name == "Prediction Market"
    assert snap.resolution is None


def test_dump_shape():
    market = load_market(json.dumps(DOC))
    data = json.loads(dump_snapshot(market.snapshot))
    assert set(data) == {"name", "bets", "pool", "log2odds", "userShares", "resolution"}
    assert data["pool"]["k"] == 81.0
    assert data["resolution"] == {"outcome": "NO"}
    first, second = data["bets"]
    assert first["timestamp"] == "2024-01-02T10:00:00.000Z"
    assert first["size"] == {"mana": 40.0, "direction": "YES"}
    assert first["comment"] == "clouds"
    assert "comment" not in second
    assert second["log2oddsBefore"] == first["log2oddsAfter"]
    assert data["userShares"] == market.net_position


def test_save_then_reopen(tmp_path):
    path = tmp_path / "markets" / "rain.frd"
    market = load_market(json.dumps(DOC))
    market.place(5, "YES", "more clouds")
    save_market(path, market)

    reopened = open_market(path)
    assert dump_snapshot(reopened.snapshot) == dump_snapshot(market.snapshot)


def test_missing_file_opens_fresh_market(tmp_path):
    path = tmp_path / "new.frd"
    assert read_text(path) == ""
    market = open_market(path)
    assert market.name == "Prediction Market"
    assert len(market.ledger) == 0


def _bet(mana, direction="YES", ts="2024-01-01T00:00:00.000Z"):
    return {"timestamp": ts, "size": {"mana": mana, "direction": direction}}


@pytest.mark.parametrize(
    "bets",
    [
        [_bet(1e308)],
        [_bet(1e308), _bet(1e308)],
        [_bet(10), _bet(1e308, "NO")],
    ],
)
def test_unreplayable_bets_fall_back_to_fresh_market(bets):
    market = load_market(json.dumps({"name": "Huge", "bets": bets}))
    assert market.name == "Prediction Market"
    assert len(market.ledger) == 0
    assert market.snapshot.log2odds == 0


def test_odd_derived_fields_do_not_discard_ledger():
    doc = {
        "name": "Stale",
        "bets": [dict(_bet(20), sharesReceived="12", log2oddsBefore=None, log2oddsAfter=[1])],
        "pool": "512/512",
        "log2odds": "NaN",
        "userShares": {"yes": 1},
    }
    market = load_market(json.dumps(doc))
    assert market.name == "Stale"
    assert [t.amount for t in market.ledger] == [20]
    assert market.snapshot.bets[0].annotated


def test_parse_snapshot_keeps_numeric_derived_fields():
    snap = parse_snapshot(json.dumps(DOC))
    assert snap.pool.as_tuple() == (1.0, 1.0)
    assert snap.log2odds == 42
    assert snap.bets[1].shares_received == 123


@pytest.mark.parametrize(
    "ts, micros",
    [
        ("2024-01-01T00:00:00.5Z", 500000),
        ("2024-01-01T00:00:00.12Z", 120000),
        ("2024-01-01T00:00:00.123456789Z", 123456),
        ("2024-01-01T00:00:00Z", 0),
    ],
)
def test_any_fraction_length_is_accepted(ts, micros):
    market = load_market(json.dumps({"bets": [_bet(5, ts=ts)]}))
    (trade,) = market.ledger.entries()
    assert trade.timestamp == datetime(2024, 1, 1, microsecond=micros, tzinfo=timezone.utc)
