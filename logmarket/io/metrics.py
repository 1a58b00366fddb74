"""Metrics instrumentation."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, generate_latest

trades_placed_total = Counter("logmarket_trades_placed_total", "Trades appended to a ledger")
trades_amended_total = Counter("logmarket_trades_amended_total", "Trades amended in place")
replays_total = Counter("logmarket_replays_total", "Full ledger replays")
snapshot_fallbacks_total = Counter(
    "logmarket_snapshot_fallbacks_total",
    "Documents that failed to parse and were replaced by a fresh market",
)


def inc_trades_placed(n: int = 1) -> None:
    trades_placed_total.inc(n)


def inc_trades_amended(n: int = 1) -> None:
    trades_amended_total.inc(n)


def inc_replays(n: int = 1) -> None:
    replays_total.inc(n)


def inc_snapshot_fallbacks(n: int = 1) -> None:
    snapshot_fallbacks_total.inc(n)


def render_metrics(registry: CollectorRegistry = REGISTRY) -> str:
    return generate_latest(registry).decode("utf-8")
