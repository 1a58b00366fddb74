"""Entry point: open a market document, optionally trade, replay and save."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import load_settings
from .main import open_market, save_market
from ..core.errors import MarketError
from ..io.metrics import render_metrics


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logmarket", description=__doc__)
    parser.add_argument("path", help="market document (created if missing)")
    parser.add_argument(
        "--bet", nargs=2, metavar=("AMOUNT", "DIRECTION"), help="place a trade"
    )
    parser.add_argument(
        "--amend", nargs=3, metavar=("ID", "AMOUNT", "DIRECTION"), help="amend a trade"
    )
    parser.add_argument("--comment", default=None, help="comment for --bet/--amend")
    parser.add_argument("--metrics", action="store_true", help="print metrics on exit")
    return parser


def main(argv: Optional[List[str]] = None):  # pragma: no cover - manual run
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    market = open_market(args.path, settings)
    try:
        if args.bet:
            amount, direction = args.bet
            market.place(float(amount), direction, args.comment)
        if args.amend:
            trade_id, amount, direction = args.amend
            market.amend(int(trade_id), float(amount), direction, args.comment)
    except (MarketError, ValueError) as e:
        parser.error(str(e))
    save_market(args.path, market)

    print(market.display_name)
    print(market.belief_summary())
    print(market.stake_summary())
    if args.metrics:
        print(render_metrics())


if __name__ == "__main__":  # pragma: no cover
    main()
