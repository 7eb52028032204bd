# -*- coding: utf-8 -*-
"""
caltrack command line.

Usage:
    caltrack serve [--host HOST] [--port PORT]
    caltrack init-db
    caltrack payout [--min-amount 5.00] [--older-than-days 30]
"""

from __future__ import annotations

import argparse
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from .config import settings


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port_raw = str(args.port)

    from .api import run

    run()
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:  # noqa: ARG001
    """Create the database schema."""
    from .app_db import init_app_db

    init_app_db(settings.app_db_path)
    print(f"Database ready: {settings.app_db_path}")
    return 0


def cmd_payout(args: argparse.Namespace) -> int:
    """Pay out eligible pending referral commissions."""
    from .app_db import init_app_db
    from .referrals.service import process_payouts

    try:
        min_amount = Decimal(args.min_amount)
    except InvalidOperation:
        min_amount = None
    if min_amount is None or not min_amount.is_finite():
        print(f"Error: invalid amount: {args.min_amount}")
        return 1
    if min_amount < 0 or args.older_than_days < 0:
        print("Error: --min-amount and --older-than-days must not be negative")
        return 1

    init_app_db(settings.app_db_path)
    paid = process_payouts(min_amount=min_amount, older_than_days=args.older_than_days)
    print(f"Paid {len(paid)} commission(s)")
    for commission_id in paid:
        print(f"  #{commission_id}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="caltrack calorie tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help=f"Bind address (default: {settings.host})")
    serve_parser.add_argument("--port", type=int, help=f"Port (default: {settings.port_raw})")

    subparsers.add_parser("init-db", help="Create the database schema")

    payout_parser = subparsers.add_parser("payout", help="Pay out pending referral commissions")
    payout_parser.add_argument(
        "--min-amount",
        default="0",
        help="Skip commissions below this amount (default: 0)",
    )
    payout_parser.add_argument(
        "--older-than-days",
        type=int,
        default=0,
        help="Only pay commissions at least this old (default: 0)",
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "serve": cmd_serve,
        "init-db": cmd_init_db,
        "payout": cmd_payout,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
