#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from catering.core.config import IS_PROD  # noqa: E402
from catering.core.database import SessionLocal  # noqa: E402
from catering.services.mock_orders import add_mock_orders, clear_orders, count_orders  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add or clear sample orders for the admin dashboard.")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("add", help="Insert sample orders in every status")
    clear = subparsers.add_parser("clear", help="Delete ALL orders")
    clear.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    parser.add_argument("--force", action="store_true", help="Allow running with ENV=production")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    if IS_PROD and not args.force:
        print("Refusing to touch a production database. Use --force to override.")
        return 1

    db = SessionLocal()
    try:
        if args.command == "add":
            orders = add_mock_orders(db)
            for order in orders:
                print(f"Added {order.status} order for {order.customer_name} ({order.date_needed})")
            print(f"Summary: {len(orders)} order(s) added")
            return 0

        total = count_orders(db)
        if total == 0:
            print("No orders to delete. Database is already empty.")
            return 0
        if not args.yes:
            answer = input(f"This will delete {total} order(s). Continue? (yes/no): ")
            if answer.strip().lower() != "yes":
                print("Cancelled. No orders were deleted.")
                return 0
        deleted = clear_orders(db)
        print(f"Deleted {deleted} order(s)")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
