#!/usr/bin/env python3
from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from catering.services.auth import hash_password, verify_password  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate the bcrypt hash for ADMIN_PASSWORD_HASH.")
    parser.add_argument("password", nargs="?", help="Admin password (prompted when omitted)")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    password = args.password or getpass.getpass("Admin password: ")
    if not password:
        print("Password must not be empty.")
        return 1

    password_hash = hash_password(password)
    if not verify_password(password, password_hash):
        print("Generated hash failed verification.")
        return 1

    print("Add this line to your .env file:")
    print(f"ADMIN_PASSWORD_HASH={password_hash}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
