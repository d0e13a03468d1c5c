#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from catering.core.database import SessionLocal  # noqa: E402
from catering.services.menu import seed_default_menu  # noqa: E402


def main() -> int:
    db = SessionLocal()
    try:
        added = seed_default_menu(db)
    finally:
        db.close()
    print(f"Menu seeded: {added} item(s) added")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
