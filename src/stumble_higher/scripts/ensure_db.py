"""Utility script to prepare the configured database."""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from stumble_higher.core.settings import settings
from stumble_higher.db.session import SessionLocal, create_tables, drop_tables
from stumble_higher.services.system_config import seed_default_config


def ensure_database(*, reset: bool = False) -> int:
    """Create missing tables and seed config defaults; return keys seeded."""
    if reset:
        drop_tables()
        print("[ensure_db] dropped all tables")
    create_tables()
    with SessionLocal() as db:
        added = seed_default_config(db)
    print(f"[ensure_db] tables ready, {added} config defaults seeded")
    return added


def main() -> None:
    parser = argparse.ArgumentParser(description="Create tables and seed system configuration")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop every table before recreating the schema.",
    )
    args = parser.parse_args()

    try:
        ensure_database(reset=args.drop_tables)
    except SQLAlchemyError as exc:
        print(
            f"[ensure_db] ERROR for {settings.effective_database_url}: {exc}",
            file=sys.stderr,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
