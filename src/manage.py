"""ShopCart database management CLI.

Creates or drops the schema of every bounded context (identity, catalogue,
ordering, reviews) in the database configured for the current ``SHOPCART_ENV``.

Usage:
    python src/manage.py setup-db              # Create all tables
    python src/manage.py drop-db               # Drop all tables
    python src/manage.py setup-db --env test   # Use the [test] overlay
"""

import argparse
import sys

from shared.config import load_settings
from shared.db import build_engine, drop_db, setup_db


def setup_databases(env=None):
    """Create database schemas for all domains."""
    settings = load_settings(env=env)
    print(f"Creating database schema for {settings.env}...")
    engine = build_engine(settings.database)
    setup_db(engine)
    engine.dispose()
    print("Done.")


def drop_databases(env=None):
    """Drop database schemas for all domains."""
    settings = load_settings(env=env)
    print(f"Dropping database schema for {settings.env}...")
    engine = build_engine(settings.database)
    drop_db(engine)
    engine.dispose()
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="ShopCart database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--env", help="Config environment (default: SHOPCART_ENV or development)")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_databases(args.env)
    elif args.command == "drop-db":
        drop_databases(args.env)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
