from __future__ import annotations

import argparse
import logging
from pathlib import Path

from src.config import get_settings
from src.workers.check_db import DEFAULT_TABLES
from src.workers.check_db import run as check_database
from src.workers.init_db import run as init_database
from src.workers.seed import run as seed_database


def _add_init_db(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("init-db", help="Create the local database schema")
    parser.add_argument("--schema", type=Path, default=None, help="Override the schema SQL file")


def _add_seed(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("seed", help="Load sample companies, drivers, vehicles and alerts")
    parser.add_argument("--file", type=Path, default=None, help="Seed JSON file (defaults to database/seed.json)")


def _add_check(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("check", help="Test the active database connection and report row counts")
    parser.add_argument(
        "--tables",
        type=str,
        default=",".join(DEFAULT_TABLES),
        help="Comma-separated tables to count",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fleet-fraud", description="Fleet fraud monitor data tools")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (defaults to LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_init_db(subparsers)
    _add_seed(subparsers)
    _add_check(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = (args.log_level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")

    command = args.command
    if command == "init-db":
        init_database(schema_path=args.schema)
    elif command == "seed":
        seed_database(seed_path=args.file)
    elif command == "check":
        tables = [name.strip() for name in args.tables.split(",") if name.strip()]
        check_database(tables=tables)
    else:
        parser.error(f"Unknown command: {command}")


__all__ = ["build_parser", "main"]


if __name__ == "__main__":
    main()
