#!/usr/bin/env python3
"""
Zone to database conversion utility.

Loads a zone file and writes it into a zone table, dropping any existing
table of that name first. Every statement is echoed to stdout.

usage: zonetodb origin file dbname dbtable user password
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console

from .main import config_logger
from ..core.config import DEFAULT_DRIVER, BindingConfig
from ..core.exporter import ZoneExporter
from ..core.session import ConnectionSession
from ..exceptions import SQLBackendError
from ..parsers.zone_file import load_zone

console = Console()
logger = logging.getLogger(__name__)


class UsageParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad usage."""

    def error(self, message):
        self.print_usage(sys.stdout)
        print("Note that dbname must be an existing database.")
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = UsageParser(
        prog="zonetodb",
        description="Generate a zone table from a zone file",
    )
    parser.add_argument("origin", help="Zone origin, e.g. mydomain.com")
    parser.add_argument("zonefile", help="Zone file to load")
    parser.add_argument("dbname", help="Existing database to write to")
    parser.add_argument("dbtable", help="Table to (re)create")
    parser.add_argument("user", help="Database user")
    parser.add_argument("password", help="Database password")
    parser.add_argument(
        "--host", default="localhost", help="Database host (default: localhost)"
    )
    parser.add_argument(
        "--driver",
        default=DEFAULT_DRIVER,
        help=f"SQLAlchemy driver (default: {DEFAULT_DRIVER})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the statements without connecting to the database",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser


def echo_statement(statement: str) -> None:
    console.print(statement, markup=False, highlight=False, soft_wrap=True)


def main(argv: Optional[List[str]] = None):
    """Export a zone file into a table; exit 0 on success, 1 on failure."""
    args = build_parser().parse_args(argv)
    config_logger({}, args.verbose)

    session = None
    try:
        zone = load_zone(args.origin, args.zonefile)

        if args.dry_run:
            exporter = ZoneExporter(args.dbtable, echo=echo_statement)
        else:
            config = BindingConfig(
                database=args.dbname,
                table=args.dbtable,
                host=args.host,
                user=args.user,
                password=args.password,
                driver=args.driver,
            )
            session = ConnectionSession(config)
            print(f"Connecting to '{args.dbname}'")
            connection = session.connect()
            exporter = ZoneExporter(args.dbtable, connection, echo=echo_statement)

        result = exporter.export(zone)

    except SQLBackendError as e:
        print(f"Error: {e}", file=sys.stderr)
        close_and_exit(session, 1)

    console.print(
        f"[green]Exported {result.rows} records for {result.names} names "
        f"into '{result.table}'[/green]"
    )
    close_and_exit(session, 0)


def close_and_exit(session: Optional[ConnectionSession], status: int):
    if session is not None:
        session.close()
    sys.exit(status)


if __name__ == "__main__":
    main()
