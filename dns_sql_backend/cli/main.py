#!/usr/bin/env python3
"""
DNS SQL Backend - Command Line Interface

Answers lookups and dumps zones straight from the database, the same way the
name server would, so table contents can be audited without a running server.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from rich.console import Console
from rich.table import Table

from ..core.config import DEFAULT_DRIVER
from ..core.record_mapper import records_to_rrsets
from ..drivers.registry import SQL_DRIVER_NAME, init_registry
from ..exceptions import NotFoundError, SQLBackendError

console = Console()
logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="DNS SQL Backend - resolve zone data from a database table"
    )

    parser.add_argument(
        "--config",
        "-c",
        default="configs/config.yaml",
        help="Configuration file path (default: configs/config.yaml)",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup_parser = subparsers.add_parser("lookup", help="Resolve one name")
    lookup_parser.add_argument("zone", help="Configured zone to query")
    lookup_parser.add_argument("name", help="Absolute name to resolve")
    lookup_parser.add_argument(
        "--rrsets",
        action="store_true",
        help="Parse the records and print them as RRsets",
    )

    dump_parser = subparsers.add_parser("dump", help="List every record of a zone")
    dump_parser.add_argument("zone", help="Configured zone to dump")

    args = parser.parse_args(argv)

    if not Path(args.config).exists():
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)

    config = load_config(args.config)
    config_logger(config, args.verbose)

    zone_config = config.get("zones", {}).get(args.zone)
    if zone_config is None:
        print(f"Error: Zone '{args.zone}' is not configured in '{args.config}'")
        sys.exit(1)

    registry = init_registry({"driver": config.get("driver", DEFAULT_DRIVER)})
    try:
        binding = registry.create(SQL_DRIVER_NAME, args.zone, zone_config)
        if args.command == "lookup":
            records = binding.lookup(args.name)
            if args.rrsets:
                for rrset in records_to_rrsets(args.name, records, origin=args.zone):
                    console.print(rrset.to_text(), markup=False, highlight=False, soft_wrap=True)
            else:
                display_records(args.name, records)
        else:
            display_zone(args.zone, binding.enumerate())
        sys.exit(0)

    except NotFoundError as e:
        print(f"Not found: {e}")
        sys.exit(1)
    except SQLBackendError as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    finally:
        registry.clear()


def display_records(name: str, records) -> None:
    """Print lookup results as a table."""
    table = Table(title=f"Records for {name}")
    table.add_column("TTL", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Data", style="green")

    for record in records:
        table.add_row(str(record.ttl), record.type, record.data)

    console.print(table)


def display_zone(zone: str, records) -> None:
    """Print an enumerated zone as a table."""
    table = Table(title=f"Zone {zone}")
    table.add_column("Name", style="blue")
    table.add_column("TTL", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Data", style="green")

    for record in records:
        table.add_row(record.name, str(record.ttl), record.type, record.data)

    console.print(table)
    console.print(f"[blue]{len(records)} records[/blue]")


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {config_path}")
        return config
    except FileNotFoundError:
        logger.warning(f"Config file {config_path} not found, using defaults")
        return get_default_config()
    except yaml.YAMLError as e:
        logger.error(f"Error parsing config file: {e}")
        sys.exit(1)


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "driver": "mysql+pymysql",
        "zones": {},
        "logging": {"level": "INFO", "file": "dns_sql_backend.log"},
    }


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging", None)
    if logging_config:
        log_level = "DEBUG" if verbose else logging_config.get("level", "INFO")
        log_file = logging_config.get("file", "dns_sql_backend.log")

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler(sys.stdout),
            ],
        )
        return

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


if __name__ == "__main__":
    main()
