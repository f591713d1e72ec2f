#!/usr/bin/env python3
"""
DNS SQL Backend - Demo Script

This script exports a small zone into a temporary SQLite database and then
resolves names from it through the SQL zone driver.
"""

import os
import tempfile

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dns_sql_backend import init_registry
from dns_sql_backend.core.binding import ZoneBinding
from dns_sql_backend.core.config import BindingConfig
from dns_sql_backend.core.exporter import ZoneExporter
from dns_sql_backend.core.session import ConnectionSession
from dns_sql_backend.exceptions import SQLBackendError
from dns_sql_backend.parsers.zone_file import load_zone

console = Console()

DEMO_ZONE = """\
$TTL 259200
@       IN SOA  mydomain.com. www.mydomain.com. 200309181 28800 7200 86400 28800
@       IN NS   ns0.mydomain.com.
@       IN NS   ns1.mydomain.com.
@       IN MX   10 mail.mydomain.com.
w0      IN A    192.168.1.1
w1      IN A    192.168.1.2
mail    IN CNAME w0
ns0     IN CNAME w0
ns1     IN CNAME w1
www     IN CNAME w0
*   300 IN A    10.0.0.1
"""


def create_demo_zone(directory: str) -> str:
    """Write the demo zone file."""
    zone_file = os.path.join(directory, "db.mydomain.com")
    with open(zone_file, "w") as f:
        f.write(DEMO_ZONE)
    return zone_file


def export_demo_zone(config: BindingConfig, zone_file: str):
    """Load the zone file into the demo table."""
    console.print("[bold]Exporting zone file:[/bold]")
    session = ConnectionSession(config)
    try:
        exporter = ZoneExporter(
            config.table,
            session.connect(),
            echo=lambda statement: console.print(
                f"  {statement}", markup=False, highlight=False
            ),
        )
        result = exporter.export(load_zone("mydomain.com", zone_file))
    finally:
        session.close()
    console.print(f"[green]Exported {result.rows} records[/green]\n")


def display_lookups(binding: ZoneBinding):
    """Resolve a few names, including ones served by the wildcard."""
    table = Table(title="Lookups")
    table.add_column("Name", style="blue")
    table.add_column("Result", style="green")

    for name in ("www.mydomain.com", "W0.MYDOMAIN.COM", "anything.mydomain.com", "localhost"):
        try:
            records = binding.lookup(name)
            result = ", ".join(f"{r.type} {r.data} ({r.ttl})" for r in records)
        except SQLBackendError as e:
            result = f"[red]{type(e).__name__}: {e}[/red]"
        table.add_row(name, result)

    console.print(table)


def main():
    console.print(
        Panel.fit(
            "[bold blue]DNS SQL Backend - Demo[/bold blue]\n"
            "[cyan]Serving mydomain.com from a SQLite table[/cyan]",
            border_style="blue",
        )
    )

    with tempfile.TemporaryDirectory() as directory:
        config = BindingConfig(
            database=os.path.join(directory, "zones.db"),
            table="mydomain",
            driver="sqlite",
        )
        export_demo_zone(config, create_demo_zone(directory))

        registry = init_registry({"driver": "sqlite"})
        try:
            binding = registry.create("sqldb", "mydomain.com", config)
            display_lookups(binding)
            console.print(f"\n[blue]{len(binding.enumerate())} records in zone[/blue]")
        finally:
            registry.clear()


if __name__ == "__main__":
    main()
