"""
Step definitions for zone export scenarios.
"""

from behave import given, then, when

from dns_sql_backend.core.config import BindingConfig
from dns_sql_backend.core.exporter import ZoneExporter
from dns_sql_backend.core.session import ConnectionSession
from dns_sql_backend.parsers.zone_file import load_zone


@given('a zone file for "{origin}" containing')
def step_impl(context, origin):
    """Write the step text as a zone file."""
    context.origin = origin
    context.zone_file = context.work_dir / f"db.{origin}"
    context.zone_file.write_text(context.text + "\n")


@when('I export the zone into the table "{table}"')
def step_impl(context, table):
    """Run the exporter against the scenario database."""
    context.statements = []
    session = ConnectionSession(
        BindingConfig(database=context.db_path, table=table, driver="sqlite")
    )
    try:
        exporter = ZoneExporter(table, session.connect(), echo=context.statements.append)
        context.export_result = exporter.export(load_zone(context.origin, str(context.zone_file)))
    finally:
        session.close()


@then('the table "{table}" is dropped and created before any insert')
def step_impl(context, table):
    """Check the order of the echoed statements."""
    statements = context.statements
    assert statements[0].startswith(f"DROP TABLE IF EXISTS {table}"), statements[0]
    assert statements[1].startswith(f"CREATE TABLE {table}"), statements[1]
    assert all(s.startswith("INSERT INTO") for s in statements[2:]), statements[2:]


@then("{count:d} rows are exported")
def step_impl(context, count):
    """Check the number of inserted rows."""
    assert context.export_result.rows == count, (
        f"Expected {count} rows, got {context.export_result.rows}"
    )
