"""
Step definitions for zone resolution scenarios.
"""

from behave import given, step, then, when
from sqlalchemy import create_engine, text

from dns_sql_backend.core.config import BindingConfig
from dns_sql_backend.drivers.registry import SQL_DRIVER_NAME
from dns_sql_backend.exceptions import SQLBackendError


def _insert_rows(context, table, rows, scoped):
    engine = create_engine(f"sqlite:///{context.db_path}")
    columns = ["name", "ttl", "rdtype", "rdata"] + (["domain", "tenant"] if scoped else [])
    statement = text(
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join(':' + column for column in columns)})"
    )
    with engine.begin() as conn:
        for row in rows:
            conn.execute(statement, dict(zip(columns, row)))
    engine.dispose()


def _create_table(context, table, scoped):
    engine = create_engine(f"sqlite:///{context.db_path}")
    scope_ddl = ", domain VARCHAR(255), tenant VARCHAR(255)" if scoped else ""
    with engine.begin() as conn:
        conn.execute(
            text(
                f"CREATE TABLE {table} (name VARCHAR(255), ttl VARCHAR(32), "
                f"rdtype VARCHAR(255), rdata VARCHAR(255){scope_ddl})"
            )
        )
    engine.dispose()


@given('a zone table "{table}" with the rows')
def step_impl(context, table):
    """Create a zone table from the step table."""
    _create_table(context, table, scoped=False)
    rows = [(r["name"], r["ttl"], r["type"], r["data"]) for r in context.table]
    _insert_rows(context, table, rows, scoped=False)


@given('a scoped zone table "{table}" with the rows')
def step_impl(context, table):
    """Create a zone table with domain and tenant columns."""
    _create_table(context, table, scoped=True)
    rows = [
        (r["name"], r["ttl"], r["type"], r["data"], r["domain"], r["tenant"])
        for r in context.table
    ]
    _insert_rows(context, table, rows, scoped=True)


@given('the table "{table}" also has the row "{name}" with ttl "{ttl}", type "{rdtype}" and data "{data}"')
def step_impl(context, table, name, ttl, rdtype, data):
    """Add one row to an existing zone table."""
    _insert_rows(context, table, [(name, ttl, rdtype, data)], scoped=False)


@step('the zone "{zone}" is bound to the table "{table}"')
def step_impl(context, zone, table):
    """Create a binding through the registry."""
    config = BindingConfig(database=context.db_path, table=table, driver="sqlite")
    context.binding = context.registry.create(SQL_DRIVER_NAME, zone, config)


@given('the zone "{zone}" is scoped to domain "{domain}" and tenant "{tenant}" in the table "{table}"')
def step_impl(context, zone, domain, tenant, table):
    """Create a scoped binding through the registry."""
    config = {"database": context.db_path, "table": table, "domain": domain, "tenant": tenant}
    context.binding = context.registry.create(SQL_DRIVER_NAME, zone, config)


@when('I look up "{name}"')
def step_impl(context, name):
    """Resolve a name, keeping the error if it fails."""
    try:
        context.records = context.binding.lookup(name)
    except SQLBackendError as e:
        context.error = e


@when("I enumerate the zone")
def step_impl(context):
    """Enumerate the bound zone, keeping the error if it fails."""
    try:
        context.records = context.binding.enumerate()
    except SQLBackendError as e:
        context.error = e


@then("the lookup returns")
def step_impl(context):
    """Compare the lookup result with the step table."""
    assert context.error is None, f"Lookup failed: {context.error!r}"
    expected = [(int(r["ttl"]), r["type"], r["data"]) for r in context.table]
    actual = [tuple(record) for record in context.records]
    assert actual == expected, f"Expected {expected}, got {actual}"


@then('the call fails with "{error}"')
def step_impl(context, error):
    """Check the error type of the last call."""
    assert context.error is not None, f"Expected {error}, got {context.records}"
    assert type(context.error).__name__ == error, (
        f"Expected {error}, got {type(context.error).__name__}: {context.error}"
    )
    assert context.records is None, "Partial records were returned"


@then("the names are in ascending order")
def step_impl(context):
    """Check enumeration order."""
    assert context.error is None, f"Enumeration failed: {context.error!r}"
    names = [record.name for record in context.records]
    assert names == sorted(names), f"Names out of order: {names}"
