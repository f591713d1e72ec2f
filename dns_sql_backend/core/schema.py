"""
Zone table schema.

The same four columns are written by the zone exporter and read back by the
record mapper. Scope columns are appended only when a binding uses them.
"""

from typing import Iterable

from sqlalchemy import Column, Integer, MetaData, String, Table

from ..utils.validators import MAX_FIELD_LENGTH

RECORD_COLUMNS = ("name", "ttl", "rdtype", "rdata")


def zone_table(name: str, scope_columns: Iterable[str] = ()) -> Table:
    """
    Describe a zone table.

    Args:
        name: Table name, quoted by SQLAlchemy when rendered
        scope_columns: Optional scope column names (tenant/domain)

    Returns:
        A Table bound to its own MetaData
    """
    columns = [
        Column("name", String(MAX_FIELD_LENGTH)),
        Column("ttl", Integer),
        Column("rdtype", String(MAX_FIELD_LENGTH)),
        Column("rdata", String(MAX_FIELD_LENGTH)),
    ]
    columns.extend(Column(column, String(MAX_FIELD_LENGTH)) for column in scope_columns)
    return Table(name, MetaData(), *columns)
