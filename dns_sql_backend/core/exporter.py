"""
Zone Exporter - writes a zone into a zone table

The exporter is the inverse of the record mapper: it walks a loaded zone and
writes one row per record using the same columns the lookup path reads. The
target table is dropped and recreated first, so there is no way back once a
run has started.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Union

import dns.rdatatype
import dns.zone
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Connection, Dialect, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable, DropTable

from .record_mapper import NamedRecord
from .schema import zone_table
from .wildcard import is_wildcard
from ..exceptions import ExportError
from ..utils.validators import quote_string, validate_field_length

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Summary of a finished export."""

    table: str
    rows: int = 0
    names: int = 0
    wildcard_names: int = 0
    statements: List[str] = field(default_factory=list)


def iter_zone_rows(zone: dns.zone.Zone) -> Iterator[NamedRecord]:
    """
    Yield one row per record, in zone iteration order.

    Names are absolute without the final dot; record data is in
    presentation format.
    """
    for name, node in zone.nodes.items():
        owner = name.derelativize(zone.origin).to_text(omit_final_dot=True)
        for rdataset in node.rdatasets:
            rdtype = dns.rdatatype.to_text(rdataset.rdtype)
            for rdata in rdataset:
                data = rdata.to_text(origin=zone.origin, relativize=False)
                yield NamedRecord(owner, rdataset.ttl, rdtype, data)


def _autocommit(connection: Optional[Connection]) -> Optional[Connection]:
    # isolation can only change outside a transaction; a connection that
    # already began one gets a commit after every statement instead
    if connection is None or connection.in_transaction():
        return connection
    return connection.execution_options(isolation_level="AUTOCOMMIT")


class ZoneExporter:
    """Exports a zone into a freshly created table."""

    def __init__(
        self,
        table_name: str,
        bind: Optional[Union[Engine, Connection]] = None,
        echo: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the exporter.

        Args:
            table_name: Name of the table to recreate
            bind: An engine (a connection is opened and closed per export) or
                an open connection. Without either the exporter runs dry:
                statements are rendered and echoed but nothing is executed.
            echo: Called with each rendered statement
        """
        self.table = zone_table(table_name)
        self.bind = bind
        self.connection: Optional[Connection] = None
        self.echo = echo or (lambda statement: None)
        self.dialect: Dialect = bind.dialect if bind is not None else mysql.dialect()

    @property
    def dry_run(self) -> bool:
        return self.bind is None

    def export(self, zone: dns.zone.Zone) -> ExportResult:
        """
        Drop and recreate the table, then insert every record of the zone.

        Every statement is committed as soon as it succeeds.

        Raises:
            ExportError: If the connection, table creation or any insert
                fails; rows already inserted stay in place
        """
        if not isinstance(self.bind, Engine):
            return self._export(zone, self.bind)

        try:
            connection = self.bind.connect()
        except SQLAlchemyError as e:
            logger.error(f"Connection for export failed: {e}")
            raise ExportError(f"Connection for export failed: {e}") from e
        with connection:
            return self._export(zone, connection)

    def _export(self, zone: dns.zone.Zone, connection: Optional[Connection]) -> ExportResult:
        self.connection = _autocommit(connection)
        result = ExportResult(table=self.table.name)

        self._reset_table(result)

        for name, node in zone.nodes.items():
            result.names += 1
            if is_wildcard(name.to_text()):
                result.wildcard_names += 1

        for row in iter_zone_rows(zone):
            self._insert(row, result)

        logger.info(
            f"Exported {result.rows} records for {result.names} names "
            f"into table '{self.table.name}'"
        )
        return result

    def _reset_table(self, result: ExportResult):
        drop = DropTable(self.table, if_exists=True)
        create = CreateTable(self.table)

        self._emit(self._render(drop), result)
        try:
            self._execute(drop)
        except SQLAlchemyError as e:
            # the create below reports anything that matters
            logger.warning(f"DROP TABLE command failed: {e}")

        self._emit(self._render(create), result)
        try:
            self._execute(create)
        except SQLAlchemyError as e:
            logger.error(f"CREATE TABLE command failed: {e}")
            raise ExportError(f"CREATE TABLE command failed: {e}") from e

    def _insert(self, row: NamedRecord, result: ExportResult):
        for column, value in (("name", row.name), ("rdtype", row.type), ("rdata", row.data)):
            if not validate_field_length(value, column):
                raise ExportError(
                    f"Value for '{column}' of {row.name} {row.type} is too long"
                )

        self._emit(self._render_insert(row), result)
        try:
            self._execute(
                self.table.insert().values(
                    name=row.name, ttl=row.ttl, rdtype=row.type, rdata=row.data
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"INSERT INTO command failed: {e}")
            raise ExportError(f"INSERT INTO command failed: {e}") from e
        result.rows += 1

    def _execute(self, statement):
        if self.dry_run:
            return
        self.connection.execute(statement)
        if self.connection.in_transaction():
            self.connection.commit()

    def _emit(self, statement: str, result: ExportResult):
        result.statements.append(statement)
        self.echo(statement)

    def _render(self, ddl) -> str:
        return " ".join(str(ddl.compile(dialect=self.dialect)).split())

    def _render_insert(self, row: NamedRecord) -> str:
        table = self.dialect.identifier_preparer.format_table(self.table)
        return (
            f"INSERT INTO {table} (name, ttl, rdtype, rdata) "
            f"VALUES ('{quote_string(row.name)}', {row.ttl}, "
            f"'{quote_string(row.type)}', '{quote_string(row.data)}')"
        )
