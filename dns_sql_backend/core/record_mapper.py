"""
Record Mapper - Core logic for turning zone table rows into records

This module builds the lookup and enumeration queries for a binding, runs
them over the binding's session and maps the resulting rows into resource
record tuples. A single malformed row fails the whole call.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

import dns.exception
import dns.name
import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.rrset
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .config import BindingConfig
from .schema import zone_table
from .session import ConnectionSession
from .wildcard import derive_wildcard_key
from ..exceptions import (
    ConfigurationError,
    DataFormatError,
    NotFoundError,
    QueryError,
)
from ..utils.validators import normalize_name, parse_ttl

logger = logging.getLogger(__name__)


class ResourceRecord(NamedTuple):
    ttl: int
    type: str
    data: str


class NamedRecord(NamedTuple):
    name: str
    ttl: int
    type: str
    data: str


def map_record(row: Sequence) -> ResourceRecord:
    """Map a ``(ttl, rdtype, rdata)`` row."""
    ttl, rdtype, rdata = row
    return ResourceRecord(parse_ttl(ttl), rdtype, rdata)


def map_named_record(row: Sequence) -> NamedRecord:
    """Map a ``(name, ttl, rdtype, rdata)`` row."""
    name, ttl, rdtype, rdata = row
    return NamedRecord(name, parse_ttl(ttl), rdtype, rdata)


class RecordMapper:
    """Runs the lookup and enumeration queries of one binding."""

    def __init__(self, session: ConnectionSession, config: BindingConfig):
        """Initialize the mapper for a binding's table and scope."""
        self.session = session
        self.config = config
        self.scope = config.scope_filters()
        self.table = zone_table(config.table, [column for column, _ in self.scope])

    def lookup(self, name: str) -> List[ResourceRecord]:
        """
        Resolve one name.

        The exact name is tried first, case-insensitively. If it matches no
        rows the wildcard formed from its last two labels is tried once.

        Args:
            name: Absolute name to resolve

        Returns:
            Records in the order the database returned them

        Raises:
            ConfigurationError: No exact match and no wildcard suffix exists
            NotFoundError: Neither the name nor its wildcard matched
            DataFormatError: A matched row has an invalid ttl, or invalid
                type or data when the binding validates records
        """
        name = normalize_name(name)

        # held across both queries so the fallback sees the same session
        with self.session.lock:
            rows = self._fetch(self._lookup_statement(name))

            if not rows:
                wildcard = derive_wildcard_key(name)
                if wildcard is None:
                    logger.error(f"No wildcard fallback available for '{name}'")
                    raise ConfigurationError(
                        f"'{name}' not found and has no wildcard suffix"
                    )

                logger.debug(f"No rows for '{name}', trying '{wildcard}'")
                rows = self._fetch(self._lookup_statement(wildcard))

                if not rows:
                    raise NotFoundError(f"No records for '{name}'")

        records = self._map_rows(rows, map_record, name)
        if self.config.validate_records:
            for record in records:
                parse_rdata(name, record.type, record.data)
        logger.debug(f"Resolved '{name}' to {len(records)} records")
        return records

    def enumerate(self) -> List[NamedRecord]:
        """
        Return every record visible to the binding, ordered by name.

        Raises:
            NotFoundError: The binding's scope holds no rows
            DataFormatError: Any row has an invalid ttl, or invalid type or
                data when the binding validates records
        """
        rows = self._fetch(self._enumerate_statement())
        if not rows:
            raise NotFoundError(f"No records in table '{self.config.table}'")

        records = self._map_rows(rows, map_named_record, self.config.table)
        if self.config.validate_records:
            for record in records:
                parse_rdata(record.name, record.type, record.data)
        logger.info(
            f"Enumerated {len(records)} records from table '{self.config.table}'"
        )
        return records

    def _lookup_statement(self, name: str):
        table = self.table
        statement = select(table.c.ttl, table.c.rdtype, table.c.rdata).where(
            func.upper(table.c.name) == func.upper(name)
        )
        return self._scoped(statement)

    def _enumerate_statement(self):
        table = self.table
        statement = select(
            table.c.name, table.c.ttl, table.c.rdtype, table.c.rdata
        ).order_by(table.c.name)
        return self._scoped(statement)

    def _scoped(self, statement):
        for column, value in self.scope:
            statement = statement.where(self.table.c[column] == value)
        return statement

    def _fetch(self, statement) -> List:
        with self.session.acquire() as connection:
            try:
                return connection.execute(statement).all()
            except SQLAlchemyError as e:
                logger.error(f"Query on table '{self.config.table}' failed: {e}")
                raise QueryError(
                    f"Query on table '{self.config.table}' failed: {e}"
                ) from e

    def _map_rows(self, rows: Iterable, mapper, context: str) -> List:
        try:
            return [mapper(row) for row in rows]
        except DataFormatError as e:
            logger.error(f"Bad row while reading '{context}': {e}")
            raise


def parse_rdata(
    name: str, rdtype_text: str, data: str, origin: dns.name.Name = dns.name.root
) -> dns.rdata.Rdata:
    """
    Parse one record's type and data in presentation format.

    Raises:
        DataFormatError: The type or data cannot be parsed
    """
    try:
        rdtype = dns.rdatatype.from_text(rdtype_text)
        return dns.rdata.from_text(dns.rdataclass.IN, rdtype, data, origin=origin)
    except (dns.exception.DNSException, ValueError) as e:
        logger.error(f"Invalid record for '{name}': {rdtype_text} {data!r}: {e}")
        raise DataFormatError(
            f"Invalid record for '{name}': {rdtype_text} {data!r}: {e}"
        ) from e


def records_to_rrsets(
    name: str,
    records: Iterable[ResourceRecord],
    origin: Optional[str] = None,
) -> List[dns.rrset.RRset]:
    """
    Convert lookup results into dnspython RRsets, one per type.

    Record data is parsed in presentation format, so this also validates
    that the stored type and data are well formed. Relative names in the
    data are made absolute against ``origin``.

    Raises:
        DataFormatError: A record's type or data cannot be parsed
    """
    owner = dns.name.from_text(name)
    origin_name = dns.name.from_text(origin) if origin else dns.name.root
    rrsets: Dict[int, dns.rrset.RRset] = {}

    for record in records:
        rdata = parse_rdata(name, record.type, record.data, origin_name)
        if rdata.rdtype not in rrsets:
            rrsets[rdata.rdtype] = dns.rrset.RRset(owner, dns.rdataclass.IN, rdata.rdtype)
        rrsets[rdata.rdtype].add(rdata, record.ttl)

    return list(rrsets.values())
