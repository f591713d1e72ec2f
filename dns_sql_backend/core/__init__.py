"""
Core zone backend functionality.

This package contains the binding, session, lookup and export logic.
"""

from .binding import ZoneBinding
from .config import BindingConfig
from .exporter import ExportResult, ZoneExporter
from .record_mapper import (
    NamedRecord,
    RecordMapper,
    ResourceRecord,
    parse_rdata,
    records_to_rrsets,
)
from .session import ConnectionSession, SessionState
from .wildcard import derive_wildcard_key

__all__ = [
    "BindingConfig",
    "ConnectionSession",
    "ExportResult",
    "NamedRecord",
    "RecordMapper",
    "ResourceRecord",
    "SessionState",
    "ZoneBinding",
    "ZoneExporter",
    "derive_wildcard_key",
    "parse_rdata",
    "records_to_rrsets",
]
