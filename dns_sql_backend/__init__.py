"""
DNS SQL Backend - serve DNS zones out of a relational table

A zone driver that resolves names from a database table, with a single-level
wildcard fallback, plus an exporter that loads zone files into such tables.
"""

__version__ = "1.0.0"
__author__ = "DNS SQL Backend Team"
__description__ = "Serve DNS zones from a relational database table"

from .core.binding import ZoneBinding
from .core.config import BindingConfig
from .core.exporter import ZoneExporter
from .drivers.registry import DriverRegistry, init_registry
from .drivers.sql_driver import SQLZoneDriver

__all__ = [
    "BindingConfig",
    "DriverRegistry",
    "SQLZoneDriver",
    "ZoneBinding",
    "ZoneExporter",
    "init_registry",
]
