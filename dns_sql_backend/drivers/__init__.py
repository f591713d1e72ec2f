"""
Zone driver implementations.

This package contains the adapter contract a name server talks to, the SQL
driver that implements it, and the registry that holds drivers and their
bindings.
"""

from .base_driver import ZoneDriver
from .registry import SQL_DRIVER_NAME, DriverRegistry, init_registry
from .sql_driver import SQLZoneDriver

__all__ = [
    "ZoneDriver",
    "SQLZoneDriver",
    "DriverRegistry",
    "init_registry",
    "SQL_DRIVER_NAME",
]
