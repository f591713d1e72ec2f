"""
Driver Registry - explicit registration of zone drivers

The name server owns one registry. Drivers are registered under a name at
startup, bindings are created through the registry and tracked there, and
clear() tears everything down at shutdown.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence

from .base_driver import ZoneDriver
from .sql_driver import SQLZoneDriver
from ..core.binding import ZoneBinding
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SQL_DRIVER_NAME = "sqldb"


class DriverRegistry:
    """Registry of zone drivers and the bindings created through them."""

    def __init__(self):
        self._drivers: Dict[str, ZoneDriver] = {}
        self._bindings: Dict[int, tuple] = {}
        self._lock = threading.Lock()

    def register(self, name: str, driver: ZoneDriver) -> None:
        """Register a driver under a name. A name already taken keeps its driver."""
        with self._lock:
            if name in self._drivers:
                logger.debug(f"Zone driver '{name}' already registered")
                return
            self._drivers[name] = driver
        logger.info(f"Registered zone driver '{name}'")

    def unregister(self, name: str) -> None:
        """
        Unregister a driver. Unknown names are ignored.

        Bindings created through the driver stay usable until destroyed.
        """
        with self._lock:
            driver = self._drivers.pop(name, None)
        if driver is not None:
            logger.info(f"Unregistered zone driver '{name}'")

    def get(self, name: str) -> ZoneDriver:
        with self._lock:
            driver = self._drivers.get(name)
        if driver is None:
            raise ConfigurationError(f"Unknown zone driver '{name}'")
        return driver

    @property
    def drivers(self) -> List[str]:
        with self._lock:
            return sorted(self._drivers)

    @property
    def bindings(self) -> List[ZoneBinding]:
        with self._lock:
            return [binding for binding, _ in self._bindings.values()]

    def create(self, driver_name: str, zone_name: str, args) -> ZoneBinding:
        """Create a zone binding through a registered driver and track it."""
        driver = self.get(driver_name)
        binding = driver.create(zone_name, args)
        with self._lock:
            self._bindings[id(binding)] = (binding, driver)
        return binding

    def destroy(self, binding: ZoneBinding) -> None:
        """Destroy a binding through the driver that created it."""
        with self._lock:
            entry = self._bindings.pop(id(binding), None)
        if entry is None:
            binding.destroy()
            return
        _, driver = entry
        driver.destroy(binding)

    def clear(self) -> None:
        """Destroy every tracked binding and unregister every driver."""
        for binding in self.bindings:
            self.destroy(binding)
        for name in self.drivers:
            self.unregister(name)


def init_registry(
    config: Optional[Dict] = None, registry: Optional[DriverRegistry] = None
) -> DriverRegistry:
    """Return a registry with the SQL driver registered as ``sqldb``."""
    registry = registry or DriverRegistry()
    registry.register(SQL_DRIVER_NAME, SQLZoneDriver(config))
    return registry
