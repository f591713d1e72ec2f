"""
Base zone database driver interface.

This module defines the adapter contract a name server uses to serve a zone
out of a database: create a binding, look names up, enumerate the zone and
destroy the binding.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..core.binding import ZoneBinding
from ..core.record_mapper import NamedRecord, ResourceRecord


class ZoneDriver(ABC):
    """Abstract base class for zone database drivers."""

    @abstractmethod
    def create(self, zone_name: str, args: Sequence[str]) -> ZoneBinding:
        """Create a binding for a zone."""
        pass

    @abstractmethod
    def lookup(self, binding: ZoneBinding, name: str) -> List[ResourceRecord]:
        """Look up one name in a bound zone."""
        pass

    @abstractmethod
    def enumerate(self, binding: ZoneBinding) -> List[NamedRecord]:
        """Return all records of a bound zone ordered by name."""
        pass

    @abstractmethod
    def destroy(self, binding: ZoneBinding) -> None:
        """Release a binding."""
        pass
