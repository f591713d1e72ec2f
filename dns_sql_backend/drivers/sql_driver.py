"""
SQL zone driver implementation.

This module serves zones out of a relational table through SQLAlchemy. It
opens one connection per zone, which is not efficient but keeps every
binding independent of the others.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from sqlalchemy.engine import Engine

from .base_driver import ZoneDriver
from ..core.binding import ZoneBinding
from ..core.config import DEFAULT_DRIVER, BindingConfig
from ..core.record_mapper import NamedRecord, ResourceRecord
from ..core.session import default_engine_factory

logger = logging.getLogger(__name__)


class SQLZoneDriver(ZoneDriver):
    """Zone driver backed by a SQLAlchemy-supported database."""

    def __init__(
        self,
        config: Optional[Dict] = None,
        engine_factory: Callable[[BindingConfig], Engine] = default_engine_factory,
    ):
        """Initialize the driver."""
        self.config = config or {}
        self.driver = self.config.get("driver", DEFAULT_DRIVER)
        self.engine_factory = engine_factory
        logger.info(f"SQL zone driver initialized for '{self.driver}'")

    def create(
        self, zone_name: str, args: Union[Sequence[str], Dict, BindingConfig]
    ) -> ZoneBinding:
        """
        Create a binding for a zone.

        ``args`` is either the positional ``database table [host [user
        [password]]]`` list, a zone section of the YAML configuration, or a
        ready BindingConfig.
        """
        if isinstance(args, BindingConfig):
            config = args
        elif isinstance(args, dict):
            config = BindingConfig.from_dict(args, self.driver)
        else:
            config = BindingConfig.from_args(args, self.driver)

        return ZoneBinding.create(zone_name, config, self.engine_factory)

    def lookup(self, binding: ZoneBinding, name: str) -> List[ResourceRecord]:
        """Look up one name in a bound zone."""
        return binding.lookup(name)

    def enumerate(self, binding: ZoneBinding) -> List[NamedRecord]:
        """Return all records of a bound zone ordered by name."""
        return binding.enumerate()

    def destroy(self, binding: ZoneBinding) -> None:
        """Release a binding."""
        binding.destroy()
