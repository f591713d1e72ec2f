"""
Zone Binding - the live association between a zone and its table

A binding is created once per zone when the server loads it, owns its
configuration and its connection session, and is destroyed when the zone is
unloaded.
"""

import logging
from typing import Callable, List, Optional, Sequence

from sqlalchemy.engine import Engine

from .config import DEFAULT_DRIVER, BindingConfig
from .record_mapper import NamedRecord, RecordMapper, ResourceRecord
from .session import ConnectionSession, SessionState, default_engine_factory
from ..exceptions import ConfigurationError, SQLBackendError

logger = logging.getLogger(__name__)


class ZoneBinding:
    """A configured, connected zone backed by a database table."""

    def __init__(
        self,
        zone_name: str,
        config: BindingConfig,
        engine_factory: Callable[[BindingConfig], Engine] = default_engine_factory,
    ):
        """Initialize the binding without connecting. Use create()."""
        self.zone_name = zone_name
        self.config: Optional[BindingConfig] = config
        self.session: Optional[ConnectionSession] = ConnectionSession(
            config, engine_factory
        )
        self.mapper: Optional[RecordMapper] = RecordMapper(self.session, config)

    @classmethod
    def create(
        cls,
        zone_name: str,
        config: BindingConfig,
        engine_factory: Callable[[BindingConfig], Engine] = default_engine_factory,
    ) -> "ZoneBinding":
        """
        Create a binding and connect it.

        If the initial connect fails the partially built binding is torn
        down through destroy() and the error is raised.
        """
        if config is None:
            raise ConfigurationError(f"No configuration for zone '{zone_name}'")

        binding = cls(zone_name, config, engine_factory)
        try:
            binding.session.connect()
        except SQLBackendError:
            binding.destroy()
            raise

        logger.info(
            f"Zone '{zone_name}' bound to table '{config.table}' "
            f"in database '{config.database}'"
        )
        return binding

    @classmethod
    def from_args(
        cls,
        zone_name: str,
        args: Sequence[str],
        driver: str = DEFAULT_DRIVER,
        engine_factory: Callable[[BindingConfig], Engine] = default_engine_factory,
    ) -> "ZoneBinding":
        """Create a binding from ``database table [host [user [password]]]``."""
        return cls.create(
            zone_name, BindingConfig.from_args(args, driver), engine_factory
        )

    @property
    def closed(self) -> bool:
        return self.session is None

    def lookup(self, name: str) -> List[ResourceRecord]:
        """Resolve one absolute name in this zone."""
        return self._require_mapper().lookup(name)

    def enumerate(self) -> List[NamedRecord]:
        """Return every record of this zone ordered by name."""
        return self._require_mapper().enumerate()

    def destroy(self):
        """Close the session and release the configuration. Safe to repeat."""
        session = self.session
        if session is not None:
            session.close()
            logger.info(f"Zone '{self.zone_name}' unbound")

        self.session = None
        self.mapper = None
        self.config = None

    def _require_mapper(self) -> RecordMapper:
        if self.mapper is None:
            raise ConfigurationError(f"Zone '{self.zone_name}' binding is destroyed")
        return self.mapper

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.destroy()

    def __repr__(self) -> str:
        state = self.session.state.value if self.session else SessionState.DISCONNECTED.value
        return f"<ZoneBinding zone={self.zone_name!r} state={state}>"
