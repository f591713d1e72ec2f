"""
Connection Session - one database connection per zone binding

The session is created when a binding is created and lives until the zone is
unloaded. Before every query the connection is probed; a failed probe gets
exactly one reconnect attempt and nothing more.
"""

import enum
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from .config import BindingConfig
from ..exceptions import ConfigurationError, DatabaseConnectionError

logger = logging.getLogger(__name__)

PROBE_STATEMENT = text("SELECT 1")


class SessionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    FAILED = "failed"


def default_engine_factory(config: BindingConfig) -> Engine:
    # NullPool: closing the connection really closes it, so a binding never
    # holds more than the one connection it owns.
    url = config.url()
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        # access is serialized by the session lock
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        poolclass=NullPool,
        isolation_level="AUTOCOMMIT",
        connect_args=connect_args,
    )


class ConnectionSession:
    """Owns the database connection of a single zone binding."""

    def __init__(
        self,
        config: BindingConfig,
        engine_factory: Callable[[BindingConfig], Engine] = default_engine_factory,
    ):
        self.config = config
        self.engine_factory = engine_factory
        self.state = SessionState.DISCONNECTED
        self.lock = threading.RLock()
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None
        self.closed = False

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            try:
                self._engine = self.engine_factory(self.config)
            except (ArgumentError, NoSuchModuleError) as e:
                logger.error(f"Invalid database driver '{self.config.driver}': {e}")
                raise ConfigurationError(
                    f"Invalid database driver '{self.config.driver}': {e}"
                ) from e
        return self._engine

    def connect(self) -> Connection:
        """
        Open a fresh connection, replacing any existing one.

        Raises:
            DatabaseConnectionError: If the connection fails or the session
                has been closed
        """
        with self.lock:
            if self.closed:
                raise DatabaseConnectionError(
                    f"Session for database '{self.config.database}' is closed"
                )
            self._close_connection()
            try:
                self._connection = self.engine.connect()
            except SQLAlchemyError as e:
                self.state = SessionState.FAILED
                logger.error(
                    f"Connection to database '{self.config.database}' failed: {e}"
                )
                raise DatabaseConnectionError(
                    f"Connection to database '{self.config.database}' failed: {e}"
                ) from e

            self.state = SessionState.CONNECTED
            logger.info(
                f"Connected to database '{self.config.database}' "
                f"on {self.config.host or 'default host'}"
            )
            return self._connection

    def ping(self) -> bool:
        """Probe the current connection."""
        with self.lock:
            if self._connection is None or self._connection.closed:
                return False
            try:
                self._connection.execute(PROBE_STATEMENT)
                return True
            except SQLAlchemyError as e:
                logger.warning(
                    f"Liveness probe failed for database '{self.config.database}': {e}"
                )
                return False

    def ensure_live(self) -> Connection:
        """
        Return a live connection.

        Probes the existing connection and reconnects once if the probe
        fails. A failed reconnect is raised to the caller.

        Raises:
            DatabaseConnectionError: If the reconnect fails
        """
        with self.lock:
            if self.ping():
                return self._connection

            logger.info(f"Reconnecting to database '{self.config.database}'")
            return self.connect()

    @contextmanager
    def acquire(self) -> Iterator[Connection]:
        """Hold the session lock for probe, query and fetch."""
        with self.lock:
            yield self.ensure_live()

    def close(self):
        """
        Close the connection and dispose of the engine. Safe to repeat.

        A closed session never connects again.
        """
        with self.lock:
            self.closed = True
            self._close_connection()
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
            self.state = SessionState.DISCONNECTED

    def _close_connection(self):
        if self._connection is None:
            return
        try:
            self._connection.close()
        except SQLAlchemyError as e:
            logger.debug(f"Ignoring error while closing stale connection: {e}")
        self._connection = None
