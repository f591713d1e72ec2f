"""
Exceptions raised by the SQL zone backend.

Every error surfaced to a caller of the adapter contract derives from
SQLBackendError so hosts can catch the whole family in one place.
"""


class SQLBackendError(Exception):
    """Base class for all backend errors."""


class DatabaseConnectionError(SQLBackendError, ConnectionError):
    """Unable to establish or re-establish a database session."""


class QueryError(SQLBackendError):
    """The database rejected or failed to execute a statement."""


class NotFoundError(SQLBackendError):
    """A well-formed query matched zero rows after all fallbacks."""


class DataFormatError(SQLBackendError, ValueError):
    """A row field (the ttl) could not be parsed."""


class ConfigurationError(SQLBackendError, ValueError):
    """Insufficient binding arguments, or a name with no wildcard suffix."""


class ExportError(SQLBackendError):
    """A zone export step failed; the target table may be left partial."""
