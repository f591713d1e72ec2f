"""
Binding configuration.

A zone binding is configured either from the positional argument list of a
named.conf ``database`` statement or from a mapping loaded out of the YAML
configuration file.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy.engine import URL

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = "mysql+pymysql"

# database, table, host, user, password
POSITIONAL_FIELDS = ("database", "table", "host", "user", "password")


@dataclass(frozen=True)
class BindingConfig:
    """Everything needed to reach one zone's table."""

    database: str
    table: str
    host: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    domain: Optional[str] = None
    tenant: Optional[str] = None
    driver: str = DEFAULT_DRIVER
    port: Optional[int] = None
    domain_column: str = "domain"
    tenant_column: str = "tenant"
    # parse every row's type and data with dnspython before returning it
    validate_records: bool = False

    def __post_init__(self):
        if not self.database or not self.table:
            raise ConfigurationError(
                "A binding requires at least a database and a table"
            )

    @classmethod
    def from_args(
        cls, args: Sequence[str], driver: str = DEFAULT_DRIVER
    ) -> "BindingConfig":
        """Build a config from ``database table [host [user [password]]]``."""
        if len(args) < 2:
            raise ConfigurationError(
                f"Expected at least 2 arguments (database, table), got {len(args)}"
            )
        if len(args) > len(POSITIONAL_FIELDS):
            logger.warning(
                f"Ignoring {len(args) - len(POSITIONAL_FIELDS)} extra binding arguments"
            )
        values = dict(zip(POSITIONAL_FIELDS, args))
        return cls(driver=driver, **values)

    @classmethod
    def from_dict(
        cls, config: Dict, driver: str = DEFAULT_DRIVER
    ) -> "BindingConfig":
        """Build a config from a zone section of the YAML configuration."""
        if not config:
            raise ConfigurationError("Empty zone configuration")

        known = set(cls.__dataclass_fields__)
        unknown = set(config) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown zone configuration keys: {', '.join(sorted(unknown))}"
            )

        values = dict(config)
        values.setdefault("driver", driver)
        if values.get("port") is not None:
            try:
                values["port"] = int(values["port"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid port in zone configuration: {values['port']!r}"
                ) from e
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid zone configuration: {e}") from e

    @property
    def scoped(self) -> bool:
        """Whether any scope value narrows this binding's rows."""
        return self.domain is not None or self.tenant is not None

    def scope_filters(self) -> List[tuple]:
        """Return ``(column, value)`` pairs for every configured scope."""
        filters = []
        if self.domain is not None:
            filters.append((self.domain_column, self.domain))
        if self.tenant is not None:
            filters.append((self.tenant_column, self.tenant))
        return filters

    def url(self) -> URL:
        """Build the SQLAlchemy connection URL for this binding."""
        return URL.create(
            self.driver,
            username=self.user or None,
            password=self.password or None,
            host=self.host or None,
            port=self.port,
            database=self.database,
        )

    def __repr__(self) -> str:
        return (
            f"BindingConfig(driver={self.driver!r}, database={self.database!r}, "
            f"table={self.table!r}, host={self.host!r}, user={self.user!r}, "
            f"domain={self.domain!r}, tenant={self.tenant!r})"
        )
