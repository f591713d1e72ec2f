"""
Validators - Field parsing and normalization for zone table rows

This module provides the small text primitives shared by the lookup path
and the zone exporter: ttl parsing, name normalization, field length checks
and SQL literal quoting for the echoed export statements.
"""

import logging
import re
from typing import List, Union

from ..exceptions import DataFormatError

logger = logging.getLogger(__name__)

MAX_TTL = 2**32 - 1
MAX_FIELD_LENGTH = 255

_TTL_PATTERN = re.compile(r"[0-9]+")


def parse_ttl(value: Union[str, int, None]) -> int:
    """
    Parse a ttl column value.

    The column may hold text or a native integer. Text must consist of
    decimal digits only; signs, whitespace and trailing characters are
    rejected.

    Args:
        value: The raw column value

    Returns:
        The ttl as an int in the uint32 range

    Raises:
        DataFormatError: If the value is not a valid ttl
    """
    if isinstance(value, bool) or value is None:
        raise DataFormatError(f"Invalid ttl: {value!r}")

    if isinstance(value, int):
        ttl = value
    else:
        if isinstance(value, bytes):
            value = value.decode("ascii", errors="replace")
        text = str(value)
        if not _TTL_PATTERN.fullmatch(text):
            raise DataFormatError(f"Invalid ttl: {value!r}")
        ttl = int(text)

    if ttl < 0 or ttl > MAX_TTL:
        raise DataFormatError(f"ttl out of range: {value!r}")

    return ttl


def normalize_name(name: str) -> str:
    """
    Normalize an absolute name for querying.

    Removes surrounding whitespace and a single trailing root dot; case is
    left alone since comparisons happen case-insensitively in the database.
    """
    if not name:
        return name

    name = name.strip()
    if name.endswith(".") and name != ".":
        name = name[:-1]
    return name


def split_labels(name: str) -> List[str]:
    """Split a name into its non-empty labels."""
    if not name:
        return []
    return [label for label in name.split(".") if label]


def validate_field_length(value: str, field: str) -> bool:
    """
    Check that a text field fits the canonical column width.

    Args:
        value: The field text
        field: Column name, used in the log message

    Returns:
        True if valid, False otherwise
    """
    if len(value) > MAX_FIELD_LENGTH:
        logger.warning(
            f"Field '{field}' is {len(value)} characters, limit is {MAX_FIELD_LENGTH}"
        )
        return False
    return True


def quote_string(value: str) -> str:
    """
    Escape a value for use inside a single-quoted SQL literal.

    Single quotes are doubled and backslashes are escaped.
    """
    return value.replace("\\", "\\\\").replace("'", "''")
