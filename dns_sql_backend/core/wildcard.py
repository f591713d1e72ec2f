"""
Wildcard Name Matcher.

When an exact lookup finds nothing, exactly one fallback is tried: the
wildcard formed from the last two labels of the name. The hierarchy is not
walked any further.
"""

import logging
from typing import Optional

from ..utils.validators import split_labels

logger = logging.getLogger(__name__)

WILDCARD_LABEL = "*"


def derive_wildcard_key(name: str) -> Optional[str]:
    """
    Derive the wildcard fallback key for a name.

    ``w0.mydomain.com`` and ``a.b.mydomain.com`` both give
    ``*.mydomain.com``.

    Args:
        name: Absolute name that had no exact match

    Returns:
        The wildcard key, or None when the name has fewer than two labels
        and no fallback applies
    """
    labels = split_labels(name)
    if len(labels) < 2:
        logger.debug(f"No wildcard suffix for '{name}': {len(labels)} label(s)")
        return None

    return ".".join((WILDCARD_LABEL, labels[-2], labels[-1]))


def is_wildcard(name: str) -> bool:
    """Whether a stored name is a wildcard owner."""
    labels = split_labels(name)
    return bool(labels) and labels[0] == WILDCARD_LABEL
