"""
Zone file parser.

Loads a master file into a dnspython zone whose names are all absolute, which
is the form the zone table stores them in.
"""

import logging

import dns.exception
import dns.zone

from ..exceptions import ExportError

logger = logging.getLogger(__name__)


def load_zone(origin: str, zone_file: str) -> dns.zone.Zone:
    """
    Load a zone file.

    Args:
        origin: Zone origin, e.g. ``mydomain.com``
        zone_file: Path to the master file

    Returns:
        The loaded zone, not relativized

    Raises:
        ExportError: If the file cannot be read or parsed
    """
    try:
        zone = dns.zone.from_file(
            zone_file,
            origin=origin,
            relativize=False,
            check_origin=True,
            allow_include=True,
        )
    except FileNotFoundError:
        raise ExportError(f"Zone file not found: {zone_file}")
    except (OSError, dns.exception.DNSException) as e:
        logger.error(f"Failed to load zone '{origin}' from {zone_file}: {e}")
        raise ExportError(f"Error loading zone '{origin}' from {zone_file}: {e}") from e

    logger.info(f"Loaded zone '{origin}' with {len(zone.nodes)} names from {zone_file}")
    return zone
