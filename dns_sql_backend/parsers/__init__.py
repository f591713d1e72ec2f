"""
Input parsers.

This package contains the zone file loader used by the exporter.
"""

from .zone_file import load_zone

__all__ = ["load_zone"]
