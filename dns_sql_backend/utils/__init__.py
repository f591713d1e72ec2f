"""
Utility functions and helpers.

This package contains the field parsing and quoting helpers shared by the
lookup path and the zone exporter.
"""

from .validators import normalize_name, parse_ttl, quote_string, split_labels

__all__ = ["normalize_name", "parse_ttl", "quote_string", "split_labels"]
