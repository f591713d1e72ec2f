"""
Command-line interface components.

This package contains the lookup/dump CLI (``main``) and the zone export
tool (``zonetodb``).
"""
