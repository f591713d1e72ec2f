#!/usr/bin/env python3
"""
DNS SQL Backend - Main Entry Point

This is the main entry point for the DNS SQL Backend CLI.
It can be run directly or imported as a module.
"""

from dns_sql_backend.cli.main import main

if __name__ == "__main__":
    main()
