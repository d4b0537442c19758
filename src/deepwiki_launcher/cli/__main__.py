#!/usr/bin/env python3
"""
CLI entry point for the deepwiki_launcher.cli module.

This allows running: python -m deepwiki_launcher.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
