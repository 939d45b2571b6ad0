"""CLI module for Shipyard."""

from shipyard.cli.main import app, main_cli

__all__ = [
    "app",
    "main_cli",
]
