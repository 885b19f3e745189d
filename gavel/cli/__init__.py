"""Command-line interface."""

from gavel.cli.main import main

__all__ = ["main"]
