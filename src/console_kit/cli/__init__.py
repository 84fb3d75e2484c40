"""Command line interface for console-kit."""

from console_kit.cli.main import main

__all__ = ["main"]
