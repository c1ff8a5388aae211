"""Command line interface."""

from tandem.cli.app import app, main

__all__ = ["app", "main"]
