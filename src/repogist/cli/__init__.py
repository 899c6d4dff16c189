"""Presentation Layer for repogist: Typer commands with Rich output."""

from repogist.cli.app import app

__all__ = ["app"]
