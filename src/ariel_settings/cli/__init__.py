"""Command-line interface for the settings store."""

from ariel_settings.cli.app import app

__all__ = ["app"]
