"""
Root Typer application for the ariel-settings CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from ariel_settings.cli.db import app as db_app
from ariel_settings.cli.settings import app as settings_app
from ariel_settings.cli.utils import output
from ariel_settings.config import get_settings
from ariel_settings.logging import configure_logging
from ariel_settings.namespaces import Namespace, namespaces_for_identity

app = Typer(
    name="ariel-settings",
    help="ariel-settings — versioned, namespaced settings stores.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from ariel_settings import __version__

        typer.echo(f"ariel-settings {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override the log level"),
) -> None:
    """ariel-settings CLI — create, migrate, inspect and reset settings stores."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
    )


@app.command()
def namespaces(
    identity: int = typer.Option(0, "--identity", "-i"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the namespaces an identity's store contains."""
    available = set(namespaces_for_identity(identity))
    rows = [{"namespace": ns.value, "available": ns in available} for ns in Namespace]
    output(rows, as_json=json_out, title="Namespaces")


app.add_typer(db_app, name="db", help="Store file operations.")
app.add_typer(settings_app, name="settings", help="Read and write settings.")
