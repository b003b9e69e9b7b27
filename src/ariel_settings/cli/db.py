"""
CLI: ``ariel-settings db`` — store file management commands.
"""

from __future__ import annotations

from pathlib import Path

import typer

from ariel_settings.cli.utils import fail, make_manager, output
from ariel_settings.errors import SchemaIntegrityError
from ariel_settings.namespaces import OWNER_IDENTITY

app = typer.Typer(no_args_is_help=True)

IdentityOption = typer.Option(OWNER_IDENTITY, "--identity", "-i", help="Identity id (0 = owner)")
DataDirOption = typer.Option(None, "--data-dir", "-d", help="Override the data directory")


@app.command("open")
def open_store(
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
    defaults_file: Path | None = typer.Option(
        None, "--defaults", help="TOML file with default settings per namespace"
    ),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Create or migrate the identity's store to the current schema version."""
    manager = make_manager(data_dir, defaults_file)
    try:
        store = manager.open(identity)
    except SchemaIntegrityError as exc:
        fail(exc)
    with store:
        output(
            {
                "identity": identity,
                "path": str(store.path),
                "version": store.version,
                "namespaces": ",".join(ns.value for ns in store.namespaces),
            },
            as_json=json_out,
            title="Settings Store",
        )


@app.command()
def info(
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the store path and state without migrating it."""
    manager = make_manager(data_dir)
    output(
        {
            "identity": identity,
            "path": str(manager.path_for(identity)),
            "state": manager.state(identity).value,
            "target_version": manager.target_version,
        },
        as_json=json_out,
        title="Settings Store",
    )


@app.command()
def drop(
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete the identity's store and its journal (factory reset)."""
    manager = make_manager(data_dir)
    path = manager.path_for(identity)
    if not yes:
        typer.confirm(f"Delete {path}?", abort=True)
    manager.drop_store(identity)
    typer.echo(f"Dropped {path}")


@app.command()
def backup(
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
) -> None:
    """Move the store to its backup path (only the first backup is kept)."""
    manager = make_manager(data_dir)
    target = manager.backup_store(identity)
    if target is None:
        typer.echo("No backup made (no store, or a backup already exists)")
    else:
        typer.echo(f"Backed up to {target}")
