"""
CLI: ``ariel-settings settings`` — read and write individual settings.
"""

from __future__ import annotations

from pathlib import Path

import typer

from ariel_settings.cli.utils import console, fail, make_manager, output
from ariel_settings.errors import InvalidNamespaceError, SchemaIntegrityError
from ariel_settings.namespaces import OWNER_IDENTITY
from ariel_settings.store import SettingsStore

app = typer.Typer(no_args_is_help=True)

IdentityOption = typer.Option(OWNER_IDENTITY, "--identity", "-i", help="Identity id (0 = owner)")
DataDirOption = typer.Option(None, "--data-dir", "-d", help="Override the data directory")


def _open(identity: int, data_dir: Path | None) -> SettingsStore:
    try:
        return make_manager(data_dir).open(identity)
    except SchemaIntegrityError as exc:
        fail(exc)


@app.command()
def get(
    namespace: str = typer.Argument(..., help="system, secure or global"),
    name: str = typer.Argument(...),
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
) -> None:
    """Print one setting's value."""
    with _open(identity, data_dir) as store:
        try:
            if not store.contains(namespace, name):
                fail(f"{namespace}.{name} is not set")
            value = store.get(namespace, name)
        except InvalidNamespaceError as exc:
            fail(exc)
    typer.echo("" if value is None else value)


@app.command()
def put(
    namespace: str = typer.Argument(...),
    name: str = typer.Argument(...),
    value: str = typer.Argument(...),
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
) -> None:
    """Write one setting (overwrites any existing value)."""
    with _open(identity, data_dir) as store:
        try:
            store.put(namespace, name, value)
        except InvalidNamespaceError as exc:
            fail(exc)
    console.print(f"[green]✓[/green] {namespace}.{name} = {value}")


@app.command("list")
def list_settings(
    namespace: str = typer.Argument(...),
    identity: int = IdentityOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List every setting in a namespace."""
    with _open(identity, data_dir) as store:
        try:
            items = store.items(namespace)
        except InvalidNamespaceError as exc:
            fail(exc)
    rows = [{"name": s.name, "value": s.value} for s in items]
    output(rows, as_json=json_out, title=namespace)
