"""
CLI utility helpers — store access and output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from ariel_settings.config import StoreSettings, get_settings
from ariel_settings.defaults import DefaultsProvider, TomlDefaults
from ariel_settings.errors import SettingsError
from ariel_settings.schema_manager import SchemaManager

console = Console()
err_console = Console(stderr=True)


# ── Store helpers ────────────────────────────────────────────────────────


def make_settings(data_dir: Path | None = None) -> StoreSettings:
    """Configured settings, with ``--data-dir`` taking precedence."""
    if data_dir is None:
        return get_settings()
    return StoreSettings(data_dir=data_dir)


def make_manager(
    data_dir: Path | None = None,
    defaults_file: Path | None = None,
) -> SchemaManager:
    defaults: DefaultsProvider | None = TomlDefaults(defaults_file) if defaults_file else None
    return SchemaManager(make_settings(data_dir), defaults)


def fail(error: SettingsError | str) -> NoReturn:
    """Print an error and exit with status 1."""
    if isinstance(error, SettingsError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if is_dataclass(obj):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def output(data: Any, *, as_json: bool = False, title: str = "") -> None:
    """Render a dict, dataclass or list of them to the terminal."""
    if as_json:
        payload = [_to_dict(d) for d in data] if isinstance(data, list | tuple) else _to_dict(data)
        console.print_json(json.dumps(payload, default=str))
        return

    if isinstance(data, list | tuple):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        _print_table(data, title=title)
    else:
        _print_dict(_to_dict(data), title=title)


def _print_table(items: list | tuple, *, title: str = "") -> None:
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        table.add_row(*(str(v) for v in _to_dict(item).values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
