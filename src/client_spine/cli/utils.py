"""
CLI utility helpers: output formatting and header parsing.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from client_spine.core.errors import CallError

console = Console()
err_console = Console(stderr=True)


def parse_headers(values: list[str] | None) -> dict[str, str]:
    """Parse ``Key: Value`` pairs given on the command line."""
    headers: dict[str, str] = {}
    for raw in values or []:
        key, sep, value = raw.partition(":")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Header must look like 'Key: Value', got {raw!r}")
        headers[key.strip()] = value.strip()
    return headers


def parse_body(raw: str | None) -> Any:
    """Parse a ``--data`` argument as JSON."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise typer.BadParameter(f"--data must be valid JSON: {exc}") from exc


def output_value(value: Any, *, as_json: bool = False) -> None:
    """Print a decoded response value."""
    if isinstance(value, str) and not as_json:
        console.print(value, markup=False, highlight=False)
        return
    console.print_json(json.dumps(value, default=str))


def output_error(error: CallError, *, as_json: bool = False) -> None:
    """Print a terminal CallError to stderr."""
    if as_json:
        err_console.print_json(json.dumps(error.to_dict(), default=str))
        return

    table = Table(title="Request failed", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in error.to_dict().items():
        table.add_row(key, json.dumps(value, default=str) if isinstance(value, dict) else str(value))
    err_console.print(table)
