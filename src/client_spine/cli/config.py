"""
CLI: ``client-spine config`` - inspect the effective client settings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import typer
from pydantic import SecretStr

from client_spine.cli.utils import console

app = typer.Typer(no_args_is_help=True)

ENV_PREFIX = "CLIENT_SPINE_"


class OutputFormat(str, Enum):
    table = "table"
    json = "json"
    env = "env"


def _display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, SecretStr):
        return "**********"
    return str(value)


@app.command("show")
def show(
    output: OutputFormat = typer.Option(OutputFormat.table, "--format", "-f", help="table, json or env"),
) -> None:
    """Show the settings an ApiClient built from the environment would use (secrets masked)."""
    from rich.table import Table

    from client_spine.core.settings import get_settings

    settings = get_settings()

    if output is OutputFormat.json:
        console.print_json(settings.model_dump_json())
        return

    rows = sorted((name, _display(getattr(settings, name))) for name in type(settings).model_fields)

    if output is OutputFormat.env:
        for name, value in rows:
            console.print(f"{ENV_PREFIX}{name.upper()}={value}", markup=False, highlight=False)
        return

    table = Table(title="client-spine settings")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)
