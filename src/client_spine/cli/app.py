"""
Root Typer application for the client-spine CLI.
"""

from __future__ import annotations

import sys

import typer
from typer import Typer

app = Typer(
    name="client-spine",
    help="client-spine: resilient calls to backend API endpoints.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from client_spine import __version__

        typer.echo(f"client-spine {__version__}")
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
    log_level: str | None = typer.Option(None, "--log-level", help="Override CLIENT_SPINE_LOG_LEVEL."),
) -> None:
    """client-spine CLI: issue requests and inspect configuration."""
    from client_spine.core.logging import configure_logging
    from client_spine.core.settings import get_settings

    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
        stream=sys.stderr,
    )


from client_spine.cli.config import app as config_app  # noqa: E402
from client_spine.cli.request import request  # noqa: E402

app.command("request")(request)
app.add_typer(config_app, name="config", help="Configuration inspection.")


if __name__ == "__main__":
    app()
