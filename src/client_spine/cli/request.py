"""
CLI: ``client-spine request`` - issue one call through the resilient client.
"""

from __future__ import annotations

import asyncio
from typing import Any

import typer

from client_spine.cli.utils import output_error, output_value, parse_body, parse_headers
from client_spine.core.errors import CallError

METHODS = {
    "GET": "fetch",
    "POST": "create",
    "PUT": "replace",
    "PATCH": "patch",
    "DELETE": "remove",
}


async def _issue(
    method: str,
    path: str,
    body: Any,
    headers: dict[str, str],
    timeout: float | None,
    retries: int | None,
    base_url: str | None,
) -> Any:
    from client_spine.core.notifications import NullNotifier
    from client_spine.http.client import ApiClient
    from client_spine.http.config import CallConfig

    config = CallConfig(
        headers=headers or None,
        timeout=timeout,
        retry={"max_retries": retries} if retries is not None else None,
    )

    client = ApiClient.from_settings(notifier=NullNotifier())
    if base_url:
        client.set_base_url(base_url)

    async with client:
        verb = getattr(client, METHODS[method])
        if method in ("GET", "DELETE"):
            return await verb(path, config)
        return await verb(path, body, config)


def request(
    method: str = typer.Argument(..., help="HTTP method: GET, POST, PUT, PATCH, DELETE"),
    path: str = typer.Argument(..., help="Path joined onto the base URL"),
    data: str | None = typer.Option(None, "--data", "-d", help="JSON request body"),
    header: list[str] | None = typer.Option(None, "--header", "-H", help="Extra header 'Key: Value'"),
    timeout: float | None = typer.Option(None, "--timeout", "-t", help="Per-attempt timeout in seconds"),
    retries: int | None = typer.Option(None, "--retries", "-r", min=0, help="Retries after the first attempt"),
    base_url: str | None = typer.Option(None, "--base-url", help="Override CLIENT_SPINE_BASE_URL"),
    json_out: bool = typer.Option(False, "--json", help="Always print JSON"),
) -> None:
    """Issue a request with retry, backoff and timeout, and print the result."""
    method = method.upper()
    if method not in METHODS:
        raise typer.BadParameter(f"Unsupported method {method!r}", param_hint="METHOD")

    body = parse_body(data)
    headers = parse_headers(header)

    try:
        value = asyncio.run(_issue(method, path, body, headers, timeout, retries, base_url))
    except CallError as error:
        output_error(error, as_json=json_out)
        raise typer.Exit(code=1) from None

    output_value(value, as_json=json_out)
