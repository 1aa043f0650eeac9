from __future__ import annotations

import asyncio
from typing import Any

import click
import uvicorn

from talentspal.cli import common
from talentspal.cli.common import echo_json, parse_json_option
from talentspal.client import AuthenticatedClient
from talentspal.config import get_safe_config_report, get_settings
from talentspal.errors import ApiError, response_json
from talentspal.services.companies import get_companies


_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@click.command(name="request")
@click.argument("method", type=click.Choice(_METHODS, case_sensitive=False))
@click.argument("url")
@click.option("--json", "json_body", default=None, help="JSON request body.")
def request_cmd(method: str, url: str, json_body: str | None) -> None:
    """
    Send an authenticated request (refreshing an expired token once).

    URL may be absolute or relative to API_BASE_URL.
    """
    body = parse_json_option(json_body)
    if not url.startswith(("http://", "https://")):
        url = f"{str(get_settings().api_base_url).rstrip('/')}/{url.lstrip('/')}"

    async def _run() -> tuple[int, Any, str]:
        client = AuthenticatedClient(common.make_http(), common.make_store(), owns_http=True)
        async with client:
            opts: dict[str, Any] = {}
            if body is not None:
                opts["json"] = body
            resp = await client.send(url, method=method.upper(), **opts)
            return resp.status_code, response_json(resp), resp.text

    status, payload, text = asyncio.run(_run())
    click.echo(f"HTTP {status}")
    if payload is not None:
        echo_json(payload)
    elif text:
        click.echo(text)
    if status >= 400:
        raise SystemExit(1)


@click.command(name="companies")
@click.option("--city", default=None)
@click.option("--search", default=None)
def companies(city: str | None, search: str | None) -> None:
    """List companies."""

    async def _run() -> dict:
        async with common.make_http() as http:
            return await get_companies(http, city=city, search=search)

    try:
        echo_json(asyncio.run(_run()))
    except ApiError as ex:
        raise click.ClickException(ex.message) from None


@click.command(name="config")
def config_cmd() -> None:
    """Print the effective configuration (secrets shown as SET/UNSET)."""
    echo_json(get_safe_config_report())


@click.command(name="serve")
@click.option("--host", default=None)
@click.option("--port", type=int, default=None)
def serve(host: str | None, port: int | None) -> None:
    """Run the gateway (request IDs, cache headers, gzip, /health)."""
    s = get_settings()
    uvicorn.run(
        "talentspal.gateway.app:create_app",
        factory=True,
        host=str(host or s.host),
        port=int(port or s.port),
        reload=False,
    )


def add_commands(cli_group) -> None:
    cli_group.add_command(request_cmd)
    cli_group.add_command(companies)
    cli_group.add_command(config_cmd)
    cli_group.add_command(serve)


__all__ = ["add_commands", "request_cmd", "companies", "config_cmd", "serve"]
