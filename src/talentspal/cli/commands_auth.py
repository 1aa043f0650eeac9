from __future__ import annotations

import asyncio

import click

from talentspal.auth.service import get_current_user, login_user, logout_user, simple_logout
from talentspal.auth.store import get_user
from talentspal.cli import common
from talentspal.cli.common import echo_json
from talentspal.errors import ApiError
from talentspal.utils.log import logger


@click.command(name="login")
@click.option("--email", required=True)
@click.password_option("--password", confirmation_prompt=False)
def login(email: str, password: str) -> None:
    """Log in and persist the session tokens."""

    async def _run() -> dict:
        store = common.make_store()
        async with common.make_http() as http:
            return await login_user(http, store, {"email": email, "password": password})

    try:
        body = asyncio.run(_run())
    except ApiError as ex:
        raise click.ClickException(ex.message) from None
    user = (body.get("data") or {}).get("user") or {}
    click.echo(f"Logged in as {user.get('email') or email}")


@click.command(name="logout")
def logout() -> None:
    """Revoke the session server-side and clear local credentials."""
    store = common.make_store()

    async def _run() -> None:
        async with common.make_http() as http:
            await logout_user(http, store)

    try:
        asyncio.run(_run())
    except Exception as ex:
        logger.warning("auth_logout_fallback", error=str(ex))
        simple_logout(store)
    click.echo("Logged out")


@click.command(name="whoami")
@click.option("--cached", is_flag=True, default=False, help="Print the stored user record only.")
def whoami(cached: bool) -> None:
    """Show the current user."""
    store = common.make_store()
    if cached:
        user = get_user(store)
        if user is None:
            raise click.ClickException("Not logged in")
        echo_json(user)
        return

    async def _run() -> dict:
        async with common.make_http() as http:
            return await get_current_user(http, store)

    try:
        echo_json(asyncio.run(_run()).get("data"))
    except ApiError as ex:
        raise click.ClickException(ex.message) from None


def add_commands(cli_group) -> None:
    cli_group.add_command(login)
    cli_group.add_command(logout)
    cli_group.add_command(whoami)


__all__ = ["add_commands", "login", "logout", "whoami"]
