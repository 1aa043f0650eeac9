from __future__ import annotations

import json
from typing import Any

import click
import httpx

from talentspal.auth.store import CredentialStore, open_credential_store
from talentspal.client import build_http_client


def make_http() -> httpx.AsyncClient:
    return build_http_client()


def make_store() -> CredentialStore:
    return open_credential_store()


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


def parse_json_option(raw: str | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as ex:
        raise click.BadParameter(f"not valid JSON: {ex}", param_hint="--json") from None
