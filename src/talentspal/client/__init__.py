from __future__ import annotations

from .wrapper import (
    AuthenticatedClient,
    build_headers,
    build_http_client,
    expiry_predicate,
)

__all__ = [
    "AuthenticatedClient",
    "build_headers",
    "build_http_client",
    "expiry_predicate",
]
