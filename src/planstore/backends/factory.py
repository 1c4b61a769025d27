"""Factory for the remote backend.

Keeps base-URL resolution and transport settings out of the gateway; the SDK
and CLI build the client from config through this function.
"""

from __future__ import annotations

import httpx

from planstore.backends.base import RemoteBackend
from planstore.backends.remote.client import RemoteProjectClient
from planstore.config.loader import resolve_api_url
from planstore.contracts.config import PlanStoreConfig


def create_remote_backend(
    config: PlanStoreConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RemoteBackend:
    """Create the remote backend described by ``config``.

    Raises:
        ConfigError: If the base URL cannot be resolved.
    """
    return RemoteProjectClient(
        resolve_api_url(config),
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
        transport=transport,
    )
