"""httpx async transport wrapper with retry and backoff for transient failures."""

from __future__ import annotations

import asyncio
import logging
import random

import httpx

_LOG = logging.getLogger(__name__)

# Status codes considered transient and eligible for automatic retry.
_RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE"})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx async transport with a small number of retries.

    - Idempotent requests retry on any transport error and on 429/502/503/504.
    - ``POST`` only retries when the connection could not be established, so a
      create that may have reached the server is never sent twice.
    - A ``Retry-After`` header on a retryable response stretches the backoff.

    Once retries are exhausted the last error or response is handed back to the
    caller, which treats it as a transport failure.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 1,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        idempotent = request.method.upper() in _IDEMPOTENT_METHODS
        for attempt in range(self._max_retries + 1):
            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError as exc:
                retryable = idempotent or isinstance(exc, httpx.ConnectError)
                if not retryable or attempt >= self._max_retries:
                    raise
                await self._sleep_backoff(attempt)
                continue

            if idempotent and response.status_code in _RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                retry_after = self._parse_retry_after(response)
                await response.aclose()
                if retry_after > 0:
                    await asyncio.sleep(retry_after)
                await self._sleep_backoff(attempt)
                continue

            return response

        raise httpx.TransportError("Request failed after retries")  # pragma: no cover

    async def aclose(self) -> None:
        await self._transport.aclose()

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return 0.0
        try:
            return min(30.0, max(0.0, float(raw)))
        except ValueError:
            return 0.0

    @staticmethod
    async def _sleep_backoff(attempt: int) -> None:
        seconds = min(4.0, float(2**attempt) * 0.5) + random.uniform(0.0, 0.25)
        _LOG.warning("Retrying remote request (attempt %d)", attempt + 1)
        await asyncio.sleep(seconds)
