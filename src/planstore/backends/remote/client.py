"""Async REST client for the remote project service."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from planstore.backends.base import RemoteBackend
from planstore.backends.remote._retrying_transport import RetryingTransport
from planstore.backends.remote.mapper import error_message, extract_id, metadata_body, to_record, to_summaries
from planstore.contracts.exceptions import PermissionDeniedError, RecordNotFoundError, RemoteTransportError
from planstore.contracts.project import ProjectMetadata, ProjectRecord, ProjectSummary

logger = logging.getLogger(__name__)


class RemoteProjectClient(RemoteBackend):
    """httpx-backed client for the ``/projects`` endpoints.

    Args:
        base_url: API root, e.g. ``http://localhost:3000/api``.
        timeout: Per-request timeout in seconds. Expiry is a transport failure.
        max_retries: Retries for transient failures (see :class:`RetryingTransport`).
        transport: Inner transport; tests pass an ``httpx.MockTransport``.
        http_client: Fully configured client; takes precedence over ``transport``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        max_retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            transport=RetryingTransport(transport=transport, max_retries=max_retries),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> RemoteProjectClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, *parts: str) -> str:
        return "/".join([self._base_url, "projects", *(quote(part, safe="") for part in parts)])

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.TimeoutException as exc:
            raise RemoteTransportError(f"remote service timed out: {method} {url}") from exc
        except httpx.HTTPError as exc:
            raise RemoteTransportError(f"remote service unreachable: {exc}") from exc

        status = response.status_code
        if status == 404:
            raise RecordNotFoundError(error_message(response) or "project not found")
        if status == 403:
            raise PermissionDeniedError(error_message(response) or "access denied")
        if not response.is_success:
            detail = error_message(response) or response.reason_phrase
            raise RemoteTransportError(f"remote service returned {status}: {detail}", status_code=status)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteTransportError(f"remote service returned invalid JSON for {method} {url}") from exc

    async def create(self, user_id: str, document: dict[str, Any], metadata: ProjectMetadata) -> str:
        body = {"userId": user_id, "projectData": document, **metadata_body(metadata)}
        return extract_id(await self._request("POST", self._url(), json=body))

    async def import_project(
        self, user_id: str, document: dict[str, Any], metadata: ProjectMetadata, *, original_id: str
    ) -> str:
        body = {"userId": user_id, "projectData": document, **metadata_body(metadata), "originalId": original_id}
        return extract_id(await self._request("POST", self._url("import"), json=body))

    async def update(self, project_id: str, user_id: str, document: dict[str, Any], metadata: ProjectMetadata) -> None:
        body = {"userId": user_id, "projectData": document, **metadata_body(metadata)}
        await self._request("PUT", self._url(project_id), json=body)

    async def get(self, project_id: str, user_id: str) -> ProjectRecord:
        payload = await self._request("GET", self._url(project_id), params={"userId": user_id})
        return to_record(payload, default_user_id=user_id)

    async def delete(self, project_id: str, user_id: str) -> None:
        await self._request("DELETE", self._url(project_id), json={"userId": user_id})

    async def list_for_user(self, user_id: str) -> list[ProjectSummary]:
        payload = await self._request("GET", self._url("user", user_id))
        return to_summaries(payload, default_user_id=user_id)

    async def list_public(self) -> list[ProjectSummary]:
        payload = await self._request("GET", self._url("public"))
        return to_summaries(payload, default_user_id="")
