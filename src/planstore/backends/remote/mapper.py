"""Map REST payloads to planstore models and back."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from planstore.contracts.exceptions import RemoteTransportError
from planstore.contracts.project import (
    ANONYMOUS_USER_ID,
    ProjectMetadata,
    ProjectRecord,
    ProjectSummary,
    RecordOrigin,
    RecordSource,
)


def unwrap(payload: Any) -> Any:
    """Strip the service's ``{success, data}`` envelope when present."""
    if isinstance(payload, dict) and "data" in payload and ("success" in payload or len(payload) == 1):
        return payload["data"]
    return payload


def extract_id(payload: Any) -> str:
    for candidate in (unwrap(payload), payload):
        if isinstance(candidate, dict):
            for key in ("_id", "id"):
                value = candidate.get(key)
                if value:
                    return str(value)
    raise RemoteTransportError("remote response is missing the project id")


def error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message)
    return None


def metadata_body(metadata: ProjectMetadata) -> dict[str, Any]:
    return {
        "name": metadata.name,
        "description": metadata.description,
        "isPublic": metadata.is_public,
        "tags": list(metadata.tags),
    }


def _normalise(doc: dict[str, Any], *, default_user_id: str) -> dict[str, Any]:
    now = datetime.now(UTC).isoformat()
    normalised = dict(doc)
    normalised["id"] = str(doc.get("_id") or doc.get("id") or "")
    normalised.setdefault("userId", default_user_id)
    normalised.setdefault("name", "")
    normalised["description"] = doc.get("description") or ""
    normalised["tags"] = doc.get("tags") or []
    normalised.setdefault("createdAt", doc.get("updatedAt") or now)
    normalised.setdefault("updatedAt", normalised["createdAt"])
    return normalised


def to_record(payload: Any, *, default_user_id: str = ANONYMOUS_USER_ID) -> ProjectRecord:
    doc = unwrap(payload)
    if not isinstance(doc, dict):
        raise RemoteTransportError("remote response is not a project document")
    normalised = _normalise(doc, default_user_id=default_user_id)
    if not normalised["id"]:
        raise RemoteTransportError("remote project document is missing its id")
    try:
        return ProjectRecord.model_validate({**normalised, "origin": RecordOrigin.REMOTE, "pendingSync": False})
    except ValidationError as exc:
        raise RemoteTransportError(f"remote project document is malformed: {exc.error_count()} error(s)") from exc


def to_summaries(payload: Any, *, default_user_id: str) -> list[ProjectSummary]:
    docs = unwrap(payload)
    if not isinstance(docs, list):
        raise RemoteTransportError("remote project list is not an array")
    summaries: list[ProjectSummary] = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        normalised = _normalise(doc, default_user_id=default_user_id)
        normalised.pop("projectData", None)
        try:
            summaries.append(ProjectSummary.model_validate({**normalised, "source": RecordSource.REMOTE}))
        except ValidationError as exc:
            raise RemoteTransportError(f"remote project summary is malformed: {exc.error_count()} error(s)") from exc
    return summaries
