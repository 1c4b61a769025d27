"""Write-boundary validation for payloads and metadata."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from planstore.contracts.exceptions import RecordValidationError
from planstore.contracts.project import (
    DEFAULT_PROJECT_NAME,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    ProjectDocument,
    ProjectMetadata,
)


def validate_document(payload: Any) -> dict[str, Any]:
    """Check the payload's shape and return a JSON-normalised deep copy of it.

    Raises:
        RecordValidationError: Payload missing, empty, not serialisable, or
            lacking the work-item list.
    """
    if not isinstance(payload, Mapping) or not payload:
        raise RecordValidationError("project data is empty or invalid")
    try:
        normalised: dict[str, Any] = json.loads(json.dumps(payload))
    except (TypeError, ValueError) as exc:
        raise RecordValidationError(f"project data is not serialisable: {exc}") from exc

    try:
        ProjectDocument.model_validate(normalised)
    except ValidationError as exc:
        raise RecordValidationError(
            [f"project data {'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()]
        ) from exc
    return normalised


def sanitize_metadata(metadata: ProjectMetadata | Mapping[str, Any] | None) -> ProjectMetadata:
    """Apply defaults, trim, and deduplicate tags; reject anything over the limits.

    Raises:
        RecordValidationError: Aggregated list of every limit that was exceeded.
    """
    if metadata is None:
        raw = ProjectMetadata()
    elif isinstance(metadata, ProjectMetadata):
        raw = metadata
    else:
        try:
            raw = ProjectMetadata.model_validate(metadata)
        except ValidationError as exc:
            raise RecordValidationError(f"invalid project metadata: {exc.error_count()} error(s)") from exc

    errors: list[str] = []

    name = raw.name.strip() or DEFAULT_PROJECT_NAME
    if len(name) > MAX_NAME_LENGTH:
        errors.append(f"name cannot be more than {MAX_NAME_LENGTH} characters")

    description = raw.description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"description cannot be more than {MAX_DESCRIPTION_LENGTH} characters")

    tags: list[str] = []
    for tag in raw.tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in tags:
            tags.append(cleaned)
    too_long = [tag for tag in tags if len(tag) > MAX_TAG_LENGTH]
    if too_long:
        errors.append(f"tags cannot be more than {MAX_TAG_LENGTH} characters: {too_long}")
    if len(tags) > MAX_TAGS:
        errors.append(f"a project can have at most {MAX_TAGS} tags, got {len(tags)}")

    if errors:
        raise RecordValidationError(errors)
    return ProjectMetadata(name=name, description=description, is_public=raw.is_public, tags=tags)
