"""Project record contracts."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ANONYMOUS_USER_ID = "anonymous"
DEFAULT_PROJECT_NAME = "Untitled Project"

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_TAGS = 10
MAX_TAG_LENGTH = 30


class RecordSource(StrEnum):
    REMOTE = "remote"
    LOCAL = "local"


class RecordOrigin(StrEnum):
    """Where a locally stored record was first written."""

    LOCAL = "local"
    REMOTE = "remote"


class CameraState(BaseModel):
    model_config = ConfigDict(extra="allow")

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


class ProjectDocument(BaseModel):
    """Minimal required shape of a planning document payload.

    Only the containers are checked; work items and swimlanes stay opaque.
    Unknown top-level keys are allowed and preserved.
    """

    model_config = ConfigDict(extra="allow")

    tasks: list[dict[str, Any]]
    swimlanes: list[dict[str, Any]] = Field(default_factory=list)
    camera: CameraState | None = None


class ProjectMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    is_public: bool = Field(default=False, alias="isPublic")
    tags: list[str] = Field(default_factory=list)


class _ProjectFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    name: str
    description: str = ""
    is_public: bool = Field(default=False, alias="isPublic")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class ProjectRecord(_ProjectFields):
    """A persisted planning document with its metadata."""

    project_data: dict[str, Any] = Field(alias="projectData")
    origin: RecordOrigin = RecordOrigin.LOCAL
    pending_sync: bool = Field(default=False, alias="pendingSync")

    def metadata(self) -> ProjectMetadata:
        return ProjectMetadata(
            name=self.name,
            description=self.description,
            is_public=self.is_public,
            tags=list(self.tags),
        )


class ProjectSummary(_ProjectFields):
    """Listing entry; carries no payload."""

    source: RecordSource = RecordSource.REMOTE
    local_only: bool = Field(default=False, alias="isLocalOnly")
    read_only: bool = Field(default=False, alias="readOnly")
    migrated_from: str | None = Field(default=None, alias="migratedFrom")


def to_summary(record: ProjectRecord, *, source: RecordSource, local_only: bool = False) -> ProjectSummary:
    return ProjectSummary(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        description=record.description,
        is_public=record.is_public,
        tags=list(record.tags),
        created_at=record.created_at,
        updated_at=record.updated_at,
        source=source,
        local_only=local_only,
    )
