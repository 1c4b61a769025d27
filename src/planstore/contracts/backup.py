"""Backup contracts."""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

UNSAVED_PROJECT_ID = "unsaved_project"


class BackupRecord(BaseModel):
    """Point-in-time copy of the live document. Never mutated after creation."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    project_id: str = Field(default=UNSAVED_PROJECT_ID, alias="projectId")
    project_name: str = Field(alias="projectName")
    timestamp: int
    automatic: bool = False
    data: dict[str, Any]


class LiveDocument(Protocol):
    """The document currently open in the hosting editor."""

    @property
    def project_id(self) -> str | None: ...

    @property
    def project_name(self) -> str | None: ...

    def work_item_count(self) -> int: ...

    def to_payload(self) -> dict[str, Any] | None: ...

    def apply_payload(self, payload: dict[str, Any]) -> None: ...
