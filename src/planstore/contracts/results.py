"""Result objects returned across the public boundary.

Callers read ``success`` and ``message`` instead of catching exceptions.
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, Field

from planstore.contracts.exceptions import ErrorKind, PlanStoreError
from planstore.contracts.project import ProjectRecord, ProjectSummary, RecordSource


class OperationResult(BaseModel):
    success: bool
    message: str | None = None
    error: ErrorKind | None = None
    source: RecordSource | None = None

    @classmethod
    def failed(cls, exc: PlanStoreError, **fields: Any) -> Self:
        return cls(success=False, message=str(exc), error=exc.kind, **fields)


class SaveResult(OperationResult):
    project_id: str | None = None
    fallback: bool = False


class LoadResult(OperationResult):
    project: ProjectRecord | None = None


class ListResult(OperationResult):
    projects: list[ProjectSummary] = Field(default_factory=list)


class BackupResult(OperationResult):
    backup_id: str | None = None


class RestoreResult(OperationResult):
    document: dict[str, Any] | None = None


class MigrationResult(BaseModel):
    success: bool = True
    migrated_count: int = 0
    reconciled_count: int = 0
    errors: list[str] = Field(default_factory=list)
