"""Shared CLI helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from planstore.config import apply_env_overrides, load_config
from planstore.contracts import (
    BackupRecord,
    ErrorKind,
    OperationResult,
    PlanStoreConfig,
    PlanStoreError,
    ProjectSummary,
    RecordValidationError,
)


class CommandFailed(PlanStoreError):
    """A failed result object turned back into an error for exit-code mapping."""

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


def load_cli_config(path: str | None) -> PlanStoreConfig:
    if path is None:
        return apply_env_overrides(PlanStoreConfig())
    return load_config(path)


def ensure_success(result: OperationResult) -> None:
    if not result.success:
        raise CommandFailed(result.message or "operation failed", result.error or ErrorKind.UNKNOWN)


def read_document(path: str | Path) -> dict[str, Any]:
    file_path = Path(path)
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RecordValidationError(f"cannot read document file: {file_path}") from exc
    except json.JSONDecodeError as exc:
        raise RecordValidationError(f"document file is not valid JSON: {file_path}") from exc
    if not isinstance(payload, dict):
        raise RecordValidationError(f"document file must hold a JSON object: {file_path}")
    return payload


def format_timestamp_ms(timestamp: int) -> str:
    return f"{datetime.fromtimestamp(timestamp / 1000, tz=UTC):%Y-%m-%d %H:%M:%S}"


def format_project_line(summary: ProjectSummary) -> str:
    flags = [summary.source.value]
    if summary.local_only:
        flags.append("local only")
    if summary.read_only:
        flags.append("read only")
    if summary.is_public:
        flags.append("public")
    if summary.migrated_from:
        flags.append(f"from {summary.migrated_from}")
    return f"  {summary.id:<36} {summary.name:<30} {summary.updated_at:%Y-%m-%d %H:%M}  [{', '.join(flags)}]"


def format_backup_line(backup: BackupRecord) -> str:
    kind = "auto" if backup.automatic else "manual"
    return f"  {backup.id:<22} {format_timestamp_ms(backup.timestamp)}  {kind:<6} {backup.project_name} ({backup.project_id})"
