"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEV_API_URL = "http://localhost:3000/api"


class PlanStoreConfig(BaseModel):
    """Settings for the persistence layer.

    Attributes:
        api_url: Explicit remote base URL; wins over everything else.
        environment: ``production`` resolves the API under ``origin``.
        origin: Deployment origin used for the relative ``/api`` path.
        data_dir: Directory backing the local store.
        auth: How the startup identity is resolved.
        user_id: User for the ``static`` auth mode.
        timeout_seconds: Remote request timeout; expiry counts as a transport failure.
        max_retries: Retries for transient transport failures before falling back.
        quota_bytes: Total size limit of the local store.
        max_auto_backups: Ceiling for retained automatic backups.
        auto_backup_interval_ms: Auto-backup period.
        max_observers: Bound on identity observers.
    """

    api_url: str | None = None
    environment: Literal["development", "production"] = "development"
    origin: str | None = None
    data_dir: Path = Path(".planstore")
    auth: Literal["anonymous", "env", "static", "stored"] = "stored"
    user_id: str | None = None
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=1, ge=0)
    quota_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    max_auto_backups: int = Field(default=10, ge=1)
    auto_backup_interval_ms: int = Field(default=5 * 60 * 1000, gt=0)
    max_observers: int = Field(default=16, ge=1)
