"""Migration map contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MigrationEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    remote_id: str = Field(alias="remoteId")
    migrated_at: datetime = Field(alias="migratedAt")


class MigrationMap(BaseModel):
    """Local-only project id -> remote id. One entry per source id."""

    entries: dict[str, MigrationEntry] = Field(default_factory=dict)

    def remote_id_for(self, source_id: str) -> str | None:
        entry = self.entries.get(source_id)
        return entry.remote_id if entry is not None else None

    def source_id_for(self, remote_id: str) -> str | None:
        for source_id, entry in self.entries.items():
            if entry.remote_id == remote_id:
                return source_id
        return None
