"""Typed collections over the local key-value store.

Corrupted entries are treated as absent: an unparsable collection reads as
empty and an individual malformed record is skipped, each with a warning.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from planstore.contracts.backup import BackupRecord
from planstore.contracts.exceptions import StorageCorruptionError
from planstore.contracts.identity import SessionIdentity
from planstore.contracts.migration import MigrationMap
from planstore.contracts.project import ProjectRecord
from planstore.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

PROJECTS_KEY = "projects"
BACKUPS_KEY = "backups"
MIGRATION_MAP_KEY = "migration_map"
CURRENT_PROJECT_KEY = "current_project_id"
MIGRATION_COMPLETED_KEY = "migration_completed"
IDENTITY_KEY = "identity"
LEGACY_STATE_PREFIX = "state/"

M = TypeVar("M", bound=BaseModel)

_ANY_LIST = TypeAdapter(list[Any])


def new_project_id() -> str:
    return f"project_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class LocalStore:
    """Project records, backups, the migration map and session scalars."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    @property
    def kv(self) -> KeyValueStore:
        return self._kv

    # ------------------------------------------------------------------
    # Raw helpers
    # ------------------------------------------------------------------

    async def _read_raw(self, key: str) -> str | None:
        try:
            return await self._kv.get(key)
        except StorageCorruptionError as exc:
            logger.warning("Local entry %s is unreadable, treating as absent: %s", key, exc)
            return None

    async def _read_collection(self, key: str, model: type[M]) -> list[M]:
        raw = await self._read_raw(key)
        if raw is None:
            return []
        try:
            items = _ANY_LIST.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Local collection %s is corrupted, treating as empty", key)
            return []

        parsed: list[M] = []
        for index, item in enumerate(items):
            try:
                parsed.append(model.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed entry %d in local collection %s", index, key)
        return parsed

    async def _write_collection(self, key: str, items: list[M]) -> None:
        payload = [item.model_dump(mode="json", by_alias=True) for item in items]
        await self._kv.set(key, json.dumps(payload))

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def list_projects(self) -> list[ProjectRecord]:
        return await self._read_collection(PROJECTS_KEY, ProjectRecord)

    async def get_project(self, project_id: str) -> ProjectRecord | None:
        for record in await self.list_projects():
            if record.id == project_id:
                return record
        return None

    async def put_project(self, record: ProjectRecord) -> None:
        """Insert ``record`` or replace the stored record with the same id."""
        records = [existing for existing in await self.list_projects() if existing.id != record.id]
        records.append(record)
        await self._write_collection(PROJECTS_KEY, records)

    async def remove_project(self, project_id: str) -> bool:
        records = await self.list_projects()
        remaining = [record for record in records if record.id != project_id]
        if len(remaining) == len(records):
            return False
        await self._write_collection(PROJECTS_KEY, remaining)
        return True

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    async def list_backups(self) -> list[BackupRecord]:
        return await self._read_collection(BACKUPS_KEY, BackupRecord)

    async def put_backup(self, backup: BackupRecord) -> None:
        backups = await self.list_backups()
        backups.append(backup)
        await self._write_collection(BACKUPS_KEY, backups)

    async def remove_backups(self, backup_ids: set[str]) -> int:
        backups = await self.list_backups()
        remaining = [backup for backup in backups if backup.id not in backup_ids]
        removed = len(backups) - len(remaining)
        if removed:
            await self._write_collection(BACKUPS_KEY, remaining)
        return removed

    # ------------------------------------------------------------------
    # Migration map and markers
    # ------------------------------------------------------------------

    async def load_migration_map(self) -> MigrationMap:
        raw = await self._read_raw(MIGRATION_MAP_KEY)
        if raw is None:
            return MigrationMap()
        try:
            return MigrationMap.model_validate_json(raw)
        except ValidationError:
            logger.warning("Local migration map is corrupted, treating as empty")
            return MigrationMap()

    async def save_migration_map(self, migration_map: MigrationMap) -> None:
        await self._kv.set(MIGRATION_MAP_KEY, migration_map.model_dump_json(by_alias=True))

    async def is_migration_completed(self) -> bool:
        return await self._read_raw(MIGRATION_COMPLETED_KEY) == "true"

    async def mark_migration_completed(self) -> None:
        await self._kv.set(MIGRATION_COMPLETED_KEY, "true")

    async def legacy_states(self) -> dict[str, dict[str, Any]]:
        """Per-project document states left under ``state/<id>`` keys."""
        states: dict[str, dict[str, Any]] = {}
        try:
            keys = await self._kv.keys(LEGACY_STATE_PREFIX)
        except StorageCorruptionError as exc:
            logger.warning("Cannot list legacy states, skipping them: %s", exc)
            return states
        for key in keys:
            raw = await self._read_raw(key)
            if raw is None:
                continue
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Skipping corrupted legacy state %s", key)
                continue
            if isinstance(payload, dict):
                states[key[len(LEGACY_STATE_PREFIX) :]] = payload
        return states

    # ------------------------------------------------------------------
    # Session scalars
    # ------------------------------------------------------------------

    async def get_current_project_id(self) -> str | None:
        return await self._read_raw(CURRENT_PROJECT_KEY)

    async def set_current_project_id(self, project_id: str) -> None:
        await self._kv.set(CURRENT_PROJECT_KEY, project_id)

    async def load_identity(self) -> SessionIdentity | None:
        raw = await self._read_raw(IDENTITY_KEY)
        if raw is None:
            return None
        try:
            return SessionIdentity.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored identity is corrupted, ignoring it")
            return None

    async def save_identity(self, identity: SessionIdentity) -> None:
        await self._kv.set(IDENTITY_KEY, identity.model_dump_json(by_alias=True))
