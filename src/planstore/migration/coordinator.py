"""One-time upload of local-only projects after sign-in.

Each successfully uploaded record gets an entry in the migration map, which
is saved immediately so an interrupted run picks up where it stopped. The
local originals are kept; listing hides them once mapped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from planstore.auth.context import IdentityContext
from planstore.contracts.exceptions import PlanStoreError
from planstore.contracts.migration import MigrationEntry, MigrationMap
from planstore.contracts.project import ANONYMOUS_USER_ID, ProjectMetadata, ProjectRecord, RecordOrigin
from planstore.contracts.results import MigrationResult
from planstore.gateway.gateway import PersistenceGateway
from planstore.migration.progress import RECONCILE_PHASE, UPLOAD_PHASE, MigrationProgress, NullMigrationProgress

logger = logging.getLogger(__name__)

RECOVERED_DESCRIPTION = "Project recovered from local storage"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class _Candidate:
    source_id: str
    name: str
    payload: dict[str, Any]
    metadata: ProjectMetadata
    record: ProjectRecord | None = None


class MigrationCoordinator:
    """Moves local-only records to the remote service for the signed-in user.

    Args:
        identity: Session identity; migration needs a signed-in user.
        gateway: Provides the remote-only upload path and the local store.
        progress: Observer for phase events.
        clock: Source of ``migrated_at`` timestamps.
    """

    def __init__(
        self,
        identity: IdentityContext,
        gateway: PersistenceGateway,
        *,
        progress: MigrationProgress | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._identity = identity
        self._gateway = gateway
        self._store = gateway.local
        self._progress = progress or NullMigrationProgress()
        self._clock = clock
        self._lock = asyncio.Lock()

    async def migrated_id(self, source_id: str) -> str | None:
        return (await self._store.load_migration_map()).remote_id_for(source_id)

    async def is_migration_completed(self) -> bool:
        return await self._store.is_migration_completed()

    async def migrate_all(self, *, progress: MigrationProgress | None = None) -> MigrationResult:
        """Upload every eligible local record, then push pending offline edits.

        Concurrent calls run one after the other. Per-record failures are
        collected in ``errors`` and do not stop the run.
        """
        async with self._lock:
            return await self._migrate(progress or self._progress)

    async def _migrate(self, progress: MigrationProgress) -> MigrationResult:
        identity = self._identity.current()
        if not identity.authenticated:
            return MigrationResult(success=False, errors=["you must be signed in to migrate local projects"])

        migration_map = await self._store.load_migration_map()
        candidates = await self._candidates(migration_map, identity.user_id)
        errors: list[str] = []
        migrated = 0

        progress.phase_start(UPLOAD_PHASE, total=len(candidates))
        for candidate in candidates:
            try:
                remote_id = await self._gateway.create_remote(
                    candidate.payload, candidate.metadata, original_id=candidate.source_id
                )
            except PlanStoreError as exc:
                logger.warning("Could not migrate %s: %s", candidate.source_id, exc)
                errors.append(f'Project "{candidate.name}": {exc}')
                progress.item_done(UPLOAD_PHASE, failed=True)
                continue

            migration_map.entries[candidate.source_id] = MigrationEntry(remote_id=remote_id, migrated_at=self._clock())
            try:
                await self._store.save_migration_map(migration_map)
            except PlanStoreError as exc:
                logger.error("Uploaded %s as %s but could not record the mapping: %s", candidate.source_id, remote_id, exc)
                errors.append(f'Project "{candidate.name}": uploaded as {remote_id} but the mapping was not saved: {exc}')
                progress.phase_error(UPLOAD_PHASE, exc)
                return MigrationResult(success=False, migrated_count=migrated, errors=errors)

            migrated += 1
            logger.info("Migrated %s to %s", candidate.source_id, remote_id)
            await self._settle_source(candidate, remote_id)
            progress.item_done(UPLOAD_PHASE)
        progress.phase_done(UPLOAD_PHASE)

        reconciled = await self._reconcile(identity.user_id, migration_map, errors, progress)

        if migrated:
            try:
                await self._store.mark_migration_completed()
            except PlanStoreError as exc:
                logger.warning("Could not record migration completion: %s", exc)

        logger.info("Migration finished: %d migrated, %d reconciled, %d errors", migrated, reconciled, len(errors))
        return MigrationResult(migrated_count=migrated, reconciled_count=reconciled, errors=errors)

    async def _settle_source(self, candidate: _Candidate, remote_id: str) -> None:
        """Clear the upload's pending flag and follow the current project to its remote id."""
        try:
            if candidate.record is not None and candidate.record.pending_sync:
                await self._store.put_project(candidate.record.model_copy(update={"pending_sync": False}))
            if await self._store.get_current_project_id() == candidate.source_id:
                await self._store.set_current_project_id(remote_id)
        except PlanStoreError as exc:
            logger.warning("Migrated %s but could not update its local state: %s", candidate.source_id, exc)

    async def _candidates(self, migration_map: MigrationMap, user_id: str) -> list[_Candidate]:
        records = await self._store.list_projects()
        candidates = [
            _Candidate(record.id, record.name, record.project_data, record.metadata(), record)
            for record in records
            if record.origin is RecordOrigin.LOCAL
            and record.user_id in (ANONYMOUS_USER_ID, user_id)
            and migration_map.remote_id_for(record.id) is None
        ]

        known = {record.id for record in records}
        for source_id, payload in (await self._store.legacy_states()).items():
            if source_id in known or migration_map.remote_id_for(source_id) is not None:
                continue
            name = f"Recovered Project {source_id[:8]}"
            candidates.append(
                _Candidate(source_id, name, payload, ProjectMetadata(name=name, description=RECOVERED_DESCRIPTION))
            )
        return candidates

    async def _reconcile(
        self, user_id: str, migration_map: MigrationMap, errors: list[str], progress: MigrationProgress
    ) -> int:
        """Push offline edits: pending mirrors and pending originals that were already migrated."""
        pending: list[tuple[ProjectRecord, str]] = []
        for record in await self._store.list_projects():
            if not record.pending_sync:
                continue
            if record.origin is RecordOrigin.REMOTE and record.user_id == user_id:
                pending.append((record, record.id))
                continue
            remote_id = migration_map.remote_id_for(record.id)
            if record.origin is RecordOrigin.LOCAL and remote_id and record.user_id in (ANONYMOUS_USER_ID, user_id):
                pending.append((record, remote_id))

        progress.phase_start(RECONCILE_PHASE, total=len(pending))
        reconciled = 0
        for record, remote_id in pending:
            try:
                await self._gateway.push_remote(record, remote_id=remote_id)
                await self._store.put_project(record.model_copy(update={"pending_sync": False}))
            except PlanStoreError as exc:
                logger.warning("Could not sync offline changes to %s: %s", remote_id, exc)
                errors.append(f'Project "{record.name}": {exc}')
                progress.item_done(RECONCILE_PHASE, failed=True)
                continue
            reconciled += 1
            progress.item_done(RECONCILE_PHASE)
        progress.phase_done(RECONCILE_PHASE)
        return reconciled
