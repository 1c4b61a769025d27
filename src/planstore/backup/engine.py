"""Local snapshot backups of the live planning document.

Backups live only in the local store. Automatic backups are taken by a
timer task owned by the engine and are pruned to a fixed ceiling after each
automatic snapshot; manual backups are kept until deleted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from planstore.contracts.backup import UNSAVED_PROJECT_ID, BackupRecord, LiveDocument
from planstore.contracts.exceptions import PlanStoreError, RecordNotFoundError, RecordValidationError
from planstore.contracts.project import DEFAULT_PROJECT_NAME
from planstore.contracts.results import BackupResult, OperationResult, RestoreResult
from planstore.gateway.validation import validate_document
from planstore.storage.local import LocalStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_AUTO_BACKUPS = 10
DEFAULT_INTERVAL_MS = 5 * 60 * 1000


class BackupEngine:
    """Snapshot, list, restore and prune backups of one live document.

    Args:
        store: Local store holding the backup collection.
        document: The document open in the host editor. May be ``None`` when
            the engine is only used to inspect or delete backups.
        max_auto_backups: Automatic backups retained after pruning.
        interval_ms: Default auto-backup period.
        clock: Seconds since the epoch.
        sleep: Awaitable delay used by the timer task.
    """

    def __init__(
        self,
        store: LocalStore,
        document: LiveDocument | None = None,
        *,
        max_auto_backups: int = DEFAULT_MAX_AUTO_BACKUPS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_auto_backups < 1:
            raise ValueError("max_auto_backups must be at least 1")
        self._store = store
        self._document = document
        self._max_auto_backups = max_auto_backups
        self._interval_ms = interval_ms
        self._clock = clock
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def snapshot(self, document: LiveDocument | None = None) -> BackupResult:
        """Take a manual backup of ``document`` (defaults to the live document)."""
        return await self._snapshot(document or self._document, automatic=False)

    async def _snapshot(self, document: LiveDocument | None, *, automatic: bool) -> BackupResult:
        try:
            if document is None:
                raise RecordValidationError("no document is open to back up")
            payload = document.to_payload()
            if not payload:
                raise RecordValidationError("nothing to back up: the document is empty")
            data = validate_document(payload)

            existing = {backup.id for backup in await self._store.list_backups()}
            timestamp = int(self._clock() * 1000)
            while f"backup_{timestamp}" in existing:
                timestamp += 1

            backup = BackupRecord(
                id=f"backup_{timestamp}",
                project_id=document.project_id or UNSAVED_PROJECT_ID,
                project_name=document.project_name or DEFAULT_PROJECT_NAME,
                timestamp=timestamp,
                automatic=automatic,
                data=data,
            )
            await self._store.put_backup(backup)
        except PlanStoreError as exc:
            logger.warning("Backup failed: %s", exc)
            return BackupResult.failed(exc)

        logger.info("Created %s backup %s", "automatic" if automatic else "manual", backup.id)
        if automatic:
            try:
                await self._prune_automatic()
            except PlanStoreError as exc:
                logger.warning("Could not prune automatic backups: %s", exc)
        return BackupResult(success=True, backup_id=backup.id)

    async def _prune_automatic(self) -> int:
        automatic = sorted(
            (backup for backup in await self._store.list_backups() if backup.automatic),
            key=lambda backup: backup.timestamp,
            reverse=True,
        )
        excess = {backup.id for backup in automatic[self._max_auto_backups :]}
        if not excess:
            return 0
        removed = await self._store.remove_backups(excess)
        logger.debug("Pruned %d automatic backups", removed)
        return removed

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    async def list(self) -> list[BackupRecord]:
        """All backups, newest first."""
        backups = await self._store.list_backups()
        return sorted(backups, key=lambda backup: backup.timestamp, reverse=True)

    async def list_for_project(self, project_id: str) -> list[BackupRecord]:
        return [backup for backup in await self.list() if backup.project_id == project_id]

    async def _find(self, backup_id: str) -> BackupRecord:
        for backup in await self._store.list_backups():
            if backup.id == backup_id:
                return backup
        raise RecordNotFoundError(f"backup not found: {backup_id}")

    # ------------------------------------------------------------------
    # Restore and delete
    # ------------------------------------------------------------------

    async def restore(self, backup_id: str, *, confirm: bool = False) -> RestoreResult:
        """Replace the live document with a backup's payload.

        Nothing is touched unless ``confirm`` is true, the backup exists and
        its payload is a valid document.
        """
        try:
            if not confirm:
                raise RecordValidationError("restoring replaces the current document; pass confirm=True to proceed")
            if self._document is None:
                raise RecordValidationError("no document is open to restore into")
            backup = await self._find(backup_id)
            data = validate_document(backup.data)
            self._document.apply_payload(data)
        except PlanStoreError as exc:
            logger.warning("Restore of %s failed: %s", backup_id, exc)
            return RestoreResult.failed(exc)

        taken_at = datetime.fromtimestamp(backup.timestamp / 1000, tz=UTC)
        logger.info("Restored backup %s", backup.id)
        return RestoreResult(
            success=True,
            document=data,
            message=f"restored '{backup.project_name}' from {taken_at:%Y-%m-%d %H:%M:%S} UTC",
        )

    async def delete(self, backup_id: str) -> OperationResult:
        try:
            removed = await self._store.remove_backups({backup_id})
            if not removed:
                raise RecordNotFoundError(f"backup not found: {backup_id}")
        except PlanStoreError as exc:
            return OperationResult.failed(exc)
        return OperationResult(success=True)

    # ------------------------------------------------------------------
    # Auto-backup timer
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start_auto_backup(self, interval_ms: int | None = None) -> None:
        """Start the periodic backup task, replacing any running one.

        Must be called from a running event loop.
        """
        period = interval_ms if interval_ms is not None else self._interval_ms
        if period <= 0:
            raise ValueError("interval_ms must be positive")
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.create_task(self._run(period / 1000), name="planstore-auto-backup")
        logger.debug("Auto-backup started every %d ms", period)

    async def stop_auto_backup(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Auto-backup stopped")

    async def _run(self, period_seconds: float) -> None:
        while True:
            await self._sleep(period_seconds)
            try:
                await self._auto_tick()
            except Exception:
                logger.exception("Auto-backup tick failed")

    async def _auto_tick(self) -> BackupResult | None:
        document = self._document
        if document is None or document.work_item_count() == 0:
            logger.debug("Auto-backup skipped: no work items")
            return None
        return await self._snapshot(document, automatic=True)
