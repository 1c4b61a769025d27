"""Remote-first, local-fallback persistence for planning documents.

Backend selection:

- Authenticated sessions try the remote service first. A transport failure
  is logged and the local store becomes the source of truth for that call.
  A remote not-found sends load/update/delete to the local store, since the
  record may never have been uploaded. A remote permission refusal is final.
- Anonymous sessions only use the local store, except for the read-only
  listing of public projects.

Public operations never raise library errors; they return result objects.
Conflicts between concurrent writers resolve as last writer observed wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from planstore.auth.context import IdentityContext
from planstore.backends.base import RemoteBackend
from planstore.contracts.exceptions import (
    AuthenticationError,
    PermissionDeniedError,
    PlanStoreError,
    RecordNotFoundError,
    RecordValidationError,
    RemoteTransportError,
)
from planstore.contracts.identity import SessionIdentity
from planstore.contracts.project import (
    ANONYMOUS_USER_ID,
    ProjectMetadata,
    ProjectRecord,
    ProjectSummary,
    RecordOrigin,
    RecordSource,
    to_summary,
)
from planstore.contracts.results import ListResult, LoadResult, OperationResult, SaveResult
from planstore.gateway.validation import sanitize_metadata, validate_document
from planstore.storage.local import LocalStore, new_project_id

logger = logging.getLogger(__name__)

MetadataInput = ProjectMetadata | Mapping[str, Any] | None

_INVALID_IDS = frozenset({"", "undefined", "null"})


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _check_project_id(project_id: str) -> None:
    if not isinstance(project_id, str) or project_id.strip() in _INVALID_IDS:
        raise RecordValidationError("invalid project id")


def _check_owner(record: ProjectRecord, identity: SessionIdentity, *, action: str) -> None:
    if record.user_id not in (identity.user_id, ANONYMOUS_USER_ID):
        raise PermissionDeniedError(f"you do not have permission to {action} this project")


class PersistenceGateway:
    """Single entry point for project create/update/load/delete/list.

    Args:
        identity: Session identity consulted on every call.
        local: Local record store; always available.
        remote: Remote service. ``None`` runs the gateway local-only.
        clock: Source of timestamps.
    """

    def __init__(
        self,
        identity: IdentityContext,
        local: LocalStore,
        remote: RemoteBackend | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._identity = identity
        self._local = local
        self._remote = remote
        self._clock = clock

    @property
    def local(self) -> LocalStore:
        return self._local

    def _use_remote(self, identity: SessionIdentity) -> bool:
        return identity.authenticated and self._remote is not None

    def _touch(self, previous: datetime | None = None) -> datetime:
        now = self._clock()
        if previous is not None and previous > now:
            return previous
        return now

    async def _remote_id_for(self, project_id: str) -> str:
        migration_map = await self._local.load_migration_map()
        return migration_map.remote_id_for(project_id) or project_id

    async def _remember_current(self, project_id: str) -> None:
        try:
            await self._local.set_current_project_id(project_id)
        except PlanStoreError as exc:
            logger.warning("Could not record current project %s: %s", project_id, exc)

    async def current_project_id(self) -> str | None:
        return await self._local.get_current_project_id()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, payload: Mapping[str, Any], metadata: MetadataInput = None) -> SaveResult:
        try:
            document = validate_document(payload)
            meta = sanitize_metadata(metadata)
        except RecordValidationError as exc:
            return SaveResult.failed(exc)

        identity = self._identity.current()
        transport_error: RemoteTransportError | None = None
        if self._use_remote(identity):
            assert self._remote is not None
            try:
                remote_id = await self._remote.create(identity.user_id, document, meta)
            except RemoteTransportError as exc:
                logger.warning("Remote create failed, saving locally instead: %s", exc)
                transport_error = exc
            except PlanStoreError as exc:
                return SaveResult.failed(exc, source=RecordSource.REMOTE)
            else:
                return await self._mirror_created(remote_id, identity, document, meta)

        now = self._touch()
        record = ProjectRecord(
            id=new_project_id(),
            user_id=identity.user_id,
            name=meta.name,
            description=meta.description,
            is_public=meta.is_public,
            tags=meta.tags,
            project_data=document,
            created_at=now,
            updated_at=now,
            origin=RecordOrigin.LOCAL,
            pending_sync=transport_error is not None,
        )
        try:
            await self._local.put_project(record)
        except PlanStoreError as exc:
            if transport_error is not None:
                logger.error("Remote and local create both failed: %s / %s", transport_error, exc)
            return SaveResult.failed(exc, source=RecordSource.LOCAL)

        await self._remember_current(record.id)
        logger.info("Project saved locally with id %s", record.id)
        return SaveResult(
            success=True,
            project_id=record.id,
            source=RecordSource.LOCAL,
            fallback=transport_error is not None,
        )

    async def _mirror_created(
        self,
        remote_id: str,
        identity: SessionIdentity,
        document: dict[str, Any],
        meta: ProjectMetadata,
    ) -> SaveResult:
        now = self._touch()
        mirror = ProjectRecord(
            id=remote_id,
            user_id=identity.user_id,
            name=meta.name,
            description=meta.description,
            is_public=meta.is_public,
            tags=meta.tags,
            project_data=document,
            created_at=now,
            updated_at=now,
            origin=RecordOrigin.REMOTE,
        )
        try:
            await self._local.put_project(mirror)
        except PlanStoreError as exc:
            logger.warning("Project %s saved remotely but the local copy failed: %s", remote_id, exc)
            return SaveResult(
                success=False,
                project_id=remote_id,
                source=RecordSource.REMOTE,
                error=exc.kind,
                message=f"project saved online as {remote_id}, but the offline copy could not be written: {exc}",
            )
        await self._remember_current(remote_id)
        logger.info("Project saved remotely with id %s", remote_id)
        return SaveResult(success=True, project_id=remote_id, source=RecordSource.REMOTE)

    async def create_remote(
        self,
        payload: Mapping[str, Any],
        metadata: MetadataInput,
        *,
        original_id: str,
    ) -> str:
        """Upload through the import endpoint only; no local fallback.

        Raises:
            AuthenticationError: No signed-in user.
            RecordValidationError: Payload or metadata invalid.
            RemoteTransportError: Remote unreachable or not configured.
        """
        identity = self._identity.current()
        if not identity.authenticated:
            raise AuthenticationError("you must be signed in to upload projects")
        if self._remote is None:
            raise RemoteTransportError("remote service is not configured")
        document = validate_document(payload)
        meta = sanitize_metadata(metadata)
        return await self._remote.import_project(identity.user_id, document, meta, original_id=original_id)

    async def push_remote(self, record: ProjectRecord, *, remote_id: str | None = None) -> None:
        """Send a locally changed record back to the service.

        ``remote_id`` names the remote record when it differs from the local
        id, as for a migrated local original.

        Raises:
            AuthenticationError: No signed-in user.
            RemoteTransportError: Remote unreachable or not configured.
            RecordNotFoundError / PermissionDeniedError: As reported by the service.
        """
        identity = self._identity.current()
        if not identity.authenticated:
            raise AuthenticationError("you must be signed in to upload projects")
        if self._remote is None:
            raise RemoteTransportError("remote service is not configured")
        await self._remote.update(remote_id or record.id, identity.user_id, record.project_data, record.metadata())

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update(self, project_id: str, payload: Mapping[str, Any], metadata: MetadataInput = None) -> SaveResult:
        try:
            _check_project_id(project_id)
            document = validate_document(payload)
            meta = sanitize_metadata(metadata)
        except RecordValidationError as exc:
            return SaveResult.failed(exc)

        identity = self._identity.current()
        transport_error: RemoteTransportError | None = None
        if self._use_remote(identity):
            assert self._remote is not None
            remote_id = await self._remote_id_for(project_id)
            try:
                await self._remote.update(remote_id, identity.user_id, document, meta)
            except RecordNotFoundError:
                logger.info("Project %s not found remotely, updating the local copy", project_id)
            except RemoteTransportError as exc:
                logger.warning("Remote update failed, updating locally instead: %s", exc)
                transport_error = exc
            except PlanStoreError as exc:
                return SaveResult.failed(exc, source=RecordSource.REMOTE)
            else:
                await self._refresh_mirror(remote_id, document, meta)
                await self._remember_current(remote_id)
                return SaveResult(success=True, project_id=remote_id, source=RecordSource.REMOTE)

        try:
            existing = await self._local.get_project(project_id)
            if existing is None:
                raise RecordNotFoundError("project not found")
            _check_owner(existing, identity, action="edit")
            updated = existing.model_copy(
                update={
                    "name": meta.name,
                    "description": meta.description,
                    "is_public": meta.is_public,
                    "tags": meta.tags,
                    "project_data": document,
                    "updated_at": self._touch(existing.updated_at),
                    "pending_sync": existing.pending_sync or transport_error is not None,
                }
            )
            await self._local.put_project(updated)
        except RecordNotFoundError as exc:
            return SaveResult.failed(transport_error or exc, source=RecordSource.LOCAL)
        except PlanStoreError as exc:
            return SaveResult.failed(exc, source=RecordSource.LOCAL)

        await self._remember_current(project_id)
        return SaveResult(
            success=True,
            project_id=project_id,
            source=RecordSource.LOCAL,
            fallback=transport_error is not None,
        )

    async def _refresh_mirror(self, project_id: str, document: dict[str, Any], meta: ProjectMetadata) -> None:
        existing = await self._local.get_project(project_id)
        if existing is None:
            return
        refreshed = existing.model_copy(
            update={
                "name": meta.name,
                "description": meta.description,
                "is_public": meta.is_public,
                "tags": meta.tags,
                "project_data": document,
                "updated_at": self._touch(existing.updated_at),
                "pending_sync": False,
            }
        )
        try:
            await self._local.put_project(refreshed)
        except PlanStoreError as exc:
            logger.warning("Dropping stale local copy of %s, refresh failed: %s", project_id, exc)
            try:
                await self._local.remove_project(project_id)
            except PlanStoreError as remove_exc:
                logger.error("Stale local copy of %s could not be removed: %s", project_id, remove_exc)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load(self, project_id: str) -> LoadResult:
        try:
            _check_project_id(project_id)
        except RecordValidationError as exc:
            return LoadResult.failed(exc)

        identity = self._identity.current()
        transport_error: RemoteTransportError | None = None
        if self._use_remote(identity):
            assert self._remote is not None
            remote_id = await self._remote_id_for(project_id)
            try:
                record = await self._remote.get(remote_id, identity.user_id)
            except RecordNotFoundError:
                logger.info("Project %s not found remotely, checking the local store", project_id)
            except RemoteTransportError as exc:
                logger.warning("Remote load failed, reading locally instead: %s", exc)
                transport_error = exc
            except PlanStoreError as exc:
                return LoadResult.failed(exc, source=RecordSource.REMOTE)
            else:
                await self._sync_mirror(record)
                await self._remember_current(record.id)
                return LoadResult(success=True, project=record, source=RecordSource.REMOTE)

        try:
            local_record = await self._local.get_project(project_id)
            if local_record is None:
                raise RecordNotFoundError("project not found")
            if not local_record.is_public:
                _check_owner(local_record, identity, action="view")
        except RecordNotFoundError as exc:
            return LoadResult.failed(transport_error or exc, source=RecordSource.LOCAL)
        except PlanStoreError as exc:
            return LoadResult.failed(exc, source=RecordSource.LOCAL)

        await self._remember_current(project_id)
        return LoadResult(success=True, project=local_record, source=RecordSource.LOCAL)

    async def _sync_mirror(self, record: ProjectRecord) -> None:
        existing = await self._local.get_project(record.id)
        if existing is None or existing.origin is not RecordOrigin.REMOTE or existing.pending_sync:
            return
        if existing.model_dump() == record.model_dump():
            return
        try:
            await self._local.put_project(record)
        except PlanStoreError as exc:
            logger.warning("Could not refresh local copy of %s: %s", record.id, exc)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, project_id: str) -> OperationResult:
        try:
            _check_project_id(project_id)
        except RecordValidationError as exc:
            return OperationResult.failed(exc)

        identity = self._identity.current()
        transport_error: RemoteTransportError | None = None
        if self._use_remote(identity):
            assert self._remote is not None
            remote_id = await self._remote_id_for(project_id)
            try:
                await self._remote.delete(remote_id, identity.user_id)
            except RecordNotFoundError:
                logger.info("Project %s not found remotely, deleting from the local store", project_id)
            except RemoteTransportError as exc:
                logger.warning("Remote delete failed, trying the local store: %s", exc)
                transport_error = exc
            except PlanStoreError as exc:
                return OperationResult.failed(exc, source=RecordSource.REMOTE)
            else:
                for local_id in {project_id, remote_id}:
                    try:
                        await self._local.remove_project(local_id)
                    except PlanStoreError as local_exc:
                        logger.warning("Deleted %s remotely but its local copy remains: %s", remote_id, local_exc)
                return OperationResult(success=True, source=RecordSource.REMOTE)

        try:
            existing = await self._local.get_project(project_id)
            if existing is None:
                raise RecordNotFoundError("project not found")
            _check_owner(existing, identity, action="delete")
            await self._local.remove_project(project_id)
        except RecordNotFoundError as exc:
            return OperationResult.failed(transport_error or exc, source=RecordSource.LOCAL)
        except PlanStoreError as exc:
            return OperationResult.failed(exc, source=RecordSource.LOCAL)

        message = None
        if transport_error is not None:
            message = "deleted from this device; the online copy could not be reached"
        return OperationResult(success=True, source=RecordSource.LOCAL, message=message)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_for_user(self) -> ListResult:
        identity = self._identity.current()
        records = await self._local.list_projects()
        migration_map = await self._local.load_migration_map()

        if not identity.authenticated:
            visible = [
                to_summary(
                    record,
                    source=RecordSource.LOCAL,
                    local_only=record.origin is RecordOrigin.LOCAL and migration_map.remote_id_for(record.id) is None,
                ).model_copy(update={"read_only": record.user_id != ANONYMOUS_USER_ID})
                for record in records
                if record.user_id == ANONYMOUS_USER_ID or record.is_public
            ]
            seen = {summary.id for summary in visible}
            for summary in await self._public_summaries(identity):
                if summary.id not in seen:
                    visible.append(summary)
            return ListResult(success=True, projects=_newest_first(visible), source=RecordSource.LOCAL)

        remote_summaries: list[ProjectSummary] = []
        remote_ok = False
        if self._remote is not None:
            try:
                remote_summaries = await self._remote.list_for_user(identity.user_id)
                remote_ok = True
            except RemoteTransportError as exc:
                logger.warning("Remote listing failed, showing local projects only: %s", exc)
            except PlanStoreError as exc:
                return ListResult.failed(exc, source=RecordSource.REMOTE)

        projects = [
            summary.model_copy(update={"migrated_from": migration_map.source_id_for(summary.id)})
            for summary in remote_summaries
        ]
        remote_ids = {summary.id for summary in projects}
        for record in records:
            if record.user_id != identity.user_id or record.id in remote_ids:
                continue
            if migration_map.remote_id_for(record.id) is not None:
                continue
            if record.origin is RecordOrigin.REMOTE and remote_ok:
                continue
            projects.append(to_summary(record, source=RecordSource.LOCAL, local_only=True))

        source = RecordSource.REMOTE if remote_ok else RecordSource.LOCAL
        return ListResult(success=True, projects=_newest_first(projects), source=source)

    async def list_public(self) -> ListResult:
        if self._remote is None:
            return ListResult.failed(RemoteTransportError("remote service is not configured"))
        try:
            summaries = await self._remote.list_public()
        except PlanStoreError as exc:
            return ListResult.failed(exc, source=RecordSource.REMOTE)
        identity = self._identity.current()
        projects = [
            summary.model_copy(update={"read_only": summary.user_id != identity.user_id}) for summary in summaries
        ]
        return ListResult(success=True, projects=_newest_first(projects), source=RecordSource.REMOTE)

    async def _public_summaries(self, identity: SessionIdentity) -> list[ProjectSummary]:
        if self._remote is None:
            return []
        try:
            summaries = await self._remote.list_public()
        except PlanStoreError as exc:
            logger.debug("Public project listing unavailable: %s", exc)
            return []
        return [summary.model_copy(update={"read_only": summary.user_id != identity.user_id}) for summary in summaries]


def _newest_first(summaries: list[ProjectSummary]) -> list[ProjectSummary]:
    return sorted(summaries, key=lambda summary: summary.updated_at, reverse=True)
