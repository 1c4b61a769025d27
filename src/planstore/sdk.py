"""SDK composition root for planstore."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

import httpx

from planstore.auth import IdentityContext, IdentityResolver, create_identity_resolver
from planstore.backends import RemoteBackend, create_remote_backend
from planstore.backup import BackupEngine
from planstore.contracts.backup import LiveDocument
from planstore.contracts.config import PlanStoreConfig
from planstore.contracts.exceptions import AuthenticationError, PlanStoreError
from planstore.contracts.identity import SessionIdentity
from planstore.contracts.results import MigrationResult
from planstore.gateway import PersistenceGateway
from planstore.migration import MigrationCoordinator, MigrationProgress
from planstore.storage import DirectoryKeyValueStore, KeyValueStore, LocalStore

logger = logging.getLogger(__name__)


class PlanStore:
    """planstore SDK public API.

    Wires the identity context, local store, remote backend, gateway, backup
    engine and migration coordinator together. Every sign-in schedules a
    migration run in the background; :meth:`wait_for_migration` awaits the
    latest one.

    Use as an async context manager so the startup identity is restored and
    the remote client and background tasks are closed::

        async with PlanStore.from_config(config) as store:
            result = await store.gateway.list_for_user()
    """

    def __init__(
        self,
        *,
        config: PlanStoreConfig,
        identity: IdentityContext,
        store: LocalStore,
        remote: RemoteBackend | None,
        resolver: IdentityResolver,
        document: LiveDocument | None = None,
        progress: MigrationProgress | None = None,
        auto_migrate: bool = True,
    ) -> None:
        self._config = config
        self._identity = identity
        self._store = store
        self._remote = remote
        self._resolver = resolver
        self._gateway = PersistenceGateway(identity, store, remote)
        self._backups = self.backups_for(document)
        self._migration = MigrationCoordinator(identity, self._gateway, progress=progress)
        self._migration_tasks: set[asyncio.Task[MigrationResult]] = set()
        self._latest_migration: asyncio.Task[MigrationResult] | None = None
        if auto_migrate:
            identity.subscribe(self._on_identity_change)

    @classmethod
    def from_config(
        cls,
        config: PlanStoreConfig,
        *,
        document: LiveDocument | None = None,
        kv: KeyValueStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        progress: MigrationProgress | None = None,
        auto_migrate: bool = True,
    ) -> PlanStore:
        """Build a store from config.

        Raises:
            ConfigError: Remote base URL or auth mode cannot be resolved.
        """
        store = LocalStore(kv or DirectoryKeyValueStore(config.data_dir, quota_bytes=config.quota_bytes))
        return cls(
            config=config,
            identity=IdentityContext(max_observers=config.max_observers),
            store=store,
            remote=create_remote_backend(config, transport=transport),
            resolver=create_identity_resolver(config, store),
            document=document,
            progress=progress,
            auto_migrate=auto_migrate,
        )

    @property
    def identity(self) -> IdentityContext:
        return self._identity

    @property
    def local(self) -> LocalStore:
        return self._store

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @property
    def backups(self) -> BackupEngine:
        return self._backups

    @property
    def migration(self) -> MigrationCoordinator:
        return self._migration

    def backups_for(self, document: LiveDocument | None) -> BackupEngine:
        """A backup engine bound to ``document``, sharing this store's settings."""
        return BackupEngine(
            self._store,
            document,
            max_auto_backups=self._config.max_auto_backups,
            interval_ms=self._config.auto_backup_interval_ms,
        )

    async def __aenter__(self) -> PlanStore:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def open(self) -> SessionIdentity:
        """Apply the startup identity produced by the configured resolver.

        Raises:
            AuthenticationError: The resolver could not produce an identity.
        """
        identity = await self._resolver.resolve()
        if identity.authenticated:
            self._identity.set_user(identity.user_id)
        return self._identity.current()

    async def close(self) -> None:
        await self._backups.stop_auto_backup()
        if self._migration_tasks:
            await asyncio.gather(*self._migration_tasks)
        self._latest_migration = None
        if self._remote is not None:
            await self._remote.__aexit__(None, None, None)

    async def sign_in(self, user_id: str) -> SessionIdentity:
        """Authenticate ``user_id`` and remember it for the next start.

        Raises:
            AuthenticationError: ``user_id`` is blank.
        """
        resolved = (user_id or "").strip()
        if not resolved:
            raise AuthenticationError("user id must not be blank")
        self._identity.set_user(resolved)
        await self._persist_identity()
        return self._identity.current()

    async def sign_out(self) -> None:
        self._identity.clear_user()
        await self._persist_identity()

    async def _persist_identity(self) -> None:
        try:
            await self._store.save_identity(self._identity.current())
        except PlanStoreError as exc:
            logger.warning("Could not remember the signed-in user: %s", exc)

    def _on_identity_change(self, identity: SessionIdentity) -> None:
        if not identity.authenticated:
            return
        try:
            task = asyncio.get_running_loop().create_task(self._migration.migrate_all(), name="planstore-migration")
        except RuntimeError:
            logger.debug("No running event loop; migration for %s not scheduled", identity.user_id)
            return
        self._migration_tasks.add(task)
        task.add_done_callback(self._migration_tasks.discard)
        self._latest_migration = task

    async def wait_for_migration(self) -> MigrationResult | None:
        """Await the migration scheduled by the most recent sign-in, if any."""
        task, self._latest_migration = self._latest_migration, None
        if task is None:
            return None
        return await task
