"""Resolver for the identity persisted by the last sign-in."""

from __future__ import annotations

from planstore.auth.base import IdentityResolver
from planstore.contracts.identity import SessionIdentity
from planstore.storage.local import LocalStore


class StoredIdentityResolver(IdentityResolver):
    def __init__(self, store: LocalStore) -> None:
        self._store = store

    async def resolve(self) -> SessionIdentity:
        stored = await self._store.load_identity()
        if stored is None or not stored.authenticated:
            return SessionIdentity.anonymous()
        return stored
