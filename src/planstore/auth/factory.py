"""Identity resolver factory."""

from __future__ import annotations

from planstore.auth.base import IdentityResolver
from planstore.auth.resolvers.env import EnvIdentityResolver
from planstore.auth.resolvers.static import AnonymousIdentityResolver, StaticIdentityResolver
from planstore.auth.resolvers.stored import StoredIdentityResolver
from planstore.contracts.config import PlanStoreConfig
from planstore.contracts.exceptions import ConfigError
from planstore.storage.local import LocalStore

RESOLVERS: dict[str, type[IdentityResolver]] = {
    "anonymous": AnonymousIdentityResolver,
    "env": EnvIdentityResolver,
    "static": StaticIdentityResolver,
    "stored": StoredIdentityResolver,
}


def create_identity_resolver(config: PlanStoreConfig, store: LocalStore) -> IdentityResolver:
    auth_mode = config.auth
    if auth_mode not in RESOLVERS:
        raise ConfigError(f"Unknown auth mode: {auth_mode}")

    if auth_mode == "env":
        return EnvIdentityResolver()
    if auth_mode == "static":
        return StaticIdentityResolver(user_id=config.user_id or "")
    if auth_mode == "stored":
        return StoredIdentityResolver(store)
    return AnonymousIdentityResolver()
