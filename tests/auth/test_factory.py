from __future__ import annotations

import pytest

from planstore.auth.factory import create_identity_resolver
from planstore.auth.resolvers import (
    AnonymousIdentityResolver,
    EnvIdentityResolver,
    StaticIdentityResolver,
    StoredIdentityResolver,
)
from planstore.contracts import ConfigError, PlanStoreConfig
from planstore.storage import LocalStore, MemoryKeyValueStore


@pytest.fixture
def store() -> LocalStore:
    return LocalStore(MemoryKeyValueStore())


@pytest.mark.parametrize(
    ("auth", "expected"),
    [
        ("anonymous", AnonymousIdentityResolver),
        ("env", EnvIdentityResolver),
        ("stored", StoredIdentityResolver),
    ],
)
def test_factory_creates_resolver_for_mode(store: LocalStore, auth: str, expected: type) -> None:
    resolver = create_identity_resolver(PlanStoreConfig(auth=auth), store)

    assert isinstance(resolver, expected)


def test_factory_passes_static_user_id(store: LocalStore) -> None:
    resolver = create_identity_resolver(PlanStoreConfig(auth="static", user_id="user-9"), store)

    assert resolver == StaticIdentityResolver(user_id="user-9")


def test_factory_raises_for_unknown_auth_mode(store: LocalStore) -> None:
    config = PlanStoreConfig.model_construct(auth="oauth")

    with pytest.raises(ConfigError, match="Unknown auth mode"):
        create_identity_resolver(config, store)
