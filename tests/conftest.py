"""Shared test fixtures for planstore tests."""

from __future__ import annotations

from typing import Any

import pytest

from planstore.auth.context import IdentityContext
from planstore.backends.remote.client import RemoteProjectClient
from planstore.gateway import PersistenceGateway
from planstore.storage import LocalStore, MemoryKeyValueStore
from tests.fakes.remote import BASE_URL, FakeProjectService


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A small planning document with every container filled in."""
    return {
        "tasks": [
            {"id": "t-1", "name": "Excavate", "startDate": "2026-03-02", "duration": 3, "tradeId": "civil"},
            {"id": "t-2", "name": "Pour footings", "startDate": "2026-03-05", "duration": 2, "dependencies": ["t-1"]},
        ],
        "swimlanes": [{"id": "zone-a", "name": "Zone A", "color": "#4a90e2"}],
        "camera": {"x": 120.5, "y": -40.0, "zoom": 0.75},
        "trades": [{"id": "civil", "name": "Civil", "color": "#e67e22"}],
    }


@pytest.fixture
def service() -> FakeProjectService:
    return FakeProjectService()


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def local_store(kv: MemoryKeyValueStore) -> LocalStore:
    return LocalStore(kv)


@pytest.fixture
def identity() -> IdentityContext:
    return IdentityContext()


@pytest.fixture
def remote(service: FakeProjectService) -> RemoteProjectClient:
    return RemoteProjectClient(BASE_URL, max_retries=0, transport=service.transport())


@pytest.fixture
def gateway(identity: IdentityContext, local_store: LocalStore, remote: RemoteProjectClient) -> PersistenceGateway:
    return PersistenceGateway(identity, local_store, remote)
