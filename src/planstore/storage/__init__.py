"""Local persistent store."""

from planstore.storage.kv import DirectoryKeyValueStore, KeyValueStore, MemoryKeyValueStore
from planstore.storage.local import LocalStore, new_project_id

__all__ = [
    "DirectoryKeyValueStore",
    "KeyValueStore",
    "LocalStore",
    "MemoryKeyValueStore",
    "new_project_id",
]
