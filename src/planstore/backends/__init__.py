"""Remote persistence backends."""

from planstore.backends.base import RemoteBackend
from planstore.backends.factory import create_remote_backend
from planstore.backends.remote import RemoteProjectClient

__all__ = ["RemoteBackend", "RemoteProjectClient", "create_remote_backend"]
