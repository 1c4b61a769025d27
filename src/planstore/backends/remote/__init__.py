"""REST remote backend."""

from planstore.backends.remote.client import RemoteProjectClient

__all__ = ["RemoteProjectClient"]
