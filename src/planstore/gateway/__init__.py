"""Persistence gateway: remote-first storage with local fallback."""

from planstore.gateway.gateway import PersistenceGateway
from planstore.gateway.validation import sanitize_metadata, validate_document

__all__ = ["PersistenceGateway", "sanitize_metadata", "validate_document"]
