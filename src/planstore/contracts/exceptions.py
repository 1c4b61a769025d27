"""Exception hierarchy for planstore.

Internal layers raise these; the gateway, backup engine and migration
coordinator convert them into result objects at their public boundary using
the ``kind`` carried by each class.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    CORRUPTION = "corruption"
    STORAGE = "storage"
    QUOTA = "quota"
    AUTHENTICATION = "authentication"
    CONFIG = "config"
    MIGRATION = "migration"
    UNKNOWN = "unknown"


class PlanStoreError(Exception):
    """Base exception for all planstore errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class ConfigError(PlanStoreError):
    """Configuration loading or validation failure."""

    kind = ErrorKind.CONFIG


class RecordValidationError(PlanStoreError):
    """Payload or metadata failed shape/limit validation.

    Attributes:
        errors: Individual validation messages.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: list[str] | str) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class PermissionDeniedError(PlanStoreError):
    """Caller does not own the record it tried to read, change or delete."""

    kind = ErrorKind.PERMISSION


class RecordNotFoundError(PlanStoreError):
    """Record is absent from the backend that was asked."""

    kind = ErrorKind.NOT_FOUND


class RemoteTransportError(PlanStoreError):
    """Remote service unreachable, timed out, or answered with a failure status."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageCorruptionError(PlanStoreError):
    """A local collection could not be parsed."""

    kind = ErrorKind.CORRUPTION

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key


class StorageWriteError(PlanStoreError):
    """The local store could not write or remove an entry."""

    kind = ErrorKind.STORAGE

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key


class QuotaExceededError(PlanStoreError):
    """A local write would exceed the store's size limit. Nothing was written."""

    kind = ErrorKind.QUOTA

    def __init__(self, message: str, *, key: str, required: int, available: int) -> None:
        super().__init__(message)
        self.key = key
        self.required = required
        self.available = available


class AuthenticationError(PlanStoreError):
    """Operation needs a signed-in identity, or identity resolution failed."""

    kind = ErrorKind.AUTHENTICATION


class MigrationError(PlanStoreError):
    """A single project could not be migrated."""

    kind = ErrorKind.MIGRATION
