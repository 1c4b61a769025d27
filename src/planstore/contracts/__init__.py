"""Public contracts for planstore."""

from planstore.contracts.backup import UNSAVED_PROJECT_ID, BackupRecord, LiveDocument
from planstore.contracts.config import DEV_API_URL, PlanStoreConfig
from planstore.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    ErrorKind,
    MigrationError,
    PermissionDeniedError,
    PlanStoreError,
    QuotaExceededError,
    RecordNotFoundError,
    RecordValidationError,
    RemoteTransportError,
    StorageCorruptionError,
    StorageWriteError,
)
from planstore.contracts.identity import IdentityObserver, SessionIdentity
from planstore.contracts.migration import MigrationEntry, MigrationMap
from planstore.contracts.project import (
    ANONYMOUS_USER_ID,
    DEFAULT_PROJECT_NAME,
    CameraState,
    ProjectDocument,
    ProjectMetadata,
    ProjectRecord,
    ProjectSummary,
    RecordOrigin,
    RecordSource,
    to_summary,
)
from planstore.contracts.results import (
    BackupResult,
    ListResult,
    LoadResult,
    MigrationResult,
    OperationResult,
    RestoreResult,
    SaveResult,
)

__all__ = [
    "ANONYMOUS_USER_ID",
    "DEFAULT_PROJECT_NAME",
    "DEV_API_URL",
    "UNSAVED_PROJECT_ID",
    "AuthenticationError",
    "BackupRecord",
    "BackupResult",
    "CameraState",
    "ConfigError",
    "ErrorKind",
    "IdentityObserver",
    "ListResult",
    "LiveDocument",
    "LoadResult",
    "MigrationEntry",
    "MigrationError",
    "MigrationMap",
    "MigrationResult",
    "OperationResult",
    "PermissionDeniedError",
    "PlanStoreConfig",
    "PlanStoreError",
    "ProjectDocument",
    "ProjectMetadata",
    "ProjectRecord",
    "ProjectSummary",
    "QuotaExceededError",
    "RecordNotFoundError",
    "RecordOrigin",
    "RecordSource",
    "RecordValidationError",
    "RemoteTransportError",
    "RestoreResult",
    "SaveResult",
    "SessionIdentity",
    "StorageCorruptionError",
    "StorageWriteError",
    "to_summary",
]
