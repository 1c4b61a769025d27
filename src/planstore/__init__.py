"""Public API surface for planstore."""

__version__ = "1.0.0"

from planstore.auth import IdentityContext, IdentityResolver, create_identity_resolver
from planstore.backends import RemoteBackend, RemoteProjectClient, create_remote_backend
from planstore.backup import BackupEngine, JsonFileDocument
from planstore.config import load_config, resolve_api_url
from planstore.contracts import (
    ANONYMOUS_USER_ID,
    UNSAVED_PROJECT_ID,
    AuthenticationError,
    BackupRecord,
    BackupResult,
    ConfigError,
    ErrorKind,
    ListResult,
    LiveDocument,
    LoadResult,
    MigrationError,
    MigrationResult,
    OperationResult,
    PermissionDeniedError,
    PlanStoreConfig,
    PlanStoreError,
    ProjectMetadata,
    ProjectRecord,
    ProjectSummary,
    QuotaExceededError,
    RecordNotFoundError,
    RecordSource,
    RecordValidationError,
    RemoteTransportError,
    RestoreResult,
    SaveResult,
    SessionIdentity,
    StorageCorruptionError,
    StorageWriteError,
)
from planstore.gateway import PersistenceGateway
from planstore.migration import MigrationCoordinator, MigrationProgress
from planstore.sdk import PlanStore
from planstore.storage import DirectoryKeyValueStore, KeyValueStore, LocalStore, MemoryKeyValueStore

__all__ = [
    "ANONYMOUS_USER_ID",
    "UNSAVED_PROJECT_ID",
    "AuthenticationError",
    "BackupEngine",
    "BackupRecord",
    "BackupResult",
    "ConfigError",
    "DirectoryKeyValueStore",
    "ErrorKind",
    "IdentityContext",
    "IdentityResolver",
    "JsonFileDocument",
    "KeyValueStore",
    "ListResult",
    "LiveDocument",
    "LoadResult",
    "LocalStore",
    "MemoryKeyValueStore",
    "MigrationCoordinator",
    "MigrationError",
    "MigrationProgress",
    "MigrationResult",
    "OperationResult",
    "PermissionDeniedError",
    "PersistenceGateway",
    "PlanStore",
    "PlanStoreConfig",
    "PlanStoreError",
    "ProjectMetadata",
    "ProjectRecord",
    "ProjectSummary",
    "QuotaExceededError",
    "RecordNotFoundError",
    "RecordSource",
    "RecordValidationError",
    "RemoteBackend",
    "RemoteProjectClient",
    "RemoteTransportError",
    "RestoreResult",
    "SaveResult",
    "SessionIdentity",
    "StorageCorruptionError",
    "StorageWriteError",
    "__version__",
    "create_identity_resolver",
    "create_remote_backend",
    "load_config",
    "resolve_api_url",
]
