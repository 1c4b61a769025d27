"""Migration of local-only projects to the remote service."""

from planstore.migration.coordinator import MigrationCoordinator
from planstore.migration.progress import MigrationProgress, NullMigrationProgress

__all__ = ["MigrationCoordinator", "MigrationProgress", "NullMigrationProgress"]
