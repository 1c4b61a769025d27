"""Local backups of the live planning document."""

from planstore.backup.document import JsonFileDocument
from planstore.backup.engine import BackupEngine

__all__ = ["BackupEngine", "JsonFileDocument"]
