"""Progress reporting protocol for migration runs.

The coordinator emits phase lifecycle events; consumers (e.g. the CLI's Rich
progress bar) implement ``MigrationProgress`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

UPLOAD_PHASE = "Upload"
RECONCILE_PHASE = "Reconcile"


class MigrationProgress(ABC):
    """Observer interface for migration progress events."""

    @abstractmethod
    def phase_start(self, phase: str, total: int) -> None:
        """A phase covering *total* items is starting."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str, *, failed: bool = False) -> None:
        """One item within *phase* has been handled."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str) -> None: ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The *phase* was aborted by *error*."""
        ...  # pragma: no cover


class NullMigrationProgress(MigrationProgress):
    """No-op implementation used when no progress display is requested."""

    def phase_start(self, phase: str, total: int) -> None:
        pass

    def item_done(self, phase: str, *, failed: bool = False) -> None:
        pass

    def phase_done(self, phase: str) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass
