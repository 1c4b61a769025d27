"""Remote backend contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any

from planstore.contracts.project import ProjectMetadata, ProjectRecord, ProjectSummary


class RemoteBackend(ABC):
    """Remote persistence service.

    Implementations raise :class:`RecordNotFoundError` for a missing record,
    :class:`PermissionDeniedError` for an ownership refusal and
    :class:`RemoteTransportError` for everything else that went wrong.
    """

    @abstractmethod
    async def __aenter__(self) -> RemoteBackend: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def create(self, user_id: str, document: dict[str, Any], metadata: ProjectMetadata) -> str: ...  # pragma: no cover

    @abstractmethod
    async def import_project(
        self, user_id: str, document: dict[str, Any], metadata: ProjectMetadata, *, original_id: str
    ) -> str: ...  # pragma: no cover

    @abstractmethod
    async def update(
        self, project_id: str, user_id: str, document: dict[str, Any], metadata: ProjectMetadata
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get(self, project_id: str, user_id: str) -> ProjectRecord: ...  # pragma: no cover

    @abstractmethod
    async def delete(self, project_id: str, user_id: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[ProjectSummary]: ...  # pragma: no cover

    @abstractmethod
    async def list_public(self) -> list[ProjectSummary]: ...  # pragma: no cover
