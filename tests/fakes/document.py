"""In-memory live document fake."""

from __future__ import annotations

import copy
from typing import Any


class FakeDocument:
    def __init__(
        self,
        payload: dict[str, Any] | None = None,
        *,
        project_id: str | None = None,
        project_name: str | None = None,
    ) -> None:
        self.payload = payload
        self.applied: list[dict[str, Any]] = []
        self._project_id = project_id
        self._project_name = project_name

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def project_name(self) -> str | None:
        return self._project_name

    def work_item_count(self) -> int:
        if not self.payload:
            return 0
        return len(self.payload.get("tasks", []))

    def to_payload(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.payload)

    def apply_payload(self, payload: dict[str, Any]) -> None:
        self.applied.append(payload)
        self.payload = copy.deepcopy(payload)
