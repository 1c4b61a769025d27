"""Live document backed by a JSON file on disk."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from planstore.contracts.exceptions import StorageCorruptionError, StorageWriteError


class JsonFileDocument:
    """A planning document kept as a single JSON file.

    The file holds the payload itself (``tasks``, ``swimlanes``, ``camera``...).
    A missing file reads as no document.
    """

    def __init__(self, path: Path, *, project_id: str | None = None, project_name: str | None = None) -> None:
        self._path = path
        self._project_id = project_id
        self._project_name = project_name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def project_name(self) -> str | None:
        return self._project_name or self._path.stem

    def to_payload(self) -> dict[str, Any] | None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageCorruptionError(f"cannot read document file {self._path}: {exc}", key=str(self._path)) from exc
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageCorruptionError(f"document file is not valid JSON: {self._path}", key=str(self._path)) from exc
        if not isinstance(payload, dict):
            raise StorageCorruptionError(f"document file must hold a JSON object: {self._path}", key=str(self._path))
        return payload

    def work_item_count(self) -> int:
        payload = self.to_payload()
        if payload is None:
            return 0
        tasks = payload.get("tasks")
        return len(tasks) if isinstance(tasks, list) else 0

    def apply_payload(self, payload: dict[str, Any]) -> None:
        """Replace the file atomically.

        Raises:
            StorageWriteError: The file or its directory cannot be written.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        except OSError as exc:
            raise StorageWriteError(f"cannot write document file {self._path}: {exc}", key=str(self._path)) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageWriteError(f"cannot write document file {self._path}: {exc}", key=str(self._path)) from exc
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
