"""Local key-value stores.

The local store is a flat namespace of string values, the way a browser's
``localStorage`` is. Every ``set`` either fully replaces the value of its key
or leaves it untouched; a write that would push the store past its quota
raises :class:`QuotaExceededError` before anything changes. Filesystem
failures surface as :class:`StorageWriteError`, or as a quota error when the
disk itself is full.
"""

from __future__ import annotations

import errno
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote, unquote

from planstore.contracts.exceptions import QuotaExceededError, StorageCorruptionError, StorageWriteError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


def _size(value: str) -> int:
    return len(value.encode("utf-8"))


def _write_error(key: str, value: str, exc: OSError) -> QuotaExceededError | StorageWriteError:
    if exc.errno == errno.ENOSPC:
        return QuotaExceededError(
            f"the disk is full: writing '{key}' needs {_size(value)} bytes; free some space and retry",
            key=key,
            required=_size(value),
            available=0,
        )
    return StorageWriteError(f"could not write local entry '{key}': {exc.strerror or exc}", key=key)


class KeyValueStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> str | None: ...  # pragma: no cover

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def delete(self, key: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]: ...  # pragma: no cover

    @abstractmethod
    async def usage(self) -> int: ...  # pragma: no cover

    def _check_quota(self, key: str, value: str, *, current_total: int, current_size: int, quota: int | None) -> None:
        if quota is None:
            return
        required = current_total - current_size + _size(value)
        if required > quota:
            available = max(0, quota - (current_total - current_size))
            raise QuotaExceededError(
                f"local storage is full: writing '{key}' needs {_size(value)} bytes but only {available} are free; "
                "delete old backups or projects and retry",
                key=key,
                required=required,
                available=available,
            )


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store, used by tests and as a scratch backend."""

    def __init__(self, *, quota_bytes: int | None = None, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._quota = quota_bytes

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        current = self._data.get(key)
        self._check_quota(
            key,
            value,
            current_total=await self.usage(),
            current_size=_size(current) if current is not None else 0,
            quota=self._quota,
        )
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self._data if key.startswith(prefix))

    async def usage(self) -> int:
        return sum(_size(value) for value in self._data.values())


class DirectoryKeyValueStore(KeyValueStore):
    """One file per key under ``root``; writes go through a temp file and ``os.replace``."""

    def __init__(self, root: Path, *, quota_bytes: int | None = None) -> None:
        self._root = root
        self._quota = quota_bytes

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{quote(key, safe='')}{_SUFFIX}"

    async def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageCorruptionError(f"unreadable local entry: {key}", key=key) from exc

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            current_size = path.stat().st_size if path.is_file() else 0
        except OSError as exc:
            raise _write_error(key, value, exc) from exc
        self._check_quota(key, value, current_total=await self.usage(), current_size=current_size, quota=self._quota)

        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".tmp-", suffix=_SUFFIX)
        except OSError as exc:
            raise _write_error(key, value, exc) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise _write_error(key, value, exc) from exc
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote local entry %s (%d bytes)", key, _size(value))

    async def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageWriteError(f"could not remove local entry '{key}': {exc.strerror or exc}", key=key) from exc

    def _entries(self) -> list[Path]:
        if not self._root.is_dir():
            return []
        try:
            return [
                path
                for path in self._root.iterdir()
                if path.is_file() and path.name.endswith(_SUFFIX) and not path.name.startswith(".tmp-")
            ]
        except OSError as exc:
            raise StorageCorruptionError(f"cannot list local store {self._root}: {exc}", key=str(self._root)) from exc

    async def keys(self, prefix: str = "") -> list[str]:
        found = [unquote(path.name[: -len(_SUFFIX)]) for path in self._entries()]
        return sorted(key for key in found if key.startswith(prefix))

    async def usage(self) -> int:
        try:
            return sum(path.stat().st_size for path in self._entries())
        except OSError as exc:
            raise StorageCorruptionError(f"cannot size local store {self._root}: {exc}", key=str(self._root)) from exc
