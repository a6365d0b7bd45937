"""Key-value storage slots holding serialized catalog state."""

from __future__ import annotations

import logging
import re
import uuid
from abc import ABC, abstractmethod
from contextlib import suppress
from pathlib import Path
from typing import Dict, Optional

import aiofiles
import aiofiles.os

from .records import CatalogError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"[A-Za-z0-9_.-]+")


class StorageError(CatalogError):
    """Raised when stored state cannot be read, parsed or written."""


class KeyValueStorage(ABC):
    """String-valued key-value store with an explicit open/close lifecycle."""

    def __init__(self) -> None:
        self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    async def open(self) -> None:
        self._opened = True

    async def close(self) -> None:
        self._opened = False

    async def __aenter__(self) -> "KeyValueStorage":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if not self._opened:
            raise StorageError(f"{type(self).__name__} is not open.")

    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or None when unset."""
        self._ensure_open()
        return await self._read(_check_key(key))

    async def set(self, key: str, value: str) -> None:
        self._ensure_open()
        await self._write(_check_key(key), value)

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def _write(self, key: str, value: str) -> None:
        ...


def _check_key(key: str) -> str:
    if not isinstance(key, str) or not _KEY_RE.fullmatch(key):
        raise StorageError(f"Invalid storage key: {key!r}")
    return key


class MemoryStorage(KeyValueStorage):
    """Process-local storage, lost when the object goes away."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        super().__init__()
        self._values: Dict[str, str] = dict(initial or {})

    async def _read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def _write(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileStorage(KeyValueStorage):
    """Store each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path) -> None:
        super().__init__()
        self.directory = Path(directory)

    async def open(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self.directory}: {exc}") from exc
        await super().open()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.json"

    async def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as handle:
                return await handle.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read storage slot %s", path, exc_info=exc)
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    async def _write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        # Write beside the target and swap in so readers never see a partial slot.
        temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as handle:
                await handle.write(value)
            await aiofiles.os.replace(temp_path, path)
        except OSError as exc:
            logger.error("Failed to write storage slot %s", path, exc_info=exc)
            with suppress(FileNotFoundError):
                await aiofiles.os.remove(temp_path)
            raise StorageError(f"Failed to write {path}: {exc}") from exc
