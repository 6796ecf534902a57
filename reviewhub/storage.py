"""
Durable key-value storage for the client session.

The session is kept under two independent keys (token and user) that are
always written and removed together. Two backends:
- MemoryStorage: process-local, for tests and ephemeral clients
- JsonFileStorage: a single JSON document on disk, replaced atomically
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union

from loguru import logger

from reviewhub.errors import StorageError


TOKEN_KEY = "token"
USER_KEY = "user"


class SessionStorage(ABC):
    """Async key-value store with multi-key set/remove."""

    @abstractmethod
    async def get_many(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        """Read several keys at once; missing keys map to None."""

    @abstractmethod
    async def set_many(self, items: dict[str, str]) -> None:
        """Write several keys in one step."""

    @abstractmethod
    async def remove_many(self, keys: Iterable[str]) -> None:
        """Remove several keys in one step; missing keys are ignored."""

    async def get(self, key: str) -> Optional[str]:
        return (await self.get_many([key]))[key]


class MemoryStorage(SessionStorage):
    """In-process storage. Survives nothing but the object itself."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get_many(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        return {key: self._data.get(key) for key in keys}

    async def set_many(self, items: dict[str, str]) -> None:
        self._data.update(items)

    async def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the stored values."""
        return dict(self._data)


class JsonFileStorage(SessionStorage):
    """
    Storage backed by one JSON file.

    Every write replaces the whole file through a temporary sibling and
    os.replace, so a crash leaves either the old or the new document.
    The file is created with owner-only permissions.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file storage.

        Args:
            path: Location of the session document
        """
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError("Failed to read session file", detail=str(e)) from e
        if not isinstance(data, dict):
            raise StorageError("Session file is not a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError("Failed to write session file", detail=str(e)) from e

    def _update(self, items: dict[str, str]) -> None:
        try:
            data = self._read()
        except StorageError:
            logger.warning(f"Overwriting unreadable session file {self.path}")
            data = {}
        data.update(items)
        self._write(data)

    def _remove(self, keys: list[str]) -> None:
        try:
            data = self._read()
        except StorageError:
            logger.warning(f"Discarding unreadable session file {self.path}")
            data = {}
        for key in keys:
            data.pop(key, None)
        if data:
            self._write(data)
        elif self.path.exists():
            try:
                self.path.unlink()
            except OSError as e:
                raise StorageError("Failed to remove session file", detail=str(e)) from e

    async def get_many(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        data = await asyncio.to_thread(self._read)
        return {key: data.get(key) for key in keys}

    async def set_many(self, items: dict[str, str]) -> None:
        await asyncio.to_thread(self._update, dict(items))
        logger.debug(f"Saved session keys {sorted(items)} to {self.path}")

    async def remove_many(self, keys: Iterable[str]) -> None:
        await asyncio.to_thread(self._remove, list(keys))
        logger.debug(f"Removed session keys from {self.path}")
