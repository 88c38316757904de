"""
Object storage for attachments.

Routers and the upload saga depend on the small ObjectStorage interface;
LocalObjectStorage keeps objects on disk under settings.storage_dir and serves
them from settings.storage_base_url.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config import settings

logger = logging.getLogger("service_desk.storage")


class StorageError(Exception):
    """Raised when an object cannot be written or removed."""


@dataclass
class StoredObject:
    key: str
    url: str
    size: int
    content_type: Optional[str] = None


class ObjectStorage:
    async def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        """Remove one object. Returns False when it did not exist."""
        raise NotImplementedError

    def url_for(self, key: str) -> str:
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    def __init__(self, root_dir: str | Path, base_url: str):
        self.root = Path(root_dir).resolve()
        self.base_url = base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        if not key or key.startswith("/"):
            raise StorageError(f"Invalid object key: {key!r}")
        path = (self.root / key).resolve()
        if self.root != path and self.root not in path.parents:
            raise StorageError(f"Object key escapes storage root: {key!r}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        path = self._path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"Failed to store {key}: {e}") from e
        logger.info("Stored object %s (%d bytes)", key, len(data))
        return StoredObject(key=key, url=self.url_for(key), size=len(data), content_type=content_type)

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)

        def _remove() -> bool:
            if not path.is_file():
                return False
            path.unlink()
            return True

        try:
            removed = await asyncio.to_thread(_remove)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e
        if removed:
            logger.info("Deleted object %s", key)
        return removed


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """FastAPI dependency returning the configured object store."""
    global _storage
    if _storage is None:
        _storage = LocalObjectStorage(settings.storage_dir, settings.storage_base_url)
    return _storage
