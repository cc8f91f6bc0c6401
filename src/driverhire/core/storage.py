"""Directory-backed object storage for candidate documents.

Blobs live under ``<storage_dir>/<bucket>/<key>``; keys use forward slashes
(``<user_id>/<millis>.<ext>``) and never escape the bucket directory. The
bucket is never mounted; files are only served by routes that check the viewer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from driverhire.config import Settings, get_settings
from driverhire.errors import StorageError

logger = logging.getLogger(__name__)


class DocumentStorage:
    def __init__(self, settings: Settings | None = None, *, root: Path | None = None):
        self.settings = settings or get_settings()
        self.bucket = self.settings.storage_bucket
        self.root = root or self.settings.bucket_dir

    def _resolve(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise StorageError(f"invalid storage key '{key}'")
        return self.root.joinpath(*relative.parts)

    def upload(self, key: str, content: bytes, *, upsert: bool = False) -> str:
        target = self._resolve(key)
        if target.exists() and not upsert:
            raise StorageError(f"object '{key}' already exists in bucket '{self.bucket}'")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            raise StorageError(f"upload failed for '{key}': {exc}") from exc
        logger.info("Stored object bucket=%s key=%s size_bytes=%d", self.bucket, key, len(content))
        return key

    def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            target = self._resolve(key)
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(f"remove failed for '{key}': {exc}") from exc
            logger.info("Removed object bucket=%s key=%s", self.bucket, key)

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def local_path(self, key: str) -> Path:
        target = self._resolve(key)
        if not target.is_file():
            raise StorageError(f"object '{key}' not found in bucket '{self.bucket}'")
        return target

    def read(self, key: str) -> bytes:
        return self.local_path(key).read_bytes()
