"""
Namespaced key-value store backed by a directory of compressed JSON files.

Works like browser local storage: every namespace shares one quota, values
are JSON documents, and a full store is recovered by clearing the writer's
own namespace and retrying once.
"""
import hashlib
import json
import zlib
from pathlib import Path
from typing import Any, Optional

from f1pitstop.config import cfg
from f1pitstop.utils.logger import logger


class StorageQuotaExceededError(OSError):
    """Raised when a write would push the store past its quota."""


class LocalStorageManager:
    """
    Compressed JSON key-value store scoped to a namespace.

    Keys are stored as ``<namespace>.<md5(key)>.json.z`` so that different
    namespaces can share one directory without clashing.
    """

    SUFFIX = ".json.z"

    def __init__(
        self,
        namespace: str | None = None,
        root: Path | None = None,
        quota_bytes: int | None = None,
    ) -> None:
        self.ns = namespace or cfg.storage.namespace
        self.root = Path(root or cfg.paths.storage)
        self.quota_bytes = quota_bytes if quota_bytes is not None else cfg.storage.quota_bytes

    def _key(self, key: str) -> str:
        return f"{self.ns}:{key}"

    def _path(self, key: str) -> Path:
        digest = hashlib.md5(self._key(key).encode()).hexdigest()
        return self.root / f"{self.ns}.{digest}{self.SUFFIX}"

    def _namespace_files(self) -> list[Path]:
        if not self.root.exists():
            return []
        return sorted(self.root.glob(f"{self.ns}.*{self.SUFFIX}"))

    def _used_bytes(self, exclude: Optional[Path] = None) -> int:
        if not self.root.exists():
            return 0
        return sum(
            p.stat().st_size
            for p in self.root.glob(f"*{self.SUFFIX}")
            if p.is_file() and p != exclude
        )

    def _write(self, key: str, value: Any) -> None:
        payload = json.dumps({"key": key, "value": value}, default=str).encode()
        compressed = zlib.compress(payload)
        path = self._path(key)
        if self._used_bytes(exclude=path) + len(compressed) > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Storage quota of {self.quota_bytes} bytes exceeded writing '{self._key(key)}'"
            )
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(compressed)

    @staticmethod
    def _decode(raw: bytes) -> dict:
        try:
            raw = zlib.decompress(raw)
        except zlib.error:
            # Plain JSON written by hand or by an older version
            pass
        return json.loads(raw)

    def get(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            document = self._decode(path.read_bytes())
        except (OSError, ValueError) as e:
            logger.warning(f"LocalStorageManager: failed to get '{self._key(key)}': {e}")
            return None
        if isinstance(document, dict) and "value" in document:
            return document["value"]
        return document

    def set(self, key: str, value: Any) -> None:
        try:
            self._write(key, value)
        except StorageQuotaExceededError as err:
            logger.error(f"LocalStorageManager: failed to set '{self._key(key)}': {err}")
            logger.warning("Storage full, clearing old cache...")
            self.clear()
            try:
                self._write(key, value)
            except OSError as retry_err:
                logger.error(f"Retry failed to set '{self._key(key)}' after clearing: {retry_err}")
        except (OSError, TypeError, ValueError) as err:
            logger.error(f"LocalStorageManager: failed to set '{self._key(key)}': {err}")

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"LocalStorageManager: failed to remove '{self._key(key)}': {e}")

    def clear(self) -> None:
        """Remove every key in this namespace, leaving other namespaces alone."""
        for path in self._namespace_files():
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"LocalStorageManager: failed to clear {path.name}: {e}")

    def keys(self) -> list[str]:
        found = []
        for path in self._namespace_files():
            try:
                found.append(self._decode(path.read_bytes())["key"])
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"LocalStorageManager: unreadable entry {path.name}: {e}")
        return found
