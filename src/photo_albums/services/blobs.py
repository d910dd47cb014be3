"""Object-store interface and storage key generation."""

import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Protocol

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\u4e00-\u9fa5.\-]")


class BlobStore(Protocol):
    """Interface for the remote object store holding media blobs."""

    async def put(self, key: str, file_path: str, content_type: str) -> str:
        """Upload a local file under ``key`` and return its public URL."""

    async def delete(self, key: str) -> None:
        """Delete the object under ``key``; a missing object is not an error."""

    async def close(self) -> None:
        """Release network resources."""


def sanitize_file_name(name: str) -> str:
    """Replace characters outside letters, digits, CJK, dot and dash with ``_``."""
    return _UNSAFE_CHARS.sub("_", name)


@dataclass
class MonotonicMillis:
    """Millisecond wall clock that never returns the same value twice."""

    clock: Callable[[], float] = time.time
    _last: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def __call__(self) -> int:
        with self._lock:
            now = int(self.clock() * 1000)
            if now <= self._last:
                now = self._last + 1
            self._last = now
            return now


@dataclass
class StorageKeyBuilder:
    """Builds unique storage file names and their object-store keys."""

    prefix: str = "images/"
    millis: Callable[[], int] = field(default_factory=MonotonicMillis)

    def storage_file_name(self, original_file_name: str, extension: str) -> str:
        """Return ``<millis>-<sanitized stem><extension>``."""
        stem = PurePath(original_file_name).stem or "file"
        return f"{self.millis()}-{sanitize_file_name(stem)}{extension.lower()}"

    def blob_key(self, storage_file_name: str) -> str:
        return f"{self.prefix}{storage_file_name}"
