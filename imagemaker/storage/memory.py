"""
In-memory store.

Keeps assets in a dictionary. Used by the test-suite and by the ``memory``
driver for throwaway disks.
"""

import io
import threading
from typing import BinaryIO, Dict, Set

from imagemaker.core.constants import DEFAULT_DISK_URL
from imagemaker.core.error_handler import StorageFailure
from imagemaker.core.utils import normalize_directory
from imagemaker.storage.base import AssetStore, build_url

class InMemoryStore(AssetStore):
    """
    Asset store that keeps every file in process memory.
    """

    def __init__(self, base_url: str = DEFAULT_DISK_URL, disk: str = "memory"):
        super().__init__(disk)
        self.base_url = base_url
        self.files: Dict[str, bytes] = {}
        self.directories: Set[str] = set()
        self._lock = threading.Lock()

    def exists(self, path: str) -> bool:
        path = normalize_directory(path)
        with self._lock:
            return path in self.files or path in self.directories

    def make_directory(self, path: str) -> None:
        path = normalize_directory(path)
        with self._lock:
            self._add_parents(path)

    def put(self, path: str, data: bytes) -> None:
        path = normalize_directory(path)
        with self._lock:
            if path in self.directories:
                raise StorageFailure("Path is a directory", operation="put", path=path, disk=self.disk)
            self._add_parents(path.rpartition("/")[0])
            self.files[path] = bytes(data)

    def get(self, path: str) -> bytes:
        path = normalize_directory(path)
        with self._lock:
            try:
                return self.files[path]
            except KeyError:
                raise StorageFailure("File not found", operation="get", path=path, disk=self.disk) from None

    def delete(self, path: str) -> bool:
        path = normalize_directory(path)
        with self._lock:
            return self.files.pop(path, None) is not None

    def url(self, path: str) -> str:
        return build_url(self.base_url, path)

    def open(self, path: str) -> BinaryIO:
        return io.BytesIO(self.get(path))

    def _add_parents(self, directory: str) -> None:
        parts = [part for part in directory.split("/") if part]
        for i in range(1, len(parts) + 1):
            self.directories.add("/".join(parts[:i]))
