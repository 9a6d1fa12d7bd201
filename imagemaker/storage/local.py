"""
Local disk store.

This module stores assets as plain files below a root directory. Writes go to a
temporary file in the target directory and are moved into place with os.replace,
so a concurrent reader sees either the old content or the new content, never a
partial file. Files get the usual 0666 minus umask permissions rather than the
private mode of the temporary file.
"""

import os
import logging
import tempfile
from typing import BinaryIO

from imagemaker.core.constants import DEFAULT_DISK, DEFAULT_DISK_URL
from imagemaker.core.error_handler import StorageFailure
from imagemaker.storage.base import AssetStore, build_url

logger = logging.getLogger(__name__)

def current_umask() -> int:
    """
    Read the process umask without changing it.
    """
    mask = os.umask(0)
    os.umask(mask)
    return mask

class LocalDiskStore(AssetStore):
    """
    Asset store backed by a directory on the local filesystem.
    """

    def __init__(self, root: str, base_url: str = DEFAULT_DISK_URL, disk: str = DEFAULT_DISK):
        """
        Initialize the LocalDiskStore.

        Args:
            root: Directory that holds the disk's files. Created if missing.
            base_url: Public URL prefix for the disk.
            disk: Name of the disk.
        """
        super().__init__(disk)
        self.root = os.path.abspath(root)
        self.base_url = base_url
        self.file_mode = 0o666 & ~current_umask()

        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as e:
            raise StorageFailure(f"Cannot create disk root: {e}", operation="init", path=self.root, disk=disk) from e

        logger.debug(f"Initialized LocalDiskStore for disk '{disk}' at {self.root}")

    def local_path(self, path: str) -> str:
        """
        Resolve a disk-relative path to an absolute filesystem path.

        Args:
            path: Path relative to the disk.

        Returns:
            Absolute path below the disk root.

        Raises:
            StorageFailure: If the path escapes the disk root.
        """
        full_path = os.path.abspath(os.path.join(self.root, path.lstrip("/")))
        if full_path != self.root and not full_path.startswith(self.root + os.sep):
            raise StorageFailure("Path escapes the disk root", operation="resolve", path=path, disk=self.disk)
        return full_path

    def exists(self, path: str) -> bool:
        return os.path.exists(self.local_path(path))

    def make_directory(self, path: str) -> None:
        full_path = self.local_path(path)
        try:
            os.makedirs(full_path, exist_ok=True)
        except OSError as e:
            raise StorageFailure(str(e), operation="make_directory", path=path, disk=self.disk) from e

    def put(self, path: str, data: bytes) -> None:
        full_path = self.local_path(path)
        directory = os.path.dirname(full_path)

        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".part")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.chmod(temp_path, self.file_mode)
                os.replace(temp_path, full_path)
            except BaseException:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise
        except OSError as e:
            raise StorageFailure(str(e), operation="put", path=path, disk=self.disk) from e

        logger.debug(f"Wrote {len(data)} bytes to {path} on disk '{self.disk}'")

    def get(self, path: str) -> bytes:
        with self.open(path) as f:
            try:
                return f.read()
            except OSError as e:
                raise StorageFailure(str(e), operation="get", path=path, disk=self.disk) from e

    def delete(self, path: str) -> bool:
        full_path = self.local_path(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageFailure(str(e), operation="delete", path=path, disk=self.disk) from e

        logger.debug(f"Deleted {path} on disk '{self.disk}'")
        return True

    def url(self, path: str) -> str:
        return build_url(self.base_url, path)

    def open(self, path: str) -> BinaryIO:
        full_path = self.local_path(path)
        try:
            return open(full_path, "rb")
        except OSError as e:
            raise StorageFailure(str(e), operation="open", path=path, disk=self.disk) from e
