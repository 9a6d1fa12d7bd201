"""
Base interface for asset stores.

This module defines the byte-store interface the image pipeline runs on. A store
serves exactly one disk; every path handed to it is relative to that disk.

Stores give no transactional or create-if-absent guarantees. Callers rely on
unique filenames rather than on atomic creation.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO


class AssetStore(ABC):
    """
    Base interface for byte stores holding image assets.

    Attributes:
        disk: Name of the disk this store serves.
    """

    def __init__(self, disk: str):
        self.disk = disk

    @abstractmethod
    def exists(self, path: str) -> bool:
        """
        Check whether a file or directory exists.

        Args:
            path (str): Path relative to the disk

        Returns:
            bool: True if something exists at the path
        """
        pass

    @abstractmethod
    def make_directory(self, path: str) -> None:
        """
        Create a directory, including parents. Existing directories are not an error.

        Args:
            path (str): Directory relative to the disk

        Raises:
            StorageFailure: If the directory cannot be created
        """
        pass

    @abstractmethod
    def put(self, path: str, data: bytes) -> None:
        """
        Write bytes to a path, replacing any previous content.

        Args:
            path (str): Path relative to the disk
            data (bytes): Content to write

        Raises:
            StorageFailure: If the write fails
        """
        pass

    @abstractmethod
    def get(self, path: str) -> bytes:
        """
        Read the bytes stored at a path.

        Args:
            path (str): Path relative to the disk

        Returns:
            bytes: Stored content

        Raises:
            StorageFailure: If the path does not exist or cannot be read
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        """
        Delete the file at a path.

        Args:
            path (str): Path relative to the disk

        Returns:
            bool: True if a file was removed, False if nothing was there

        Raises:
            StorageFailure: If an existing file cannot be removed
        """
        pass

    @abstractmethod
    def url(self, path: str) -> str:
        """
        Build the public URL of a path.

        Args:
            path (str): Path relative to the disk

        Returns:
            str: Public URL
        """
        pass

    @abstractmethod
    def open(self, path: str) -> BinaryIO:
        """
        Open a readable binary handle on the content at a path.

        The caller owns the handle and must close it.

        Args:
            path (str): Path relative to the disk

        Returns:
            BinaryIO: Readable binary file object

        Raises:
            StorageFailure: If the path does not exist or cannot be opened
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(disk={self.disk!r})"


def build_url(base_url: str, path: str) -> str:
    """
    Join a public URL prefix and a store path.

    Args:
        base_url (str): URL prefix configured for the disk
        path (str): Path relative to the disk

    Returns:
        str: Public URL
    """
    path = path.lstrip("/")
    if not base_url:
        return path
    return f"{base_url.rstrip('/')}/{path}"
