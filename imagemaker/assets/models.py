"""
Data model for image assets.

This module defines the values passed between the pipeline stages:
- Dimension: a positive width/height pair parsed from "WxH"
- UploadRequest: the raw upload handed over by the transport layer
- AssetRef: the (disk, directory, filename) identity of a stored asset
"""

import io
import re
import mimetypes
import posixpath
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence, Union
from urllib.parse import urlparse

import requests

from imagemaker.core.error_handler import MalformedDimension, ValidationError
from imagemaker.core.utils import get_file_extension, join_path, normalize_directory, thumbnail_name

logger = logging.getLogger(__name__)

DIMENSION_PATTERN = re.compile(r"([0-9]+)x([0-9]+)")


@dataclass(frozen=True)
class Dimension:
    """
    A raster size in pixels. Both sides are positive integers.
    """

    width: int
    height: int

    def __post_init__(self):
        for side in (self.width, self.height):
            if not isinstance(side, int) or isinstance(side, bool) or side <= 0:
                raise MalformedDimension(
                    f"Width and height must be positive integers, got {self.width!r}x{self.height!r}",
                    value=(self.width, self.height)
                )

    @classmethod
    def parse(cls, value: Union[str, Sequence[int], "Dimension"]) -> "Dimension":
        """
        Parse a dimension from a "WxH" string, a (width, height) pair or a Dimension.

        Args:
            value: Value to parse.

        Returns:
            Dimension: The parsed dimension.

        Raises:
            MalformedDimension: If the value is not a pair of positive integers.
        """
        if isinstance(value, Dimension):
            return value

        if isinstance(value, str):
            match = DIMENSION_PATTERN.fullmatch(value)
            if not match:
                raise MalformedDimension(f"Expected a size like '300x200', got {value!r}", value=value)
            return cls(int(match.group(1)), int(match.group(2)))

        try:
            width, height = value
        except (TypeError, ValueError):
            raise MalformedDimension(f"Expected a (width, height) pair, got {value!r}", value=value) from None
        return cls(width, height)

    @property
    def size(self):
        return (self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class UploadRequest:
    """
    A raw upload as handed over by the transport layer.

    The stream belongs to the caller until read() consumes it. The MIME type is
    trusted as declared; no content sniffing is done.

    Attributes:
        stream: Upload content, either bytes or a readable binary file object.
        mime_type: MIME type declared by the client.
        extension: Extension of the client's original filename.
        is_valid: Whether the transport received the upload intact.
    """

    stream: Union[bytes, BinaryIO]
    mime_type: Optional[str]
    extension: Optional[str]
    is_valid: bool = True
    _consumed: bool = field(default=False, init=False, repr=False)

    def read(self) -> bytes:
        """
        Read the whole upload.

        Returns:
            bytes: Upload content.

        Raises:
            ValidationError: If the upload has already been read.
        """
        if self._consumed:
            raise ValidationError("Upload stream has already been consumed", field="stream")
        self._consumed = True

        if isinstance(self.stream, (bytes, bytearray)):
            return bytes(self.stream)
        return self.stream.read()

    @classmethod
    def from_path(cls, path: str, mime_type: Optional[str] = None) -> "UploadRequest":
        """
        Build an upload from a local file.

        Args:
            path: Path of the file to upload.
            mime_type: Declared MIME type. Guessed from the filename when omitted.

        Returns:
            UploadRequest: An upload whose stream holds the file content.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path)

        with open(path, "rb") as f:
            data = f.read()

        return cls(stream=data, mime_type=mime_type, extension=get_file_extension(path))

    @classmethod
    def from_url(cls, url: str, timeout: int = 10) -> "UploadRequest":
        """
        Build an upload by downloading a remote image.

        The MIME type comes from the Content-Type header and the extension from the
        URL path. A failed download yields an upload flagged as invalid.

        Args:
            url: http(s) URL of the image.
            timeout: Request timeout in seconds.

        Returns:
            UploadRequest: The downloaded upload.
        """
        extension = get_file_extension(posixpath.basename(urlparse(url).path))

        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to download {url}: {e}")
            return cls(stream=b"", mime_type=None, extension=extension, is_valid=False)

        content_type = response.headers.get("Content-Type", "")
        mime_type = content_type.split(";")[0].strip().lower() or None

        if not extension and mime_type:
            guessed = mimetypes.guess_extension(mime_type)
            extension = guessed.lstrip(".") if guessed else ""

        return cls(stream=io.BytesIO(response.content), mime_type=mime_type, extension=extension)


@dataclass(frozen=True)
class AssetRef:
    """
    Identity of a stored asset.
    """

    disk: str
    directory: str
    filename: str

    @property
    def path(self) -> str:
        return join_path(normalize_directory(self.directory), self.filename)

    @property
    def thumbnail_path(self) -> str:
        return join_path(normalize_directory(self.directory), thumbnail_name(self.filename))
