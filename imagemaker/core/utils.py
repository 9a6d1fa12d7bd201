"""
Common utility functions for the ImageMaker package.

This module provides small helpers for building storage paths and
normalising values that arrive from callers.
"""

import os
import re
from typing import Optional, Sequence, Tuple

from imagemaker.core.constants import THUMBNAIL_PREFIX
from imagemaker.core.error_handler import ValidationError

def join_path(directory: str, filename: str) -> str:
    """
    Join a storage directory and a filename into a store-relative path.

    Args:
        directory (str): Directory relative to the disk root (may be empty)
        filename (str): File name

    Returns:
        str: Path using forward slashes, without leading or trailing slashes
    """
    directory = normalize_directory(directory)
    filename = filename.strip("/")
    return f"{directory}/{filename}" if directory else filename

def normalize_directory(directory: Optional[str]) -> str:
    """
    Normalize a directory to forward slashes without surrounding slashes.

    Args:
        directory (str, optional): Directory relative to the disk root

    Returns:
        str: Normalized directory ("" for the disk root)
    """
    if not directory:
        return ""
    return directory.replace("\\", "/").strip("/")

def thumbnail_name(filename: str) -> str:
    """
    Get the name of the thumbnail sibling of a file.

    Args:
        filename (str): File name of the original asset

    Returns:
        str: Thumbnail file name
    """
    return f"{THUMBNAIL_PREFIX}{filename}"

def get_file_extension(file_path: str) -> str:
    """
    Get the file extension from a file path.

    Args:
        file_path (str): File path

    Returns:
        str: File extension without the dot
    """
    return os.path.splitext(file_path)[1][1:]

def normalize_extension(extension: Optional[str]) -> str:
    """
    Lowercase an extension and strip the dot and any non-alphanumeric characters.

    Args:
        extension (str, optional): Extension as reported by the client

    Returns:
        str: Normalized extension, possibly empty
    """
    if not extension:
        return ""
    return re.sub(r"[^a-z0-9]", "", extension.strip().lstrip(".").lower())

def parse_color(value: Sequence[int], field: str = "color") -> Tuple[int, int, int]:
    """
    Validate an RGB triple.

    Args:
        value (Sequence[int]): Three integer channels in the range 0-255
        field (str): Field name for error reporting

    Returns:
        Tuple[int, int, int]: The colour as a tuple

    Raises:
        ValidationError: If the value is not a valid RGB triple
    """
    try:
        channels = tuple(value)
    except TypeError:
        raise ValidationError(f"Colour must be an RGB triple, got {value!r}", field=field, value=value)

    if len(channels) != 3 or not all(
        isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255 for c in channels
    ):
        raise ValidationError(f"Colour must be three integers between 0 and 255, got {value!r}", field=field, value=value)

    return channels
