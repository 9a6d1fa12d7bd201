"""
Filename generation for new assets.

Names are never checked against the store before use. Uniqueness comes from the
token itself: nanosecond wall-clock time, a per-process counter and random bits.
The time prefix keeps names roughly in upload order.
"""

import itertools
import os
import secrets
import time

from imagemaker.core.utils import normalize_extension

class NameGenerator:
    """
    Produces collision-resistant filenames.
    """

    def __init__(self):
        self._counter = itertools.count(int.from_bytes(os.urandom(2), "big"))

    def generate(self, original_extension: str) -> str:
        """
        Generate a filename for a new asset.

        Args:
            original_extension (str): Extension of the client's original filename

        Returns:
            str: ``<token>.<extension>``, or the bare token when the extension is empty
        """
        extension = normalize_extension(original_extension)
        token = self.token()
        return f"{token}.{extension}" if extension else token

    def token(self) -> str:
        """
        Build a time-ordered unique token.

        Returns:
            str: 36 lowercase hex characters
        """
        # next() on itertools.count is atomic under the GIL
        sequence = next(self._counter) & 0xFFFF
        return f"{time.time_ns():016x}{sequence:04x}{secrets.token_hex(8)}"
