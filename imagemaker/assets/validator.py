"""
Upload validation.

The validator trusts the MIME type declared by the transport layer and does not
sniff the content. Bytes that lie about their type are caught later, when the
transformer fails to decode them.
"""

import logging
from typing import Iterable, Optional

from imagemaker.assets.models import UploadRequest
from imagemaker.core.constants import ACCEPTED_MIME_TYPES
from imagemaker.core.error_handler import InvalidUpload

logger = logging.getLogger(__name__)

class UploadValidator:
    """
    Validates uploads before anything is written.
    """

    def __init__(self, accepted_mime_types: Optional[Iterable[str]] = None):
        """
        Initialize the validator.

        Args:
            accepted_mime_types (Iterable[str], optional): MIME types to accept.
                Defaults to JPEG, PNG, GIF and WebP.
        """
        self.accepted_mime_types = frozenset(accepted_mime_types or ACCEPTED_MIME_TYPES)

    def validate(self, upload: UploadRequest) -> None:
        """
        Validate an upload.

        Args:
            upload (UploadRequest): Upload to check

        Raises:
            InvalidUpload: If the transport flagged the upload as invalid or its
                MIME type is not accepted
        """
        if not upload.is_valid:
            error_msg = "Upload was not received intact"
            logger.error(error_msg)
            raise InvalidUpload(error_msg, mime_type=upload.mime_type)

        if not self.is_image(upload):
            error_msg = f"Unsupported image type: {upload.mime_type}"
            logger.error(error_msg)
            raise InvalidUpload(error_msg, mime_type=upload.mime_type)

        logger.debug(f"Accepted upload of type {upload.mime_type}")

    def is_image(self, upload: UploadRequest) -> bool:
        """
        Check whether the declared MIME type is an accepted image type.

        Args:
            upload (UploadRequest): Upload to check

        Returns:
            bool: True if the MIME type is accepted
        """
        return upload.mime_type in self.accepted_mime_types
