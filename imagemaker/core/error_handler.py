"""
Error handling module.

This module defines the exceptions raised by the image pipeline and a few helpers
for consistent error reporting.

Caller-input errors (ValidationError and its subclasses) are never worth retrying.
StorageFailure wraps errors from the byte store and is flagged as retryable so that
callers can decide on their own retry policy.
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


class ImageMakerError(Exception):
    """
    Base class for all errors raised by the image pipeline.

    Attributes:
        message: Error message.
        retryable: Whether repeating the same call may succeed.
    """

    retryable = False
    label = "Image Error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return f"{self.label}: {self.message}"


class ValidationError(ImageMakerError):
    """
    Exception raised for invalid caller input.

    Attributes:
        message: Error message.
        field: Field that failed validation.
        value: Value that failed validation.
    """

    label = "Validation Error"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None
    ):
        """
        Initialize the ValidationError.

        Args:
            message: Error message.
            field: Field that failed validation.
            value: Value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)

    def _format_message(self) -> str:
        detailed_message = super()._format_message()
        if self.field:
            detailed_message += f" (Field: {self.field})"
        return detailed_message


class InvalidUpload(ValidationError):
    """
    Exception raised when an upload fails the validity or MIME type check.

    Attributes:
        mime_type: Declared MIME type of the rejected upload.
    """

    label = "Invalid Upload"

    def __init__(self, message: str, mime_type: Optional[str] = None):
        self.mime_type = mime_type
        super().__init__(message, field="mime_type", value=mime_type)


class MalformedDimension(ValidationError):
    """
    Exception raised for a size that is not a pair of positive integers.
    """

    label = "Malformed Dimension"

    def __init__(self, message: str, value: Optional[Any] = None):
        super().__init__(message, field="dimension", value=value)


class DecodeFailure(ImageMakerError):
    """
    Exception raised when stored bytes cannot be decoded as a raster image.

    Attributes:
        path: Storage path of the undecodable asset.
    """

    label = "Decode Failure"

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)

    def _format_message(self) -> str:
        detailed_message = super()._format_message()
        if self.path:
            detailed_message += f" (Path: {self.path})"
        return detailed_message


class MissingFontResource(ImageMakerError):
    """
    Exception raised when the font used for placeholder labels is missing.

    This indicates a broken installation and is never absorbed by the pipeline.

    Attributes:
        font_path: Path where the font was expected.
    """

    label = "Missing Font Resource"

    def __init__(self, message: str, font_path: Optional[str] = None):
        self.font_path = font_path
        super().__init__(message)

    def _format_message(self) -> str:
        detailed_message = super()._format_message()
        if self.font_path:
            detailed_message += f" (Font: {self.font_path})"
        return detailed_message


class StorageFailure(ImageMakerError):
    """
    Exception raised when an operation on the byte store fails.

    Attributes:
        operation: Store operation that failed (put, get, delete, ...).
        path: Path the operation was applied to.
        disk: Name of the disk the store serves.
    """

    label = "Storage Failure"
    retryable = True

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        disk: Optional[str] = None
    ):
        self.operation = operation
        self.path = path
        self.disk = disk
        super().__init__(message)

    def _format_message(self) -> str:
        detailed_message = super()._format_message()
        if self.operation:
            detailed_message += f" (Operation: {self.operation})"
        if self.disk:
            detailed_message += f" (Disk: {self.disk})"
        if self.path:
            detailed_message += f" (Path: {self.path})"
        return detailed_message


class ConfigurationError(ImageMakerError):
    """
    Exception raised for configuration errors.

    Attributes:
        message: Error message.
        component: Component that has a configuration error.
        missing_keys: Keys that are missing from the configuration.
    """

    label = "Configuration Error"

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        missing_keys: Optional[list] = None
    ):
        """
        Initialize the ConfigurationError.

        Args:
            message: Error message.
            component: Component that has a configuration error.
            missing_keys: Keys that are missing from the configuration.
        """
        self.component = component
        self.missing_keys = missing_keys or []
        super().__init__(message)

    def _format_message(self) -> str:
        detailed_message = super()._format_message()
        if self.component:
            detailed_message += f" (Component: {self.component})"
        if self.missing_keys:
            detailed_message += f" (Missing Keys: {', '.join(self.missing_keys)})"
        return detailed_message


def validate_configuration(
    config: Dict[str, Any],
    required_keys: list,
    component: str = "Unknown"
) -> None:
    """
    Validate that required keys are present in the configuration.

    Args:
        config: Configuration to validate.
        required_keys: List of required key names.
        component: Component name for error reporting.

    Raises:
        ConfigurationError: If a required key is missing.
    """
    missing_keys = [key for key in required_keys if key not in config]

    if missing_keys:
        raise ConfigurationError(
            message="Missing required configuration keys",
            component=component,
            missing_keys=missing_keys
        )


def log_error(error: ImageMakerError) -> None:
    """
    Log an image pipeline error with its structured attributes.

    Args:
        error: Error to log.
    """
    logger.error(str(error))

    for attribute in ("field", "value", "mime_type", "path", "font_path", "operation", "disk", "component"):
        value = getattr(error, attribute, None)
        if value is not None:
            logger.error(f"  {attribute}: {value}")

    if error.__cause__ is not None:
        logger.error(f"  cause: {error.__cause__!r}")

    if error.retryable:
        logger.error("  the operation may succeed if retried")
