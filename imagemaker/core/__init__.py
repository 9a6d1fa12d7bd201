"""
Core utilities and configuration for the ImageMaker package.
"""

from imagemaker.core.config import get_config, get_config_value, set_config_value
from imagemaker.core.logging_config import get_logger, configure_logging
from imagemaker.core.utils import join_path, thumbnail_name
from imagemaker.core.error_handler import (
    ImageMakerError,
    ValidationError,
    InvalidUpload,
    MalformedDimension,
    DecodeFailure,
    MissingFontResource,
    StorageFailure,
    ConfigurationError,
)
