"""
Constants for the ImageMaker package.

This module provides constants used throughout the ImageMaker package.
Values that shape the persisted layout live here rather than in configuration,
since changing them would orphan assets that are already stored.
"""

import os

# Upload validation
ACCEPTED_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")

# Storage layout
THUMBNAIL_PREFIX = "thumb_"
PLACEHOLDER_DIRECTORY = "placeholders"
PLACEHOLDER_FILENAME = "placeholder_{width}x{height}.png"

# Storage defaults
DEFAULT_DISK = "public"
DEFAULT_DISK_ROOT = os.path.join("storage", "app", "public")
DEFAULT_DISK_URL = "/storage"

# Transform output
OUTPUT_FORMAT = "JPEG"
PLACEHOLDER_FORMAT = "PNG"
DEFAULT_JPEG_QUALITY = 90
DEFAULT_RESAMPLE = "lanczos"
FLATTEN_BACKGROUND = (255, 255, 255)

# Placeholder rendering
DEFAULT_PLACEHOLDER_COLOR = (200, 200, 200)
DEFAULT_TEXT_COLOR = (0, 0, 0)
DEFAULT_FONT_SIZE = 12
DEFAULT_FALLBACK_SIZE = "100x100"
FONTS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "assets", "fonts")
DEFAULT_FONT_PATH = os.path.join(FONTS_DIR, "Lato-Regular.ttf")
