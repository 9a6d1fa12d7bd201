"""
Image transformer module.

This module decodes stored images and writes resized variants using Pillow.

Sizes are applied exactly: a "300x200" request always produces a 300x200 image,
whatever the aspect ratio of the source. Output is always JPEG, so a resized PNG
or GIF is stored as JPEG bytes under its original filename.
"""

import io
import logging
from typing import Union

from PIL import Image

from imagemaker.assets.models import Dimension
from imagemaker.core.constants import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_RESAMPLE,
    FLATTEN_BACKGROUND,
    OUTPUT_FORMAT,
)
from imagemaker.core.config import get_config_value
from imagemaker.core.error_handler import ConfigurationError, DecodeFailure
from imagemaker.storage.base import AssetStore

logger = logging.getLogger(__name__)

# Nearest-neighbour is not offered; it produces visibly degraded thumbnails
RESAMPLE_FILTERS = {
    "bilinear": Image.BILINEAR,
    "bicubic": Image.BICUBIC,
    "lanczos": Image.LANCZOS,
}

class ImageTransformer:
    """
    Class for resizing stored images.

    This class reads source bytes from a store, resamples them and writes
    the JPEG-encoded result back to the same store.
    """

    def __init__(
        self,
        store: AssetStore,
        quality: int = DEFAULT_JPEG_QUALITY,
        resample: str = DEFAULT_RESAMPLE
    ):
        """
        Initialize the ImageTransformer.

        Args:
            store: Store holding the source images and receiving the output.
            quality: JPEG quality (1-95).
            resample: Resampling filter name: bilinear, bicubic or lanczos.

        Raises:
            ConfigurationError: If the resampling filter is not supported.
        """
        if resample not in RESAMPLE_FILTERS:
            raise ConfigurationError(
                f"Unsupported resampling filter '{resample}', expected one of {', '.join(RESAMPLE_FILTERS)}",
                component="images.resample"
            )

        self.store = store
        self.quality = quality
        self.resample = resample

    def resize(self, path: str, dimension: Union[str, Dimension]) -> Dimension:
        """
        Resize a stored image in place.

        Args:
            path: Store path of the image.
            dimension: Target size as "WxH" or a Dimension.

        Returns:
            The size that was written.

        Raises:
            MalformedDimension: If the size is malformed. Raised before anything is read.
            DecodeFailure: If the stored bytes are not a decodable image.
            StorageFailure: If reading or writing the store fails.
        """
        dimension = Dimension.parse(dimension)
        data = self._render(path, dimension)
        self.store.put(path, data)

        logger.info(f"Resized {path} to {dimension}")
        return dimension

    def thumbnail(self, path: str, dimension: Union[str, Dimension], dest_path: str) -> Dimension:
        """
        Write a resized copy of a stored image to another path.

        Args:
            path: Store path of the source image.
            dimension: Target size as "WxH" or a Dimension.
            dest_path: Store path of the thumbnail.

        Returns:
            The size that was written.

        Raises:
            MalformedDimension: If the size is malformed. Raised before anything is read.
            DecodeFailure: If the stored bytes are not a decodable image.
            StorageFailure: If reading or writing the store fails.
        """
        dimension = Dimension.parse(dimension)
        data = self._render(path, dimension)
        self.store.put(dest_path, data)

        logger.info(f"Created {dimension} thumbnail of {path} at {dest_path}")
        return dimension

    def dimensions(self, path: str) -> Dimension:
        """
        Read the pixel size of a stored image.

        Args:
            path: Store path of the image.

        Returns:
            The decoded size.

        Raises:
            DecodeFailure: If the stored bytes are not a decodable image.
        """
        with self.store.open(path) as handle:
            image = self._decode(handle, path)
            return Dimension(image.width, image.height)

    def _render(self, path: str, dimension: Dimension) -> bytes:
        with self.store.open(path) as handle:
            image = self._decode(handle, path)
            image = self._flatten(image)
            resized = image.resize(dimension.size, RESAMPLE_FILTERS[self.resample])

        output = io.BytesIO()
        resized.save(output, format=OUTPUT_FORMAT, quality=self.quality)
        return output.getvalue()

    def _decode(self, handle, path: str) -> Image.Image:
        """
        Decode an image from a binary handle.

        Animated images are reduced to their first frame.
        """
        try:
            image = Image.open(handle)
            image.load()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            logger.error(f"Cannot decode {path}: {e}")
            raise DecodeFailure(f"Stored bytes are not a decodable image: {e}", path=path) from e
        return image

    def _flatten(self, image: Image.Image) -> Image.Image:
        """
        Convert an image to RGB, compositing any transparency onto white.
        """
        has_alpha = image.mode in ("RGBA", "LA", "PA") or (
            image.mode == "P" and "transparency" in image.info
        )
        if not has_alpha:
            return image.convert("RGB")

        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, FLATTEN_BACKGROUND)
        background.paste(rgba, mask=rgba.split()[-1])
        return background

    @classmethod
    def from_config(cls, store: AssetStore) -> "ImageTransformer":
        """
        Build a transformer using the ``images`` configuration section.

        Args:
            store: Store the transformer works on.

        Returns:
            A configured ImageTransformer.
        """
        return cls(
            store,
            quality=get_config_value("images.jpeg_quality", DEFAULT_JPEG_QUALITY),
            resample=get_config_value("images.resample", DEFAULT_RESAMPLE)
        )
