"""
Asset pipeline module.

This module drives the asset lifecycle: upload, retrieval with placeholder
fallback, placeholder generation and removal.

Upload stages run in a fixed order: validate, write the original, resize, write
the thumbnail, retire the superseded asset. Nothing is rolled back. If a transform
fails, the new original stays in the store and the superseded asset is kept, so
the caller always has at least one usable asset and must treat a failed upload as
"possibly partially applied".
"""

import logging
from typing import Optional, Sequence, Union

from imagemaker.assets.cleanup import AssetCleaner
from imagemaker.assets.models import Dimension, UploadRequest
from imagemaker.assets.naming import NameGenerator
from imagemaker.assets.placeholder import PlaceholderGenerator
from imagemaker.assets.transformer import ImageTransformer
from imagemaker.assets.validator import UploadValidator
from imagemaker.core.config import get_config_value
from imagemaker.core.constants import DEFAULT_FALLBACK_SIZE, DEFAULT_PLACEHOLDER_COLOR
from imagemaker.core.error_handler import ImageMakerError, MalformedDimension, StorageFailure
from imagemaker.core.utils import join_path, normalize_directory, thumbnail_name
from imagemaker.storage import create_store
from imagemaker.storage.base import AssetStore

logger = logging.getLogger(__name__)

DimensionLike = Union[str, Sequence[int], Dimension]

class AssetPipeline:
    """
    Class for running the image asset lifecycle against one store.

    The store, and with it the disk, is fixed at construction and shared by
    every component the pipeline drives.
    """

    def __init__(
        self,
        store: AssetStore,
        validator: Optional[UploadValidator] = None,
        name_generator: Optional[NameGenerator] = None,
        transformer: Optional[ImageTransformer] = None,
        placeholders: Optional[PlaceholderGenerator] = None,
        cleaner: Optional[AssetCleaner] = None
    ):
        """
        Initialize the AssetPipeline.

        Args:
            store: Store all assets are read from and written to.
            validator: Upload validator instance.
            name_generator: Filename generator instance.
            transformer: Image transformer working on the same store.
            placeholders: Placeholder generator working on the same store.
            cleaner: Asset cleaner working on the same store.
        """
        self.store = store
        self.validator = validator or UploadValidator()
        self.name_generator = name_generator or NameGenerator()
        self.transformer = transformer or ImageTransformer(store)
        self.placeholders = placeholders or PlaceholderGenerator(store)
        self.cleaner = cleaner or AssetCleaner(store)

    @classmethod
    def from_config(cls, disk: Optional[str] = None) -> "AssetPipeline":
        """
        Build a pipeline for a configured disk.

        Args:
            disk: Disk name. Defaults to ``storage.default_disk``.

        Returns:
            A pipeline whose components are configured from the configuration file.

        Raises:
            ConfigurationError: If the disk is not configured.
        """
        store = create_store(disk)
        return cls(
            store,
            transformer=ImageTransformer.from_config(store),
            placeholders=PlaceholderGenerator.from_config(store)
        )

    def upload(
        self,
        request: UploadRequest,
        directory: str,
        resize: Optional[DimensionLike] = None,
        thumb: Optional[DimensionLike] = None,
        old: Optional[str] = None
    ) -> str:
        """
        Store an uploaded image and derive its variants.

        Args:
            request: Upload to store.
            directory: Directory to store the image in. Created if missing.
            resize: Size to resize the stored image to, as "WxH".
            thumb: Size of the thumbnail, as "WxH".
            old: Filename of a superseded asset in the same directory to remove
                once the new asset is in place.

        Returns:
            The generated filename.

        Raises:
            InvalidUpload: If the upload is rejected. Nothing has been written.
            MalformedDimension: If a size is malformed. Nothing has been written.
            DecodeFailure: If the upload cannot be decoded for resizing. The
                original has been written.
            StorageFailure: If the store fails.
        """
        self.validator.validate(request)

        resize_dim = Dimension.parse(resize) if resize else None
        thumb_dim = Dimension.parse(thumb) if thumb else None

        directory = normalize_directory(directory)
        if not self.store.exists(directory):
            self.store.make_directory(directory)

        filename = self.name_generator.generate(request.extension)
        path = join_path(directory, filename)

        self.store.put(path, request.read())
        logger.info(f"Stored upload as {path} on disk '{self.store.disk}'")

        try:
            if resize_dim:
                self.transformer.resize(path, resize_dim)

            if thumb_dim:
                self.transformer.thumbnail(path, thumb_dim, join_path(directory, thumbnail_name(filename)))
        except ImageMakerError:
            logger.error(f"Transform of {path} failed; the stored original is left in place")
            raise

        if old:
            self.cleaner.remove(directory, old)

        return filename

    def get(
        self,
        directory: str,
        filename: str,
        size: Optional[DimensionLike] = DEFAULT_FALLBACK_SIZE,
        thumb: bool = False
    ) -> str:
        """
        Get the URL of an asset, falling back to a placeholder.

        A missing asset is not an error: the URL of a placeholder of the
        fallback size is returned instead.

        Args:
            directory: Directory of the asset.
            filename: File name of the asset.
            size: Fallback placeholder size as "WxH".
            thumb: Whether to try the thumbnail when the asset itself is missing.

        Returns:
            URL of the asset, its thumbnail or a placeholder.

        Raises:
            MissingFontResource: If a placeholder is needed and its font is missing.
        """
        path = join_path(directory, filename)
        if self._exists(path):
            return self.store.url(path)

        if thumb:
            thumb_path = join_path(directory, thumbnail_name(filename))
            if self._exists(thumb_path):
                return self.store.url(thumb_path)

        logger.info(f"No asset at {path}, falling back to a placeholder")
        dimension = self._fallback_dimension(size)
        try:
            ref = self.placeholders.generate(dimension, self._background_color())
        except StorageFailure as e:
            logger.warning(f"Could not store placeholder for {dimension}, returning its URL anyway: {e}")
            return self.store.url(self.placeholders.placeholder_path(dimension))
        return self.store.url(ref.path)

    def placeholder(self, width: int, height: int, color: Optional[Sequence[int]] = None) -> str:
        """
        Get the URL of the placeholder for a size.

        Args:
            width: Placeholder width.
            height: Placeholder height.
            color: Fill colour as an RGB triple. Defaults to the configured colour.

        Returns:
            URL of the placeholder.

        Raises:
            MalformedDimension: If width or height is not a positive integer.
            MissingFontResource: If the label font is missing.
        """
        ref = self.placeholders.generate(Dimension(width, height), color or self._background_color())
        return self.store.url(ref.path)

    def remove(self, directory: str, filename: str) -> bool:
        """
        Remove an asset and its thumbnail.

        Args:
            directory: Directory of the asset.
            filename: File name of the asset.

        Returns:
            True if the asset existed and was deleted.
        """
        return self.cleaner.remove(directory, filename)

    def _exists(self, path: str) -> bool:
        try:
            return self.store.exists(path)
        except StorageFailure as e:
            logger.warning(f"Could not check {path}, treating it as missing: {e}")
            return False

    def _fallback_dimension(self, size: Optional[DimensionLike]) -> Dimension:
        default = get_config_value("placeholders.fallback_size", DEFAULT_FALLBACK_SIZE)
        try:
            return Dimension.parse(size or default)
        except MalformedDimension as e:
            logger.warning(f"Ignoring fallback size {size!r}: {e.message}; using {default}")
            return Dimension.parse(default)

    def _background_color(self):
        return get_config_value("placeholders.background_color", DEFAULT_PLACEHOLDER_COLOR)
