"""
Placeholder image generation.

This module renders solid-colour PNG placeholders labelled with their size and
keeps them in the store as write-once cache entries, one per dimension.

The existence check and the write are not atomic. Two concurrent first requests
for the same dimension may both render and write the placeholder; both write
the same bytes, so the final state is the same either way.
"""

import io
import os
import logging
from typing import Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from imagemaker.assets.models import AssetRef, Dimension
from imagemaker.core.config import get_config_value
from imagemaker.core.constants import (
    DEFAULT_FONT_PATH,
    DEFAULT_FONT_SIZE,
    DEFAULT_PLACEHOLDER_COLOR,
    DEFAULT_TEXT_COLOR,
    PLACEHOLDER_DIRECTORY,
    PLACEHOLDER_FILENAME,
    PLACEHOLDER_FORMAT,
)
from imagemaker.core.error_handler import MissingFontResource
from imagemaker.core.utils import join_path, parse_color
from imagemaker.storage.base import AssetStore

logger = logging.getLogger(__name__)

class PlaceholderGenerator:
    """
    Class for generating and caching placeholder images.
    """

    def __init__(
        self,
        store: AssetStore,
        font_path: Optional[str] = None,
        font_size: int = DEFAULT_FONT_SIZE,
        text_color: Sequence[int] = DEFAULT_TEXT_COLOR
    ):
        """
        Initialize the PlaceholderGenerator.

        Args:
            store: Store the placeholders are kept in.
            font_path: TrueType font used for the label. Defaults to the bundled font.
            font_size: Label font size in points.
            text_color: Label colour as an RGB triple.
        """
        self.store = store
        self.font_path = font_path or DEFAULT_FONT_PATH
        self.font_size = font_size
        self.text_color = parse_color(text_color, field="text_color")
        self._font = None

    def placeholder_path(self, dimension: Union[str, Dimension]) -> str:
        """
        Get the canonical store path of the placeholder for a dimension.

        Args:
            dimension: Placeholder size.

        Returns:
            Store path of the placeholder.
        """
        dimension = Dimension.parse(dimension)
        return join_path(PLACEHOLDER_DIRECTORY, self._filename(dimension))

    def generate(
        self,
        dimension: Union[str, Dimension],
        background_color: Sequence[int] = DEFAULT_PLACEHOLDER_COLOR
    ) -> AssetRef:
        """
        Get the placeholder for a dimension, rendering and storing it on first use.

        The cache key is the dimension alone. A placeholder already stored for a
        dimension is returned unchanged even if a different colour is requested.

        Args:
            dimension: Placeholder size as "WxH" or a Dimension.
            background_color: Fill colour as an RGB triple.

        Returns:
            Reference to the stored placeholder.

        Raises:
            MalformedDimension: If the size is malformed.
            ValidationError: If the colour is not an RGB triple.
            MissingFontResource: If the label font cannot be loaded.
            StorageFailure: If the store fails.
        """
        dimension = Dimension.parse(dimension)
        background_color = parse_color(background_color, field="background_color")
        ref = AssetRef(self.store.disk, PLACEHOLDER_DIRECTORY, self._filename(dimension))

        if self.store.exists(ref.path):
            logger.debug(f"Placeholder {ref.path} already stored")
            return ref

        data = self.render(dimension, background_color)

        if not self.store.exists(PLACEHOLDER_DIRECTORY):
            self.store.make_directory(PLACEHOLDER_DIRECTORY)
        self.store.put(ref.path, data)

        logger.info(f"Generated placeholder {ref.path}")
        return ref

    def render(
        self,
        dimension: Dimension,
        background_color: Tuple[int, int, int] = DEFAULT_PLACEHOLDER_COLOR
    ) -> bytes:
        """
        Render a placeholder image.

        The label is centred horizontally and its baseline sits at
        (height - text_height) / 2 + text_height.

        Args:
            dimension: Placeholder size.
            background_color: Fill colour as an RGB triple.

        Returns:
            PNG-encoded image bytes.

        Raises:
            MissingFontResource: If the label font cannot be loaded.
        """
        font = self._get_font()
        image = Image.new("RGB", dimension.size, tuple(background_color))
        draw = ImageDraw.Draw(image)

        text = str(dimension)
        left, top, right, bottom = font.getbbox(text)
        text_width = right - left
        text_height = bottom - top

        x = (dimension.width - text_width) / 2
        y = (dimension.height - text_height) / 2 + text_height
        draw.text((x, y), text, font=font, fill=self.text_color, anchor="ls")

        output = io.BytesIO()
        image.save(output, format=PLACEHOLDER_FORMAT)
        return output.getvalue()

    def _get_font(self) -> ImageFont.FreeTypeFont:
        """
        Load the label font, once per generator.
        """
        if self._font is not None:
            return self._font

        if not os.path.isfile(self.font_path):
            logger.critical(f"Placeholder font not found at {self.font_path}")
            raise MissingFontResource("Placeholder font file not found", font_path=self.font_path)

        try:
            self._font = ImageFont.truetype(self.font_path, self.font_size)
        except OSError as e:
            logger.critical(f"Placeholder font at {self.font_path} cannot be loaded: {e}")
            raise MissingFontResource(f"Placeholder font cannot be loaded: {e}", font_path=self.font_path) from e

        return self._font

    def _filename(self, dimension: Dimension) -> str:
        return PLACEHOLDER_FILENAME.format(width=dimension.width, height=dimension.height)

    @classmethod
    def from_config(cls, store: AssetStore) -> "PlaceholderGenerator":
        """
        Build a generator using the ``placeholders`` configuration section.

        Args:
            store: Store the placeholders are kept in.

        Returns:
            A configured PlaceholderGenerator.
        """
        return cls(
            store,
            font_path=get_config_value("placeholders.font_path"),
            font_size=get_config_value("placeholders.font_size", DEFAULT_FONT_SIZE),
            text_color=get_config_value("placeholders.text_color", DEFAULT_TEXT_COLOR)
        )
