"""
Removal of superseded assets.
"""

import logging

from imagemaker.core.error_handler import StorageFailure
from imagemaker.core.utils import join_path, thumbnail_name
from imagemaker.storage.base import AssetStore

logger = logging.getLogger(__name__)

class AssetCleaner:
    """
    Deletes an asset together with its thumbnail.
    """

    def __init__(self, store: AssetStore):
        self.store = store

    def remove(self, directory: str, filename: str) -> bool:
        """
        Remove an asset and, if present, its thumbnail.

        A missing asset is not an error. When two callers retire the same asset
        concurrently, the one that loses the race gets False. Once the asset itself
        is deleted a failure to delete the thumbnail is logged, not raised.

        Args:
            directory (str): Directory of the asset
            filename (str): File name of the asset

        Returns:
            bool: True if the asset was deleted by this call
        """
        path = join_path(directory, filename)

        if not self.store.exists(path):
            logger.info(f"Nothing to remove at {path}")
            return False

        if not self.store.delete(path):
            logger.info(f"{path} was removed by another caller")
            return False

        thumb_path = join_path(directory, thumbnail_name(filename))
        try:
            if self.store.exists(thumb_path) and self.store.delete(thumb_path):
                logger.info(f"Removed {path} and its thumbnail")
                return True
        except StorageFailure as e:
            logger.warning(f"Removed {path} but could not remove its thumbnail: {e}")
            return True

        logger.info(f"Removed {path}")

        return True
