"""
ImageMaker - image asset management

A Python package that stores uploaded raster images, derives resized and thumbnail
variants, synthesizes labelled placeholder images when an asset is missing and
retires superseded assets.
"""

__version__ = "0.1.0"

# Import main components for easier access
from imagemaker.assets.models import AssetRef, Dimension, UploadRequest
from imagemaker.assets.validator import UploadValidator
from imagemaker.assets.naming import NameGenerator
from imagemaker.assets.transformer import ImageTransformer
from imagemaker.assets.placeholder import PlaceholderGenerator
from imagemaker.assets.cleanup import AssetCleaner
from imagemaker.pipeline.asset_pipeline import AssetPipeline
from imagemaker.storage import create_store
from imagemaker.storage.base import AssetStore
from imagemaker.storage.local import LocalDiskStore
from imagemaker.storage.memory import InMemoryStore
