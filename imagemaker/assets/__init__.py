"""
Asset lifecycle components.

This module provides the stages the pipeline drives: validation, naming,
transformation, placeholder generation and cleanup.
"""

from imagemaker.assets.models import AssetRef, Dimension, UploadRequest
from imagemaker.assets.validator import UploadValidator
from imagemaker.assets.naming import NameGenerator
from imagemaker.assets.transformer import ImageTransformer
from imagemaker.assets.placeholder import PlaceholderGenerator
from imagemaker.assets.cleanup import AssetCleaner
