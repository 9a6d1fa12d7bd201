"""
Pipeline orchestration for image assets.
"""

from imagemaker.pipeline.asset_pipeline import AssetPipeline
