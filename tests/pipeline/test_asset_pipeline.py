"""
Tests for the asset pipeline.
"""

import io
import os
import re
import tempfile
import pytest
from unittest.mock import MagicMock, patch
from PIL import Image

from imagemaker.assets.models import UploadRequest
from imagemaker.assets.placeholder import PlaceholderGenerator
from imagemaker.core.config import reset_config
from imagemaker.core.error_handler import (
    DecodeFailure,
    InvalidUpload,
    MalformedDimension,
    MissingFontResource,
    StorageFailure,
)
from imagemaker.pipeline.asset_pipeline import AssetPipeline
from imagemaker.storage.local import LocalDiskStore
from imagemaker.storage.memory import InMemoryStore

def make_image_bytes(size=(1024, 768), fmt="JPEG"):
    output = io.BytesIO()
    Image.new("RGB", size, (40, 90, 160)).save(output, format=fmt)
    return output.getvalue()

def decode(data):
    image = Image.open(io.BytesIO(data))
    image.load()
    return image

class TestAssetPipeline:
    """
    Tests for the AssetPipeline class.
    """
    
    def setup_method(self):
        """
        Set up a pipeline on an in-memory store with the default configuration.
        """
        self.temp_dir = tempfile.TemporaryDirectory()
        self.env_patch = patch.dict(os.environ, {
            "IMAGEMAKER_CONFIG": os.path.join(self.temp_dir.name, "missing.json")
        })
        self.env_patch.start()
        reset_config()
        
        self.store = InMemoryStore(base_url="/storage", disk="public")
        self.pipeline = AssetPipeline(self.store)
    
    def teardown_method(self):
        self.env_patch.stop()
        reset_config()
        self.temp_dir.cleanup()
    
    def files_in(self, directory):
        prefix = directory + "/"
        return sorted(path[len(prefix):] for path in self.store.files if path.startswith(prefix))
    
    def test_upload_stores_original(self):
        """
        Test that an upload is stored under a generated name.
        """
        data = make_image_bytes()
        request = UploadRequest(stream=io.BytesIO(data), mime_type="image/jpeg", extension="JPG")
        
        filename = self.pipeline.upload(request, "images")
        
        assert re.fullmatch(r"[0-9a-f]{36}\.jpg", filename)
        assert self.files_in("images") == [filename]
        assert self.store.get(f"images/{filename}") == data
    
    def test_upload_with_resize_and_thumbnail(self):
        """
        Test the full upload: resize in place plus a thumbnail.
        """
        request = UploadRequest(stream=make_image_bytes((1024, 768)), mime_type="image/jpeg", extension="jpg")
        
        filename = self.pipeline.upload(request, "images", resize="300x200", thumb="50x50")
        
        assert decode(self.store.get(f"images/{filename}")).size == (300, 200)
        assert decode(self.store.get(f"images/thumb_{filename}")).size == (50, 50)
        assert self.files_in("images") == sorted([filename, f"thumb_{filename}"])
    
    def test_thumbnail_is_derived_from_resized_image(self):
        request = UploadRequest(stream=make_image_bytes((400, 400)), mime_type="image/png", extension="png")
        
        filename = self.pipeline.upload(request, "images", resize="100x50", thumb="20x20")
        
        assert filename.endswith(".png")
        assert decode(self.store.get(f"images/{filename}")).format == "JPEG"
        assert decode(self.store.get(f"images/thumb_{filename}")).size == (20, 20)
    
    def test_upload_creates_nested_directory(self):
        request = UploadRequest(stream=make_image_bytes((10, 10)), mime_type="image/jpeg", extension="jpg")
        
        filename = self.pipeline.upload(request, "/users/42/avatars/")
        
        assert self.store.exists("users/42/avatars")
        assert self.store.exists(f"users/42/avatars/{filename}")
    
    def test_upload_replaces_old_asset(self):
        """
        Test that the superseded asset and its thumbnail are removed.
        """
        self.store.put("images/old.jpg", b"old")
        self.store.put("images/thumb_old.jpg", b"old thumb")
        request = UploadRequest(stream=make_image_bytes((64, 64)), mime_type="image/jpeg", extension="jpg")
        
        filename = self.pipeline.upload(request, "images", thumb="8x8", old="old.jpg")
        
        assert self.files_in("images") == sorted([filename, f"thumb_{filename}"])
    
    def test_upload_with_missing_old_asset(self):
        request = UploadRequest(stream=make_image_bytes((10, 10)), mime_type="image/jpeg", extension="jpg")
        
        filename = self.pipeline.upload(request, "images", old="never-existed.jpg")
        
        assert self.files_in("images") == [filename]
    
    def test_unique_names_for_identical_uploads(self):
        data = make_image_bytes((10, 10))
        names = {
            self.pipeline.upload(UploadRequest(stream=data, mime_type="image/jpeg", extension="jpg"), "images")
            for _ in range(20)
        }
        
        assert len(names) == 20
    
    @pytest.mark.parametrize("mime_type,is_valid", [
        ("application/pdf", True),
        ("image/svg+xml", True),
        (None, True),
        ("image/jpeg", False),
    ])
    def test_invalid_upload_writes_nothing(self, mime_type, is_valid):
        """
        Test that a rejected upload leaves the store untouched.
        """
        request = UploadRequest(stream=b"%PDF-1.4", mime_type=mime_type, extension="pdf", is_valid=is_valid)
        
        with pytest.raises(InvalidUpload):
            self.pipeline.upload(request, "images", resize="10x10", old="keep.jpg")
        
        assert not self.store.files
        assert not self.store.directories
    
    def test_invalid_upload_keeps_old_asset(self):
        self.store.put("images/keep.jpg", b"keep")
        request = UploadRequest(stream=b"", mime_type="text/plain", extension="txt")
        
        with pytest.raises(InvalidUpload):
            self.pipeline.upload(request, "images", old="keep.jpg")
        
        assert self.files_in("images") == ["keep.jpg"]
    
    @pytest.mark.parametrize("resize,thumb", [
        ("0x10", None),
        ("abc", None),
        (None, "10x-5"),
        ("10x10", "x"),
    ])
    def test_malformed_dimension_writes_nothing(self, resize, thumb):
        """
        Test that a malformed size is rejected before any write.
        """
        request = UploadRequest(stream=make_image_bytes((10, 10)), mime_type="image/jpeg", extension="jpg")
        
        with pytest.raises(MalformedDimension):
            self.pipeline.upload(request, "images", resize=resize, thumb=thumb)
        
        assert not self.store.files
        assert not self.store.directories
    
    def test_transform_failure_keeps_original_and_old_asset(self):
        """
        Test that a decode failure leaves the original and the superseded asset in place.
        """
        self.store.put("images/old.jpg", b"old")
        request = UploadRequest(stream=b"not really a jpeg", mime_type="image/jpeg", extension="jpg")
        
        with pytest.raises(DecodeFailure):
            self.pipeline.upload(request, "images", resize="10x10", thumb="5x5", old="old.jpg")
        
        names = self.files_in("images")
        assert "old.jpg" in names
        assert len(names) == 2
        new_name = next(name for name in names if name != "old.jpg")
        assert self.store.get(f"images/{new_name}") == b"not really a jpeg"
        assert not any(name.startswith("thumb_") for name in names)
    
    def test_get_existing_asset(self):
        self.store.put("images/a.jpg", b"a")
        
        assert self.pipeline.get("images", "a.jpg") == "/storage/images/a.jpg"
        assert not self.store.exists("placeholders")
    
    def test_get_missing_asset_returns_placeholder(self):
        """
        Test that a missing asset falls back to a placeholder of the requested size.
        """
        url = self.pipeline.get("images", "missing.jpg", size="64x64")
        
        assert url == "/storage/placeholders/placeholder_64x64.png"
        assert decode(self.store.get("placeholders/placeholder_64x64.png")).size == (64, 64)
    
    def test_get_default_fallback_size(self):
        url = self.pipeline.get("images", "missing.jpg")
        
        assert url == "/storage/placeholders/placeholder_100x100.png"
    
    def test_get_prefers_thumbnail_when_asked(self):
        self.store.put("images/thumb_a.jpg", b"t")
        
        assert self.pipeline.get("images", "a.jpg", thumb=True) == "/storage/images/thumb_a.jpg"
        assert self.pipeline.get("images", "a.jpg").endswith("placeholder_100x100.png")
    
    def test_get_prefers_asset_over_thumbnail(self):
        self.store.put("images/a.jpg", b"a")
        self.store.put("images/thumb_a.jpg", b"t")
        
        assert self.pipeline.get("images", "a.jpg", thumb=True) == "/storage/images/a.jpg"
    
    def test_get_malformed_fallback_uses_default(self):
        url = self.pipeline.get("images", "missing.jpg", size="huge")
        
        assert url == "/storage/placeholders/placeholder_100x100.png"
    
    def test_get_treats_storage_failure_as_missing(self):
        """
        Test that an unreadable store still yields a placeholder URL.
        """
        original_exists = self.store.exists
        
        def flaky_exists(path):
            if path.startswith("images/"):
                raise StorageFailure("Disk unavailable", operation="exists", path=path, disk="public")
            return original_exists(path)
        
        with patch.object(self.store, "exists", side_effect=flaky_exists):
            url = self.pipeline.get("images", "a.jpg", size="32x32", thumb=True)
        
        assert url == "/storage/placeholders/placeholder_32x32.png"
    
    def test_get_when_placeholder_cannot_be_stored(self):
        """
        Test that a failing placeholder write still yields the placeholder URL.
        """
        failure = StorageFailure("disk full", operation="put", path="placeholders/placeholder_64x64.png", disk="public")
        
        with patch.object(self.store, "put", side_effect=failure):
            url = self.pipeline.get("images", "missing.png", "64x64")
        
        assert url == "/storage/placeholders/placeholder_64x64.png"
        assert not self.store.exists("placeholders/placeholder_64x64.png")
    
    def test_get_when_placeholder_directory_cannot_be_created(self):
        failure = StorageFailure("read-only", operation="make_directory", path="placeholders", disk="public")
        
        with patch.object(self.store, "make_directory", side_effect=failure):
            url = self.pipeline.get("images", "missing.png")
        
        assert url == "/storage/placeholders/placeholder_100x100.png"
    
    def test_get_reuses_placeholder(self):
        first = self.pipeline.get("images", "a.jpg", size="64x64")
        stored = self.store.get("placeholders/placeholder_64x64.png")
        
        second = self.pipeline.get("other", "b.jpg", size="64x64")
        
        assert first == second
        assert self.store.get("placeholders/placeholder_64x64.png") == stored
    
    def test_get_with_missing_font(self):
        """
        Test that a missing font is the one failure get() does not absorb.
        """
        pipeline = AssetPipeline(
            self.store,
            placeholders=PlaceholderGenerator(self.store, font_path="/nonexistent/font.ttf")
        )
        
        with pytest.raises(MissingFontResource):
            pipeline.get("images", "missing.jpg")
    
    def test_placeholder(self):
        assert self.pipeline.placeholder(120, 80) == "/storage/placeholders/placeholder_120x80.png"
        
        image = decode(self.store.get("placeholders/placeholder_120x80.png")).convert("RGB")
        assert image.getpixel((0, 0)) == (200, 200, 200)
    
    def test_placeholder_with_color(self):
        self.pipeline.placeholder(30, 30, (255, 0, 0))
        
        image = decode(self.store.get("placeholders/placeholder_30x30.png")).convert("RGB")
        assert image.getpixel((0, 0)) == (255, 0, 0)
    
    def test_placeholder_rejects_bad_size(self):
        with pytest.raises(MalformedDimension):
            self.pipeline.placeholder(0, 10)
    
    def test_remove(self):
        self.store.put("images/a.jpg", b"a")
        self.store.put("images/thumb_a.jpg", b"t")
        
        assert self.pipeline.remove("images", "a.jpg") is True
        assert self.pipeline.remove("images", "a.jpg") is False
        assert self.files_in("images") == []
    
    def test_components_share_the_store(self):
        assert self.pipeline.transformer.store is self.store
        assert self.pipeline.placeholders.store is self.store
        assert self.pipeline.cleaner.store is self.store
    
    def test_injected_components_are_used(self):
        name_generator = MagicMock()
        name_generator.generate.return_value = "fixed.jpg"
        pipeline = AssetPipeline(self.store, name_generator=name_generator)
        
        filename = pipeline.upload(
            UploadRequest(stream=b"x", mime_type="image/jpeg", extension="jpg"), "images"
        )
        
        assert filename == "fixed.jpg"
        name_generator.generate.assert_called_once_with("jpg")
    
    def test_from_config_memory_disk(self):
        pipeline = AssetPipeline.from_config("memory")
        
        assert isinstance(pipeline.store, InMemoryStore)
        assert pipeline.store.disk == "memory"
        assert pipeline.transformer.resample == "lanczos"
        assert pipeline.placeholders.font_size == 12

class TestAssetPipelineOnDisk:
    """
    Tests for the AssetPipeline class on a local disk.
    """
    
    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.store = LocalDiskStore(self.temp_dir.name, base_url="/storage", disk="public")
        self.pipeline = AssetPipeline(self.store)
    
    def teardown_method(self):
        self.temp_dir.cleanup()
    
    def test_upload_get_remove(self):
        """
        Test the asset lifecycle against the filesystem.
        """
        request = UploadRequest(stream=make_image_bytes((120, 90)), mime_type="image/jpeg", extension="jpg")
        
        filename = self.pipeline.upload(request, "images", resize="60x45", thumb="12x12")
        
        local_path = os.path.join(self.temp_dir.name, "images", filename)
        with Image.open(local_path) as image:
            assert image.size == (60, 45)
        assert os.path.exists(os.path.join(self.temp_dir.name, "images", f"thumb_{filename}"))
        assert self.pipeline.get("images", filename) == f"/storage/images/{filename}"
        
        assert self.pipeline.remove("images", filename) is True
        assert os.listdir(os.path.join(self.temp_dir.name, "images")) == []
        assert self.pipeline.get("images", filename, size="20x10") == "/storage/placeholders/placeholder_20x10.png"
        assert os.path.exists(os.path.join(self.temp_dir.name, "placeholders", "placeholder_20x10.png"))
