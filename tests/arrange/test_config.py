"""
Unit tests for ArrangeConfig.
"""

import dataclasses

import pytest

from page_arranger.arrange.config import ArrangeConfig


class TestArrangeConfig:

    def test_defaults_are_valid(self):
        config = ArrangeConfig()

        assert config.dpi == 144
        assert config.embed_dpi == 72
        assert config.archive_name == "all.zip"
        assert config.image_extension == ".png"

    def test_jpeg_extension(self):
        assert ArrangeConfig(image_format="jpeg").image_extension == ".jpg"

    def test_is_frozen(self):
        config = ArrangeConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.dpi = 10

    @pytest.mark.parametrize("kwargs,message", [
        ({"dpi": 0}, "dpi must be positive"),
        ({"embed_dpi": -1}, "embed_dpi must be positive"),
        ({"max_workers": 0}, "max_workers"),
        ({"image_format": "BMP"}, "image_format"),
        ({"images_dir": "a/b"}, "images_dir"),
        ({"images_dir": ""}, "images_dir"),
        ({"archive_name": ""}, "archive_name"),
    ])
    def test_invalid_values_raise(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            ArrangeConfig(**kwargs)
