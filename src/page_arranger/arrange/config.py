"""
Module: arrange.config

Purpose:
    Configuration dataclass for loading, arranging and exporting.
    Immutable configuration with validation on construction.

Key Classes:
    - ArrangeConfig: Main configuration

Dependencies:
    - dataclasses (std)

Used By:
    - arrange.session: Rasterization settings
    - controller: Export settings
    - cli: Built from command-line flags
"""

from __future__ import annotations

from dataclasses import dataclass

SUPPORTED_IMAGE_FORMATS = {"PNG": ".png", "JPEG": ".jpg"}


@dataclass(frozen=True)
class ArrangeConfig:
    """
    Configuration for arranging and exporting documents (immutable).

    Attributes:
        dpi: Resolution pages are rasterized at
        embed_dpi: Resolution used to size merged pages in the output PDF;
            72 maps one composite pixel to one PDF point
        image_format: Pillow format name for exported page images
        images_dir: Folder name for page images inside each document folder
        archive_name: File name of the output archive
        include_readme: Whether to add README.txt to the archive
        max_workers: Threads used to rasterize several documents

    Example:
        >>> config = ArrangeConfig(dpi=200)
        >>> config.image_extension
        '.png'
    """

    # Rasterization
    dpi: int = 144  # 2x scale of PDF points
    max_workers: int = 4

    # Reconstruction
    embed_dpi: int = 72

    # Archive
    image_format: str = "PNG"
    images_dir: str = "images"
    archive_name: str = "all.zip"
    include_readme: bool = True

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")
        if self.embed_dpi <= 0:
            raise ValueError(f"embed_dpi must be positive: {self.embed_dpi}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1: {self.max_workers}")
        if self.image_format.upper() not in SUPPORTED_IMAGE_FORMATS:
            raise ValueError(
                f"image_format must be one of {sorted(SUPPORTED_IMAGE_FORMATS)}: {self.image_format!r}"
            )
        if not self.images_dir or "/" in self.images_dir:
            raise ValueError(f"images_dir must be a single folder name: {self.images_dir!r}")
        if not self.archive_name:
            raise ValueError("archive_name must not be empty")

    @property
    def image_extension(self) -> str:
        """File suffix matching image_format."""
        return SUPPORTED_IMAGE_FORMATS[self.image_format.upper()]
