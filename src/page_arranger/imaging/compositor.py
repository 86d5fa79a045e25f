"""
Module: imaging.compositor

Purpose:
    Creates composite images from 2 or 4 page rasters. A composite lays
    pages out vertically, horizontally or in a 2x2 grid on a white canvas.
    Smaller images are centered in the shared dimension; pixels are never
    stretched, cropped or rescaled.

Key Functions:
    - composite(): Lay out page rasters into one image
    - placements(): Canvas size and paste offsets for given image sizes

Key Classes:
    - CompositeLayout: Canvas size plus per-image offsets
    - CompositeError: Invalid compositor input

Dependencies:
    - PIL.Image: Canvas creation and pasting

Used By:
    - arrange.merge: Builds and caches merged rasters
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import Image

from page_arranger.core.models import MergeMode

Size = Tuple[int, int]
Offset = Tuple[int, int]

DEFAULT_BACKGROUND = "white"


class CompositeError(ValueError):
    """Compositor called with an unsupported mode or image count."""
    pass


@dataclass(frozen=True)
class CompositeLayout:
    """
    Geometry of a composite.

    Attributes:
        size: (width, height) of the canvas
        offsets: Top-left paste position for each input image, in input order

    Example:
        >>> layout = placements(MergeMode.VERTICAL, [(100, 200), (150, 100)])
        >>> layout.size
        (150, 300)
        >>> layout.offsets
        ((25, 0), (0, 200))
    """
    size: Size
    offsets: Tuple[Offset, ...]

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]


def placements(mode: MergeMode, sizes: Sequence[Size]) -> CompositeLayout:
    """
    Compute canvas size and paste offsets for a merge mode.

    Args:
        mode: VERTICAL, HORIZONTAL or GRID
        sizes: (width, height) per input image; 2 for pairs, 4 for grid

    Returns:
        CompositeLayout for the inputs

    Raises:
        CompositeError: If mode is NONE or the size count does not match
    """
    if not mode.is_merge:
        raise CompositeError("Cannot composite with merge mode 'none'")
    if len(sizes) != mode.group_size:
        raise CompositeError(
            f"{mode} composite needs {mode.group_size} images, got {len(sizes)}"
        )

    if mode is MergeMode.VERTICAL:
        (w1, h1), (w2, h2) = sizes
        width = max(w1, w2)
        return CompositeLayout(
            size=(width, h1 + h2),
            offsets=((_center(width, w1), 0), (_center(width, w2), h1)),
        )

    if mode is MergeMode.HORIZONTAL:
        (w1, h1), (w2, h2) = sizes
        height = max(h1, h2)
        return CompositeLayout(
            size=(w1 + w2, height),
            offsets=((0, _center(height, h1)), (w1, _center(height, h2))),
        )

    # Grid: TL, TR, BL, BR
    (w_tl, h_tl), (w_tr, h_tr), (w_bl, h_bl), (w_br, h_br) = sizes
    left_w = max(w_tl, w_bl)
    right_w = max(w_tr, w_br)
    top_h = max(h_tl, h_tr)
    bottom_h = max(h_bl, h_br)
    return CompositeLayout(
        size=(left_w + right_w, top_h + bottom_h),
        offsets=(
            (_center(left_w, w_tl), _center(top_h, h_tl)),
            (left_w + _center(right_w, w_tr), _center(top_h, h_tr)),
            (_center(left_w, w_bl), top_h + _center(bottom_h, h_bl)),
            (left_w + _center(right_w, w_br), top_h + _center(bottom_h, h_br)),
        ),
    )


def composite(
    mode: MergeMode,
    images: Sequence[Image.Image],
    *,
    background: str = DEFAULT_BACKGROUND,
) -> Image.Image:
    """
    Lay out page rasters into a single RGB image.

    Pure function of its inputs: the same images and mode always give
    the same pixels. Inputs in other colour modes are converted to RGB;
    transparent areas are flattened onto the background.

    Args:
        mode: VERTICAL, HORIZONTAL or GRID
        images: 2 images for pairs, 4 for grid (TL, TR, BL, BR)
        background: Fill colour for letterboxed areas. Defaults to white.

    Returns:
        New composite image

    Raises:
        CompositeError: If mode is NONE or the image count does not match

    Example:
        >>> merged = composite(MergeMode.HORIZONTAL, [left, right])
        >>> merged.width == left.width + right.width
        True
    """
    layout = placements(mode, [img.size for img in images])

    canvas = Image.new("RGB", layout.size, background)
    for image, offset in zip(images, layout.offsets):
        rgb, mask = _as_rgb(image)
        canvas.paste(rgb, offset, mask)
    return canvas


def _center(extent: int, size: int) -> int:
    """Offset that centers `size` within `extent` (floor on odd remainders)."""
    return (extent - size) // 2


def _as_rgb(image: Image.Image) -> Tuple[Image.Image, Optional[Image.Image]]:
    """Return (rgb_image, alpha_mask) for pasting; mask is None for opaque images."""
    if image.mode == "RGB":
        return image, None
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        return rgba.convert("RGB"), rgba.getchannel("A")
    return image.convert("RGB"), None
