"""
Tests for imaging.compositor

Test Coverage:
- placements(): canvas size and offsets per mode
- composite(): pixel placement, white letterboxing, determinism
- Input validation
"""

import pytest
from PIL import Image

from page_arranger.core.models import MergeMode
from page_arranger.imaging.compositor import CompositeError, composite, placements

WHITE = (255, 255, 255)
RED = (255, 0, 0)
BLUE = (0, 0, 255)


def solid(size, color):
    return Image.new("RGB", size, color)


class TestPlacements:
    """Geometry without pixels."""

    def test_vertical_when_widths_differ_then_narrower_centered(self):
        layout = placements(MergeMode.VERTICAL, [(100, 200), (150, 100)])

        assert layout.size == (150, 300)
        assert layout.offsets == ((25, 0), (0, 200))

    def test_horizontal_when_heights_differ_then_shorter_centered(self):
        layout = placements(MergeMode.HORIZONTAL, [(200, 100), (100, 150)])

        assert layout.size == (300, 150)
        assert layout.offsets == ((0, 25), (200, 0))

    def test_grid_when_equal_sizes_then_flush_quadrants(self):
        layout = placements(MergeMode.GRID, [(100, 100)] * 4)

        assert layout.size == (200, 200)
        assert layout.offsets == ((0, 0), (100, 0), (0, 100), (100, 100))

    def test_grid_when_mixed_sizes_then_centered_in_cells(self):
        # Left column 100 wide, right column 60; top row 80 high, bottom row 50
        sizes = [(100, 80), (40, 60), (80, 50), (60, 30)]

        layout = placements(MergeMode.GRID, sizes)

        assert layout.size == (160, 130)
        assert layout.offsets == (
            (0, 0),         # TL fills its cell
            (110, 10),      # TR: 100 + (60-40)//2, (80-60)//2
            (10, 80),       # BL: (100-80)//2, 80 + 0
            (100, 90),      # BR: 100 + 0, 80 + (50-30)//2
        )

    def test_odd_remainder_rounds_down(self):
        layout = placements(MergeMode.VERTICAL, [(10, 10), (13, 10)])
        assert layout.offsets[0] == (1, 0)

    def test_none_mode_raises(self):
        with pytest.raises(CompositeError, match="none"):
            placements(MergeMode.NONE, [(1, 1)])

    @pytest.mark.parametrize("mode,count", [
        (MergeMode.VERTICAL, 3),
        (MergeMode.HORIZONTAL, 1),
        (MergeMode.GRID, 2),
    ])
    def test_wrong_image_count_raises(self, mode, count):
        with pytest.raises(CompositeError, match="needs"):
            placements(mode, [(1, 1)] * count)


class TestComposite:
    """Pixel-level tests."""

    def test_vertical_pixels(self):
        a = solid((100, 200), RED)
        b = solid((150, 100), BLUE)

        out = composite(MergeMode.VERTICAL, [a, b])

        assert out.size == (150, 300)
        assert out.mode == "RGB"
        # A at x=25..124, y=0..199; white either side
        assert out.getpixel((24, 0)) == WHITE
        assert out.getpixel((25, 0)) == RED
        assert out.getpixel((124, 199)) == RED
        assert out.getpixel((125, 199)) == WHITE
        # B spans the full width below
        assert out.getpixel((0, 200)) == BLUE
        assert out.getpixel((149, 299)) == BLUE

    def test_horizontal_pixels(self):
        a = solid((200, 100), RED)
        b = solid((150, 150), BLUE)

        out = composite(MergeMode.HORIZONTAL, [a, b])

        assert out.size == (350, 150)
        assert out.getpixel((0, 24)) == WHITE
        assert out.getpixel((0, 25)) == RED
        assert out.getpixel((199, 124)) == RED
        assert out.getpixel((0, 125)) == WHITE
        assert out.getpixel((200, 0)) == BLUE

    def test_grid_pixels(self):
        colors = [RED, BLUE, (0, 255, 0), (0, 0, 0)]
        images = [solid((100, 100), c) for c in colors]

        out = composite(MergeMode.GRID, images)

        assert out.size == (200, 200)
        assert out.getpixel((0, 0)) == RED
        assert out.getpixel((199, 0)) == BLUE
        assert out.getpixel((0, 199)) == (0, 255, 0)
        assert out.getpixel((199, 199)) == (0, 0, 0)

    def test_source_images_not_rescaled(self):
        a = solid((10, 10), RED)
        b = solid((50, 40), BLUE)

        out = composite(MergeMode.VERTICAL, [a, b])

        red_pixels = sum(1 for px in out.getdata() if px == RED)
        assert red_pixels == 100

    def test_grayscale_input_converted(self):
        a = Image.new("L", (10, 10), 0)
        b = solid((10, 10), RED)

        out = composite(MergeMode.HORIZONTAL, [a, b])

        assert out.mode == "RGB"
        assert out.getpixel((0, 0)) == (0, 0, 0)

    def test_transparent_input_flattened_onto_white(self):
        a = Image.new("RGBA", (10, 10), (255, 0, 0, 0))
        b = solid((10, 10), BLUE)

        out = composite(MergeMode.HORIZONTAL, [a, b])

        assert out.getpixel((5, 5)) == WHITE

    def test_same_inputs_give_identical_bytes(self):
        images = [solid((30, 40), RED), solid((20, 50), BLUE)]

        first = composite(MergeMode.VERTICAL, images)
        second = composite(MergeMode.VERTICAL, images)

        assert first.tobytes() == second.tobytes()

    def test_inputs_not_modified(self):
        a = solid((10, 10), RED)
        before = a.tobytes()

        composite(MergeMode.VERTICAL, [a, solid((20, 20), BLUE)])

        assert a.tobytes() == before
