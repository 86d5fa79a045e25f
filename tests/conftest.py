import pytest
import sys
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

import fitz
from PIL import Image

# Add src to sys.path so we can import page_arranger
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from page_arranger.core.models import PageSet  # noqa: E402


# Distinct solid colours, one per test page
PAGE_COLORS = [
    (200, 30, 30),
    (30, 200, 30),
    (30, 30, 200),
    (200, 200, 30),
    (200, 30, 200),
    (30, 200, 200),
    (120, 120, 120),
    (60, 60, 60),
]


def make_pdf(page_sizes: Sequence[Tuple[float, float]]) -> bytes:
    """Build a PDF with one labelled page per size (in points)."""
    doc = fitz.open()
    for number, (width, height) in enumerate(page_sizes, start=1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 40), f"Page {number}", fontsize=18)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    """Return a function building PDFs: pdf_factory(count, size=(200, 300))."""
    def _factory(count: int, size: Tuple[float, float] = (200, 300)) -> bytes:
        return make_pdf([size] * count)
    return _factory


@pytest.fixture
def sample_pdf() -> bytes:
    """Five-page PDF, 200 x 300 pt pages."""
    return make_pdf([(200, 300)] * 5)


@pytest.fixture
def page_images() -> Callable[..., List[Image.Image]]:
    """Return a function creating distinct solid-colour page images."""
    def _factory(count: int, size: Tuple[int, int] = (20, 30)) -> List[Image.Image]:
        return [Image.new("RGB", size, PAGE_COLORS[i % len(PAGE_COLORS)]) for i in range(count)]
    return _factory


@pytest.fixture
def page_set_factory(page_images) -> Callable[[int], PageSet]:
    """Return a function creating a PageSet of n distinct pages."""
    def _factory(count: int) -> PageSet:
        return PageSet.from_rasters(page_images(count))
    return _factory
