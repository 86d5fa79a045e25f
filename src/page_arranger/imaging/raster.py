"""
Module: imaging.raster

Purpose:
    PDF validation and page rendering. Turns raw PDF bytes into one
    Pillow image per page, in source order.

Key Functions:
    - validate_pdf(): Reject non-PDF input before any state is created
    - rasterize(): Render every page of a PDF to an RGB image
    - render_page(): Render a single page

Key Classes:
    - DocumentFormatError: Input is not a usable PDF
    - RasterizeError: A page failed to render

Dependencies:
    - fitz (PyMuPDF): PDF parsing and rendering
    - PIL.Image: Image handling

Used By:
    - arrange.session: Rasterizes documents on load
"""

from __future__ import annotations

import logging
from typing import List

import fitz
from PIL import Image

logger = logging.getLogger(__name__)

# 144 DPI is a 2x scale of the 72 DPI PDF coordinate space
DEFAULT_DPI = 144
PDF_MAGIC = b"%PDF-"
# Acrobat tolerates junk before the header within the first KiB
MAGIC_SEARCH_BYTES = 1024


class DocumentFormatError(ValueError):
    """Input is not a PDF or cannot be opened as one."""
    pass


class RasterizeError(RuntimeError):
    """Rendering a page failed."""
    pass


def validate_pdf(data: bytes, name: str = "<bytes>") -> int:
    """
    Check that data is a readable, non-empty PDF.

    Args:
        data: Raw file bytes
        name: File name, used in error messages

    Returns:
        Number of pages in the document

    Raises:
        DocumentFormatError: If data is not a PDF, cannot be parsed,
            is encrypted, or has no pages
    """
    if PDF_MAGIC not in data[:MAGIC_SEARCH_BYTES]:
        raise DocumentFormatError(f"{name} is not a PDF file")

    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            if doc.needs_pass:
                raise DocumentFormatError(f"{name} is password protected")
            page_count = doc.page_count
    except DocumentFormatError:
        raise
    except (RuntimeError, ValueError) as e:
        raise DocumentFormatError(f"{name} could not be opened: {e}") from e

    if page_count == 0:
        raise DocumentFormatError(f"{name} has no pages")
    return page_count


def render_page(page: fitz.Page, dpi: int = DEFAULT_DPI) -> Image.Image:
    """
    Render a full page to an RGB image.

    Args:
        page: PyMuPDF page object.
        dpi: Resolution for rendering. Defaults to 144.

    Returns:
        RGB image of the whole page.

    Example:
        >>> render_page(doc[0], dpi=72).size
        (595, 842)
    """
    matrix = fitz.Matrix(dpi / 72.0, dpi / 72.0)
    pix = page.get_pixmap(matrix=matrix, alpha=False, colorspace=fitz.csRGB)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def rasterize(data: bytes, dpi: int = DEFAULT_DPI, *, name: str = "<bytes>") -> List[Image.Image]:
    """
    Render every page of a PDF, in source order.

    Args:
        data: Raw PDF bytes
        dpi: Resolution for rendering. Defaults to 144.
        name: File name, used in log and error messages

    Returns:
        One RGB image per page

    Raises:
        DocumentFormatError: If data is not a usable PDF
        RasterizeError: If a page fails to render
    """
    validate_pdf(data, name)

    images: List[Image.Image] = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page_idx in range(doc.page_count):
            try:
                images.append(render_page(doc[page_idx], dpi))
            except (RuntimeError, ValueError) as e:
                raise RasterizeError(f"Failed to render page {page_idx + 1} of {name}: {e}") from e

    logger.debug(f"Rasterized {len(images)} pages of {name} at {dpi} DPI")
    return images
