"""
Module: output.renderer

Purpose:
    Render a raster image as a single full-bleed PDF page using ReportLab.
    The page is sized from the image's pixel dimensions at the given DPI.

Key Functions:
    - render_raster_page(): Image -> one-page PDF bytes

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling

Used By:
    - output.reconstructor: Pages for merged groups
"""

from __future__ import annotations

import io
import logging

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

# 72 DPI maps one pixel to one PDF point
DEFAULT_DPI = 72


def render_raster_page(image: Image.Image, *, dpi: int = DEFAULT_DPI) -> bytes:
    """
    Render an image as a one-page PDF with no margins.

    Args:
        image: Page image
        dpi: Pixels per inch used to size the page (default 72)

    Returns:
        PDF bytes

    Example:
        >>> pdf = render_raster_page(Image.new("RGB", (200, 300)))
        # page is 200 x 300 pt
    """
    width_pt = _px_to_pt(image.width, dpi)
    height_pt = _px_to_pt(image.height, dpi)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(width_pt, height_pt))
    c.drawImage(_pil_to_reader(image), 0, 0, width=width_pt, height=height_pt)
    c.showPage()
    c.save()

    logger.debug(f"Rendered {image.width}x{image.height}px raster as {width_pt:.1f}x{height_pt:.1f}pt page")
    return buf.getvalue()


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    buf.seek(0)
    return ImageReader(buf)


def _px_to_pt(px: int, dpi: int = DEFAULT_DPI) -> float:
    """
    Convert pixels to PDF points.

    PDF points are 1/72 inch.
    """
    return px * 72.0 / dpi
