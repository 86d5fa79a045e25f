"""
Module: output

Purpose:
    PDF reconstruction and archive packaging for arranged documents.

Key Functions:
    - build_document(): Rebuild a document's PDF from its arrangement
    - render_raster_page(): Image -> one-page PDF

Key Classes:
    - PdfReconstructor: PyMuPDF page copy + ReportLab page embed
    - ZipPackager: In-memory ZIP archive

Dependencies:
    - fitz (PyMuPDF), reportlab, PIL
"""

from .reconstructor import (
    PageReconstructor,
    PdfReconstructor,
    ReconstructionError,
    build_document,
)
from .renderer import render_raster_page
from .zip_writer import ZipPackager

__all__ = [
    "PageReconstructor",
    "PdfReconstructor",
    "ReconstructionError",
    "build_document",
    "render_raster_page",
    "ZipPackager",
]
