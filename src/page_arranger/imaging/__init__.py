"""
Module: imaging

Purpose:
    Raster side of the arranger: PDF page rendering and compositing
    of merged pages.

Key Functions:
    - rasterize(): Render PDF bytes to page images
    - composite(): Lay out 2 or 4 page images into one

Dependencies:
    - fitz (PyMuPDF): Page rendering
    - PIL: Image handling
"""

from .compositor import CompositeError, CompositeLayout, composite, placements
from .raster import DocumentFormatError, RasterizeError, rasterize, validate_pdf

__all__ = [
    "CompositeError",
    "CompositeLayout",
    "composite",
    "placements",
    "DocumentFormatError",
    "RasterizeError",
    "rasterize",
    "validate_pdf",
]
