"""
Module: output.reconstructor

Purpose:
    Rebuild a PDF from an arranged page set. Unmerged pages are copied
    from the source document with their original content; each merge
    group becomes one new page holding its composite, full-bleed. Output
    page order is exactly the export plan order.

Key Functions:
    - build_document(): Arranged Document -> PDF bytes

Key Classes:
    - PageReconstructor: Abstract page-copy / page-embed / assemble interface
    - PdfReconstructor: PyMuPDF + ReportLab implementation
    - CopiedPage / EmbeddedPage: Page references passed to assemble()
    - ReconstructionError: Assembly failure

Dependencies:
    - fitz (PyMuPDF): Page copying and assembly
    - output.renderer: ReportLab page for composites
    - arrange.planner: Traversal order

Used By:
    - controller: Per-document export
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

import fitz
from PIL import Image

from page_arranger.arrange.planner import ExportUnit, plan_export
from page_arranger.core.models import Document

from .renderer import DEFAULT_DPI, render_raster_page

logger = logging.getLogger(__name__)


class ReconstructionError(RuntimeError):
    """Building the output PDF failed."""
    pass


@dataclass(frozen=True)
class CopiedPage:
    """Reference to a source page copied verbatim."""
    source: Document = field(repr=False)
    original_index: int


@dataclass(frozen=True)
class EmbeddedPage:
    """A new page rendered from a raster, as one-page PDF bytes."""
    pdf: bytes = field(repr=False)
    size_px: tuple


PageRef = Union[CopiedPage, EmbeddedPage]


class PageReconstructor(ABC):
    """
    Abstract interface for producing a paginated output file.

    Implementations decide how pages are copied, embedded and written.
    """

    @abstractmethod
    def copy_page(self, source: Document, original_index: int) -> PageRef:
        """
        Reference a page of the source document for verbatim copying.

        Raises:
            ReconstructionError: If the index is not a page of source
        """

    @abstractmethod
    def embed_raster_as_page(self, raster: Image.Image) -> PageRef:
        """Create a new page showing raster full-bleed."""

    @abstractmethod
    def assemble(self, pages: Sequence[PageRef]) -> bytes:
        """
        Write pages, in order, into a new document.

        Raises:
            ReconstructionError: If the document cannot be written
        """


class PdfReconstructor(PageReconstructor):
    """
    PDF reconstructor backed by PyMuPDF.

    Copied pages keep their original content stream via insert_pdf;
    embedded pages are rendered with ReportLab and spliced in the same way.

    Example:
        >>> reconstructor = PdfReconstructor(embed_dpi=72)
        >>> pages = [reconstructor.copy_page(doc, 2), reconstructor.embed_raster_as_page(img)]
        >>> pdf_bytes = reconstructor.assemble(pages)
    """

    def __init__(self, *, embed_dpi: int = DEFAULT_DPI) -> None:
        self._embed_dpi = embed_dpi

    def copy_page(self, source: Document, original_index: int) -> PageRef:
        if not 0 <= original_index < source.page_count:
            raise ReconstructionError(
                f"Page {original_index + 1} does not exist in {source.name}"
            )
        return CopiedPage(source=source, original_index=original_index)

    def embed_raster_as_page(self, raster: Image.Image) -> PageRef:
        try:
            pdf = render_raster_page(raster, dpi=self._embed_dpi)
        except (OSError, ValueError) as e:
            raise ReconstructionError(f"Failed to render merged page: {e}") from e
        return EmbeddedPage(pdf=pdf, size_px=raster.size)

    def assemble(self, pages: Sequence[PageRef]) -> bytes:
        sources: Dict[str, fitz.Document] = {}
        out = fitz.open()
        try:
            for page in pages:
                if isinstance(page, CopiedPage):
                    src = sources.get(page.source.doc_id)
                    if src is None:
                        src = fitz.open(stream=page.source.data, filetype="pdf")
                        sources[page.source.doc_id] = src
                    out.insert_pdf(src, from_page=page.original_index, to_page=page.original_index)
                else:
                    with fitz.open(stream=page.pdf, filetype="pdf") as embedded:
                        out.insert_pdf(embedded)
            return out.tobytes(garbage=3, deflate=True)
        except (RuntimeError, ValueError) as e:
            raise ReconstructionError(f"Failed to assemble PDF: {e}") from e
        finally:
            out.close()
            for src in sources.values():
                src.close()


def build_document(
    document: Document,
    reconstructor: Optional[PageReconstructor] = None,
    *,
    units: Optional[Sequence[ExportUnit]] = None,
) -> bytes:
    """
    Rebuild a document's PDF from its current arrangement.

    Walks the export plan: single units copy their original page,
    merged units embed the group composite as a new page.

    Args:
        document: Arranged document
        reconstructor: Page reconstructor (defaults to PdfReconstructor())
        units: Export plan already computed for document.page_set;
            planned here if omitted

    Returns:
        PDF bytes with one page per export unit

    Raises:
        ReconstructionError: If copying or assembly fails

    Example:
        >>> pdf_bytes = build_document(doc)
        >>> fitz.open(stream=pdf_bytes).page_count == len(plan_export(doc.page_set))
        True
    """
    reconstructor = reconstructor or PdfReconstructor()

    if units is None:
        units = plan_export(document.page_set)

    pages: List[PageRef] = []
    for unit in units:
        if unit.is_merged:
            pages.append(reconstructor.embed_raster_as_page(unit.raster))
        else:
            pages.append(reconstructor.copy_page(document, unit.original_index))

    pdf = reconstructor.assemble(pages)
    logger.info(f"Reconstructed {document.name}: {len(pages)} pages")
    return pdf
