"""
Module: arrange.session

Purpose:
    Own the documents loaded for one arranging session. Loading validates
    and rasterizes the PDF before anything is stored, so rejected input
    leaves no partial state. Rasterizing several documents runs in a
    thread pool; each document gets its own PageSet.

Key Classes:
    - Session: Loaded documents plus arrange operations by document id
    - LoadResult: Documents loaded and files rejected by load_many()
    - SessionError: Unknown document id

Dependencies:
    - concurrent.futures: Parallel rasterization
    - imaging.raster: Default rasterizer

Used By:
    - controller: Export
    - cli: Command-line entry point
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from PIL import Image

from page_arranger.core.models import Document, MergeMode, PageSet
from page_arranger.imaging.raster import DocumentFormatError, RasterizeError, rasterize

from .config import ArrangeConfig
from .merge import apply_merge, clear_merge, slot_label
from .reorder import move

logger = logging.getLogger(__name__)

Rasterizer = Callable[[bytes], Sequence[Image.Image]]


class SessionError(KeyError):
    """Requested document is not part of the session."""
    pass


@dataclass
class LoadResult:
    """
    Outcome of loading several files.

    Attributes:
        documents: Loaded documents, in input order
        rejected: File name -> reason for files that were not loaded
    """
    documents: List[Document] = field(default_factory=list)
    rejected: Dict[str, str] = field(default_factory=dict)


class Session:
    """
    Explicit container for the documents being arranged.

    Example:
        >>> session = Session()
        >>> doc = session.load("report.pdf", data)
        >>> session.merge(doc.doc_id, 0, MergeMode.VERTICAL)
        True
        >>> session.move(doc.doc_id, 3, +1)
        True
    """

    def __init__(
        self,
        config: Optional[ArrangeConfig] = None,
        *,
        rasterizer: Optional[Rasterizer] = None,
    ) -> None:
        """
        Initialize an empty session.

        Args:
            config: Arrange configuration (defaults to ArrangeConfig())
            rasterizer: Callable turning PDF bytes into page images.
                Defaults to PyMuPDF rendering at config.dpi.
        """
        self.config = config or ArrangeConfig()
        self._rasterizer = rasterizer
        self._documents: Dict[str, Document] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    @property
    def documents(self) -> List[Document]:
        """Loaded documents, in load order."""
        return list(self._documents.values())

    def get(self, doc_id: str) -> Document:
        """
        Look up a document by id.

        Raises:
            SessionError: If no document has this id
        """
        try:
            return self._documents[doc_id]
        except KeyError:
            raise SessionError(f"No document with id {doc_id!r}") from None

    def reset(self) -> None:
        """Drop every loaded document."""
        for doc in self._documents.values():
            doc.page_set.clear()
        self._documents.clear()
        logger.debug("Session reset")

    # ─────────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────────

    def load(self, name: str, data: bytes) -> Document:
        """
        Validate, rasterize and add one PDF.

        Args:
            name: File name (must end in .pdf)
            data: Raw PDF bytes

        Returns:
            The new Document

        Raises:
            DocumentFormatError: If the file is not a PDF
            RasterizeError: If rendering fails
        """
        doc = self._build_document(name, data)
        self._documents[doc.doc_id] = doc
        logger.info(f"Loaded {name} ({doc.page_count} pages)")
        return doc

    def load_path(self, path: Path) -> Document:
        """Load a PDF from disk."""
        path = Path(path)
        return self.load(path.name, path.read_bytes())

    def load_many(self, files: Iterable[Tuple[str, bytes]]) -> LoadResult:
        """
        Load several PDFs, rasterizing them in parallel.

        Files that fail validation or rendering are reported in
        LoadResult.rejected; the others are added in input order.

        Args:
            files: (name, data) pairs

        Returns:
            LoadResult with loaded documents and rejected files
        """
        files = list(files)
        result = LoadResult()

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [executor.submit(self._build_document, name, data) for name, data in files]

        for (name, _), future in zip(files, futures):
            try:
                doc = future.result()
            except (DocumentFormatError, RasterizeError) as e:
                logger.warning(f"Skipping {name}: {e}")
                result.rejected[name] = str(e)
                continue
            self._documents[doc.doc_id] = doc
            result.documents.append(doc)

        logger.info(f"Loaded {len(result.documents)} of {len(files)} documents")
        return result

    def _build_document(self, name: str, data: bytes) -> Document:
        if not name.lower().endswith(".pdf"):
            raise DocumentFormatError(f"{name} is not a PDF file")
        rasters = self._rasterize(name, data)
        if not rasters:
            raise DocumentFormatError(f"{name} has no pages")
        return Document(name=name, data=bytes(data), page_set=PageSet.from_rasters(rasters))

    def _rasterize(self, name: str, data: bytes) -> Sequence[Image.Image]:
        if self._rasterizer is not None:
            return self._rasterizer(data)
        return rasterize(data, self.config.dpi, name=name)

    # ─────────────────────────────────────────────────────────────────────
    # Arrange operations
    # ─────────────────────────────────────────────────────────────────────

    def merge(self, doc_id: str, index: int, mode: MergeMode) -> bool:
        """Start a merge group; ignored (False) if not eligible."""
        return apply_merge(self.get(doc_id).page_set, index, mode)

    def clear_merge(self, doc_id: str, index: int) -> None:
        """Drop the merge started at a slot."""
        clear_merge(self.get(doc_id).page_set, index)

    def move(self, doc_id: str, index: int, direction: int) -> bool:
        """Swap a slot with a neighbour; ignored (False) if out of range."""
        return move(self.get(doc_id).page_set, index, direction)

    def labels(self, doc_id: str) -> List[str]:
        """Display labels for every slot of a document."""
        page_set = self.get(doc_id).page_set
        return [slot_label(page_set, i) for i in range(len(page_set))]
