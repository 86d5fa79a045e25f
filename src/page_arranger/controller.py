"""
Module: controller

Purpose:
    Orchestrate export of an arranged session.
    Plan → Reconstruct PDF → Encode page images → Package

    Each document is exported independently. A document that fails is
    left out of the archive and reported in ExportResult.failures and
    README.txt; the others are still packaged.

Key Functions:
    - export_document(): One document -> PDF bytes + page images
    - export_session(): All documents -> archive bytes
    - write_session_zip(): export_session() written to disk

Key Classes:
    - DocumentExport: Exported files for one document
    - ExportResult: Archive plus per-document outcome
    - ExportError: Nothing could be exported

Dependencies:
    - arrange.planner: Export plan
    - output.reconstructor: PDF reconstruction
    - output.zip_writer: Packaging

Used By:
    - cli: Command-line export
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from page_arranger import __version__
from page_arranger.arrange.config import ArrangeConfig
from page_arranger.arrange.planner import plan_export
from page_arranger.arrange.session import Session
from page_arranger.core.models import Document
from page_arranger.imaging.compositor import CompositeError
from page_arranger.output.reconstructor import (
    PageReconstructor,
    PdfReconstructor,
    ReconstructionError,
    build_document,
)
from page_arranger.output.zip_writer import (
    ZipPackager,
    generate_readme,
    image_bytes,
    unique_folder_name,
)

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Error exporting a session."""
    pass


@dataclass(frozen=True)
class DocumentExport:
    """
    Exported files for one document (immutable).

    Attributes:
        document: Source document
        pdf: Reconstructed PDF bytes
        images: (file name, bytes) per export unit, e.g. ("page1.png", ...)
        labels: Export unit labels, aligned with images
    """
    document: Document
    pdf: bytes = field(repr=False)
    images: Tuple[Tuple[str, bytes], ...] = field(repr=False)
    labels: Tuple[str, ...]

    @property
    def page_count(self) -> int:
        return len(self.images)


@dataclass(frozen=True)
class ExportResult:
    """
    Outcome of exporting a session.

    Attributes:
        archive: ZIP archive bytes
        exported: Documents that were packaged, in session order
        failures: Document name -> error message for documents left out;
            repeated names get " (2)", " (3)", ... suffixes
        files: Archive paths, in write order
    """
    archive: bytes = field(repr=False)
    exported: Tuple[DocumentExport, ...]
    failures: Dict[str, str]
    files: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        """True if every document was exported."""
        return not self.failures


def export_document(
    document: Document,
    config: Optional[ArrangeConfig] = None,
    *,
    reconstructor: Optional[PageReconstructor] = None,
) -> DocumentExport:
    """
    Export one document: reconstructed PDF plus one image per export unit.

    Images are named page1, page2, ... in export plan order, so their
    count and boundaries match the PDF pages exactly.

    Raises:
        ReconstructionError: If the PDF cannot be built
        CompositeError: If a merged page cannot be composited
    """
    config = config or ArrangeConfig()
    reconstructor = reconstructor or PdfReconstructor(embed_dpi=config.embed_dpi)

    units = plan_export(document.page_set)
    pdf = build_document(document, reconstructor, units=units)

    images = tuple(
        (f"page{number}{config.image_extension}", image_bytes(unit.raster, config.image_format))
        for number, unit in enumerate(units, start=1)
    )
    return DocumentExport(
        document=document,
        pdf=pdf,
        images=images,
        labels=tuple(unit.label for unit in units),
    )


def export_session(
    session: Session,
    config: Optional[ArrangeConfig] = None,
    *,
    reconstructor: Optional[PageReconstructor] = None,
) -> ExportResult:
    """
    Export every document of a session into one archive.

    Pipeline (per document):
    1. Plan export units
    2. Reconstruct PDF
    3. Encode page images
    4. Add PDF and images to the archive

    Args:
        session: Session with arranged documents
        config: Export configuration (defaults to the session's)
        reconstructor: Page reconstructor override

    Returns:
        ExportResult with archive bytes and per-document outcome

    Raises:
        ExportError: If the session is empty or every document failed

    Example:
        >>> result = export_session(session)
        >>> result.failures
        {}
    """
    config = config or session.config
    documents = session.documents
    if not documents:
        raise ExportError("No documents to export")

    start_time = time.perf_counter()
    logger.info(f"Exporting {len(documents)} documents")

    exported: List[DocumentExport] = []
    failures: Dict[str, str] = {}
    failed_names: Set[str] = set()
    for document in documents:
        try:
            exported.append(export_document(document, config, reconstructor=reconstructor))
        except (ReconstructionError, CompositeError, OSError, ValueError) as e:
            logger.warning(f"Failed to export {document.name}: {e}")
            # Same-named documents each keep their own entry
            failures[unique_folder_name(document.name, failed_names)] = str(e)

    if not exported:
        details = "; ".join(f"{name}: {error}" for name, error in failures.items())
        raise ExportError(f"All documents failed to export ({details})")

    packager = ZipPackager()
    used_folders: Set[str] = set()
    readme_pages: Dict[str, List[str]] = {}
    for export in exported:
        folder = unique_folder_name(export.document.base_name, used_folders)
        packager.add_file(f"{folder}/{folder}.pdf", export.pdf)
        for file_name, data in export.images:
            packager.add_file(f"{folder}/{config.images_dir}/{file_name}", data)
        readme_pages[folder] = list(export.labels)

    if config.include_readme:
        packager.add_file("README.txt", generate_readme(readme_pages, failures, version=__version__))

    archive = packager.finalize()
    elapsed = time.perf_counter() - start_time
    logger.info(
        f"Exported {len(exported)} documents ({len(failures)} failed) in {elapsed:.2f}s"
    )
    return ExportResult(
        archive=archive,
        exported=tuple(exported),
        failures=failures,
        files=tuple(packager.names),
    )


def write_session_zip(
    session: Session,
    output_path: Path,
    config: Optional[ArrangeConfig] = None,
) -> ExportResult:
    """
    Export a session and write the archive to disk.

    Args:
        session: Session with arranged documents
        output_path: Target file; a directory gets config.archive_name inside it,
            and ".zip" is appended if missing

    Returns:
        ExportResult of the export
    """
    config = config or session.config
    output_path = Path(output_path)
    if output_path.is_dir():
        output_path = output_path / config.archive_name
    if output_path.suffix != ".zip":
        output_path = output_path.with_suffix(".zip")

    result = export_session(session, config)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.archive)
    logger.info(f"Wrote archive to {output_path}")
    return result
