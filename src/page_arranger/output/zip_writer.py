"""
Module: output.zip_writer

Purpose:
    Package reconstructed PDFs and their page images into one ZIP archive.
    Archive layout:
        all.zip
        ├── README.txt                # Summary and failed documents (optional)
        ├── report/                   # One folder per document (base name)
        │   ├── report.pdf            # Reconstructed PDF
        │   └── images/
        │       ├── page1.png         # One image per export unit, in order
        │       └── page2.png
        └── ...

Key Functions:
    - image_bytes(): Encode a page image
    - unique_folder_name(): De-duplicate document folder names
    - generate_readme(): README.txt content

Key Classes:
    - ZipPackager: add_file() / finalize() archive builder

Dependencies:
    - zipfile (std)
    - PIL/Pillow

Used By:
    - controller: Session export
"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from typing import Dict, Iterable, List, Mapping, Set

from PIL import Image

logger = logging.getLogger(__name__)


class ZipPackager:
    """
    In-memory ZIP builder.

    Files are written in the order they are added; the archive bytes are
    available once finalize() is called.

    Example:
        >>> packager = ZipPackager()
        >>> packager.add_file("report/report.pdf", pdf_bytes)
        >>> archive = packager.finalize()
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._buffer = BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", compression)
        self._names: List[str] = []
        self._archive: bytes | None = None

    @property
    def names(self) -> List[str]:
        """Paths added so far, in order."""
        return list(self._names)

    def add_file(self, path: str, data: bytes) -> None:
        """
        Add a file to the archive.

        Raises:
            ValueError: If the archive was finalized or path is already used
        """
        if self._archive is not None:
            raise ValueError("Archive already finalized")
        if path in self._names:
            raise ValueError(f"Duplicate archive path: {path}")
        self._zip.writestr(path, data)
        self._names.append(path)

    def finalize(self) -> bytes:
        """Close the archive and return its bytes (idempotent)."""
        if self._archive is None:
            self._zip.close()
            self._archive = self._buffer.getvalue()
            logger.debug(f"Finalized archive with {len(self._names)} files")
        return self._archive


def image_bytes(image: Image.Image, image_format: str = "PNG") -> bytes:
    """Encode an image; JPEG output is converted to RGB first."""
    buf = BytesIO()
    if image_format.upper() == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.save(buf, format=image_format.upper())
    return buf.getvalue()


def unique_folder_name(name: str, used: Set[str]) -> str:
    """
    Return name, or "name (2)", "name (3)", ... if already used.

    The returned name is added to used.
    """
    candidate = _sanitize_filename(name) or "document"
    base = candidate
    counter = 2
    while candidate in used:
        candidate = f"{base} ({counter})"
        counter += 1
    used.add(candidate)
    return candidate


def _sanitize_filename(name: str) -> str:
    """
    Make a document name safe as an archive folder.

    Converts:
        "report"        -> "report"
        "a/b\\c"        -> "a_b_c"
        "  spaced  "    -> "spaced"
    """
    return name.replace("/", "_").replace("\\", "_").strip()


def generate_readme(
    exported: Mapping[str, Iterable[str]],
    failures: Mapping[str, str],
    *,
    version: str = "",
) -> str:
    """
    Generate README.txt content.

    Args:
        exported: Document name -> export unit labels, in output order
        failures: Document name -> error message
        version: Package version for the header line
    """
    title = "Page Arranger - Exported Documents"
    if version:
        title += f" (v{version})"
    lines = [
        title,
        "=" * 50,
        "",
        f"Documents exported: {len(exported)}",
        f"Documents failed: {len(failures)}",
        "",
    ]

    if exported:
        lines.extend(["=" * 50, "Documents:", ""])
        for name, labels in exported.items():
            labels = list(labels)
            lines.append(f"{name} ({len(labels)} pages)")
            for number, label in enumerate(labels, start=1):
                lines.append(f"   page{number}: {label}")
            lines.append("")

    if failures:
        lines.extend(["=" * 50, "Failed:", ""])
        for name, error in failures.items():
            lines.append(f"{name}: {error}")
        lines.append("")

    return "\n".join(lines)
