"""
Command-line entry point.

Loads PDFs, applies a scripted sequence of arrange operations and writes
the export archive:

    page-arranger a.pdf b.pdf -o out.zip \\
        --op merge:1:2:vertical --op move:2:5:-1 --op clear:1:2

Operation syntax (document and page numbers are 1-based, in the order the
files were given and in the current page order):
    merge:DOC:PAGE:MODE   MODE is vertical, horizontal or grid
    clear:DOC:PAGE
    move:DOC:PAGE:DIR     DIR is -1 or +1
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from page_arranger import __version__
from page_arranger.arrange import ArrangeConfig, Session
from page_arranger.controller import ExportError, write_session_zip
from page_arranger.core.models import MergeMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
    """One scripted arrange step (0-based indices)."""
    kind: str
    doc: int
    page: int
    mode: MergeMode = MergeMode.NONE
    direction: int = 0


def parse_operation(text: str) -> Operation:
    """
    Parse an --op value.

    Raises:
        argparse.ArgumentTypeError: If the value is malformed
    """
    parts = text.split(":")
    kind = parts[0].strip().lower()
    expected = {"merge": 4, "move": 4, "clear": 3}
    if kind not in expected or len(parts) != expected[kind]:
        raise argparse.ArgumentTypeError(f"Invalid operation {text!r}")
    try:
        doc, page = int(parts[1]) - 1, int(parts[2]) - 1
        if kind == "merge":
            return Operation(kind, doc, page, mode=MergeMode.parse(parts[3]))
        if kind == "move":
            direction = int(parts[3])
            if direction not in (-1, 1):
                raise ValueError("direction must be -1 or +1")
            return Operation(kind, doc, page, direction=direction)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid operation {text!r}: {e}") from e
    return Operation(kind, doc, page)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page-arranger",
        description="Reorder and merge PDF pages, then export PDFs and page images as a ZIP.",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="PDF files to load")
    parser.add_argument("-o", "--output", type=Path, default=Path("all.zip"),
                        help="Output archive path or directory (default: all.zip)")
    parser.add_argument("--op", dest="operations", action="append", default=[],
                        type=parse_operation, metavar="OP",
                        help="Arrange operation; repeatable, applied in order")
    parser.add_argument("--dpi", type=int, default=144, help="Rasterization DPI (default: 144)")
    parser.add_argument("--embed-dpi", type=int, default=72,
                        help="DPI used to size merged pages in the PDF (default: 72)")
    parser.add_argument("--image-format", choices=["PNG", "JPEG"], default="PNG")
    parser.add_argument("--no-readme", action="store_true", help="Do not add README.txt")
    parser.add_argument("--list", action="store_true", help="Print page labels before exporting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_operations(session: Session, operations: Sequence[Operation]) -> List[str]:
    """
    Apply operations in order; returns a message per ignored operation.

    Ineligible merges and out-of-range moves are ignored, as are
    operations on documents that were not loaded.
    """
    documents = session.documents
    ignored: List[str] = []
    for op in operations:
        if not 0 <= op.doc < len(documents):
            ignored.append(f"{op.kind} on document {op.doc + 1}: no such document")
            continue
        doc_id = documents[op.doc].doc_id
        if op.kind == "merge":
            applied = session.merge(doc_id, op.page, op.mode)
        elif op.kind == "move":
            applied = session.move(doc_id, op.page, op.direction)
        else:
            session.clear_merge(doc_id, op.page)
            applied = True
        if not applied:
            ignored.append(f"{op.kind} at page {op.page + 1} of {documents[op.doc].name}: not allowed")
    return ignored


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ArrangeConfig(
            dpi=args.dpi,
            embed_dpi=args.embed_dpi,
            image_format=args.image_format,
            include_readme=not args.no_readme,
        )
    except ValueError as e:
        logger.error(str(e))
        return 2

    session = Session(config)
    files = []
    for path in args.inputs:
        try:
            files.append((path.name, path.read_bytes()))
        except OSError as e:
            logger.error(f"Cannot read {path}: {e}")
            return 1

    loaded = session.load_many(files)
    if loaded.rejected:
        # Document numbers in --op refer to the given files
        for name, reason in loaded.rejected.items():
            logger.error(f"Rejected {name}: {reason}")
        return 1

    for message in apply_operations(session, args.operations):
        logger.warning(f"Ignored {message}")

    if args.list:
        for number, doc in enumerate(session.documents, start=1):
            print(f"[{number}] {doc.name}")
            for label in session.labels(doc.doc_id):
                print(f"    {label}")

    try:
        result = write_session_zip(session, args.output, config)
    except ExportError as e:
        logger.error(str(e))
        return 1

    for name, error in result.failures.items():
        logger.error(f"Failed to export {name}: {error}")
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
