"""
Tests for controller (session export).

Test Coverage:
- Archive layout per document (PDF + images/pageN)
- Image count and boundaries match the export plan
- Partial failure reporting, including same-named documents
- write_session_zip() paths
"""

import zipfile
from io import BytesIO
from pathlib import Path
from unittest.mock import patch

import fitz
import pytest
from PIL import Image

from page_arranger.arrange.config import ArrangeConfig
from page_arranger.arrange.session import Session
from page_arranger.controller import (
    ExportError,
    export_document,
    export_session,
    write_session_zip,
)
from page_arranger.core.models import MergeMode
from page_arranger.output.reconstructor import ReconstructionError, build_document


@pytest.fixture
def session(pdf_factory):
    session = Session(ArrangeConfig(dpi=36))
    session.load("report.pdf", pdf_factory(5))
    session.load("slides.pdf", pdf_factory(4, size=(300, 200)))
    return session


class TestExportDocument:

    def test_images_match_plan(self, session):
        doc = session.documents[0]
        session.merge(doc.doc_id, 1, MergeMode.VERTICAL)

        export = export_document(doc, session.config)

        assert export.labels == ("page 1", "pages 2-3", "page 4", "page 5")
        assert [name for name, _ in export.images] == [
            "page1.png", "page2.png", "page3.png", "page4.png",
        ]
        with Image.open(BytesIO(export.images[1][1])) as merged:
            assert merged.size == (100, 300)
        with fitz.open(stream=export.pdf, filetype="pdf") as pdf:
            assert pdf.page_count == export.page_count

    def test_plans_once_and_reuses_units_for_pdf(self, session):
        doc = session.documents[0]
        session.merge(doc.doc_id, 0, MergeMode.GRID)

        with patch(
            "page_arranger.output.reconstructor.plan_export",
            side_effect=AssertionError("export plan computed twice"),
        ):
            export = export_document(doc, session.config)

        assert export.labels == ("pages 1-4", "page 5")
        with fitz.open(stream=export.pdf, filetype="pdf") as pdf:
            assert pdf.page_count == 2

    def test_jpeg_format(self, session):
        config = ArrangeConfig(dpi=36, image_format="JPEG")

        export = export_document(session.documents[1], config)

        assert export.images[0][0] == "page1.jpg"


class TestExportSession:

    def test_archive_layout(self, session):
        report, slides = session.documents
        session.merge(slides.doc_id, 0, MergeMode.GRID)

        result = export_session(session)

        assert result.ok
        with zipfile.ZipFile(BytesIO(result.archive)) as zf:
            names = zf.namelist()
        assert names == list(result.files)
        assert "report/report.pdf" in names
        assert [n for n in names if n.startswith("report/images/")] == [
            f"report/images/page{i}.png" for i in range(1, 6)
        ]
        assert [n for n in names if n.startswith("slides/images/")] == ["slides/images/page1.png"]
        assert names[-1] == "README.txt"

    def test_readme_can_be_disabled(self, session):
        result = export_session(session, ArrangeConfig(dpi=36, include_readme=False))
        assert "README.txt" not in result.files

    def test_duplicate_names_get_distinct_folders(self, pdf_factory):
        session = Session(ArrangeConfig(dpi=36))
        session.load("a.pdf", pdf_factory(1))
        session.load("a.pdf", pdf_factory(2))

        result = export_session(session)

        assert "a/a.pdf" in result.files
        assert "a (2)/a (2).pdf" in result.files
        assert "a (2)/images/page2.png" in result.files

    def test_failed_document_reported_others_exported(self, session):
        def flaky_build(document, reconstructor=None, **kwargs):
            if document.name == "report.pdf":
                raise ReconstructionError("Failed to assemble PDF: boom")
            return build_document(document, reconstructor, **kwargs)

        with patch("page_arranger.controller.build_document", side_effect=flaky_build):
            result = export_session(session)

        assert not result.ok
        assert result.failures == {"report.pdf": "Failed to assemble PDF: boom"}
        assert [e.document.name for e in result.exported] == ["slides.pdf"]
        assert not any(name.startswith("report/") for name in result.files)
        with zipfile.ZipFile(BytesIO(result.archive)) as zf:
            readme = zf.read("README.txt").decode()
        assert "report.pdf: Failed to assemble PDF: boom" in readme

    def test_all_failed_raises(self, session):
        with patch(
            "page_arranger.controller.build_document",
            side_effect=ReconstructionError("nope"),
        ):
            with pytest.raises(ExportError, match="All documents failed"):
                export_session(session)

    def test_same_named_failures_each_reported(self, pdf_factory):
        session = Session(ArrangeConfig(dpi=36))
        session.load("a.pdf", pdf_factory(1))
        session.load("a.pdf", pdf_factory(2))
        session.load("b.pdf", pdf_factory(1))
        errors = iter(["boom 1", "boom 2"])

        def flaky_build(document, reconstructor=None, **kwargs):
            if document.name == "a.pdf":
                raise ReconstructionError(next(errors))
            return build_document(document, reconstructor, **kwargs)

        with patch("page_arranger.controller.build_document", side_effect=flaky_build):
            result = export_session(session)

        assert result.failures == {"a.pdf": "boom 1", "a.pdf (2)": "boom 2"}
        assert [e.document.name for e in result.exported] == ["b.pdf"]
        with zipfile.ZipFile(BytesIO(result.archive)) as zf:
            readme = zf.read("README.txt").decode()
        assert "Documents failed: 2" in readme
        assert "a.pdf (2): boom 2" in readme

    def test_all_failed_lists_every_document(self, pdf_factory):
        session = Session(ArrangeConfig(dpi=36))
        session.load("a.pdf", pdf_factory(1))
        session.load("a.pdf", pdf_factory(1))

        with patch(
            "page_arranger.controller.build_document",
            side_effect=ReconstructionError("nope"),
        ):
            with pytest.raises(ExportError) as exc_info:
                export_session(session)

        assert "a.pdf: nope" in str(exc_info.value)
        assert "a.pdf (2): nope" in str(exc_info.value)

    def test_empty_session_raises(self):
        with pytest.raises(ExportError, match="No documents"):
            export_session(Session())


class TestWriteSessionZip:

    def test_writes_to_file(self, session, tmp_path: Path):
        output = tmp_path / "out" / "bundle.zip"

        write_session_zip(session, output)

        assert output.exists()
        assert zipfile.is_zipfile(output)

    def test_directory_gets_archive_name(self, session, tmp_path: Path):
        write_session_zip(session, tmp_path)
        assert (tmp_path / "all.zip").exists()

    def test_zip_suffix_added(self, session, tmp_path: Path):
        write_session_zip(session, tmp_path / "bundle")
        assert (tmp_path / "bundle.zip").exists()
