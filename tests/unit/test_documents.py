"""Tests for CV document intake."""

import base64
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from atshub.core.documents import format_file_size, is_pdf, load_cv_document


class TestIsPdf:
    def test_content_type(self) -> None:
        assert is_pdf("upload", "application/pdf")

    def test_extension_case_insensitive(self) -> None:
        assert is_pdf("Resume.PDF")

    def test_other_files_rejected(self) -> None:
        assert not is_pdf("resume.docx", "application/vnd.openxmlformats")
        assert not is_pdf("notes.txt")


class TestFormatFileSize:
    def test_zero_is_blank(self) -> None:
        assert format_file_size(0) == ""

    def test_kilobytes_rounded(self) -> None:
        assert format_file_size(1536) == "2 KB"
        assert format_file_size(1024) == "1 KB"

    def test_megabytes(self) -> None:
        assert format_file_size(int(1.5 * 1024 * 1024)) == "1.5 MB"

    def test_exactly_one_megabyte_stays_kb(self) -> None:
        assert format_file_size(1024 * 1024) == "1024 KB"


class TestLoadCvDocument:
    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError, match="CV file not found"):
            load_cv_document("/nonexistent/cv.pdf")

    def test_non_pdf_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "cv.docx"
        path.write_bytes(b"PK")
        with pytest.raises(ValueError, match="Please upload a PDF file."):
            load_cv_document(path)

    def test_missing_pymupdf_import(self, tmp_path: Path) -> None:
        path = tmp_path / "cv.pdf"
        path.write_bytes(b"%PDF-1.4 fake")

        with (
            patch.dict("sys.modules", {"pymupdf": None}),
            pytest.raises(ImportError, match="pymupdf is required"),
        ):
            load_cv_document(path)

    def test_successful_load(self, tmp_path: Path) -> None:
        path = tmp_path / "ada_cv.pdf"
        raw = b"%PDF-1.4 fake"
        path.write_bytes(raw)

        mock_doc = MagicMock()
        mock_doc.__len__ = MagicMock(return_value=2)
        mock_pymupdf = MagicMock()
        mock_pymupdf.open.return_value = mock_doc

        with patch.dict("sys.modules", {"pymupdf": mock_pymupdf}):
            doc = load_cv_document(path)

        assert doc.file_name == "ada_cv.pdf"
        assert doc.size_bytes == len(raw)
        assert base64.b64decode(doc.base64_data) == raw
        assert doc.page_count == 2
        mock_doc.close.assert_called_once()

    def test_unreadable_pdf(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"not a pdf")

        mock_pymupdf = MagicMock()
        mock_pymupdf.open.side_effect = RuntimeError("cannot open")

        with (
            patch.dict("sys.modules", {"pymupdf": mock_pymupdf}),
            pytest.raises(ValueError, match="Could not read PDF broken.pdf"),
        ):
            load_cv_document(path)
