"""CV document intake: PDF detection, base64 encoding, page count via pymupdf."""

import base64
from pathlib import Path

from pydantic import BaseModel, Field

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


class CvDocument(BaseModel):
    """A CV file read into memory, ready to be sent to the remote parser."""

    file_name: str
    content_type: str = "application/pdf"
    size_bytes: int = Field(default=0, ge=0)
    base64_data: str
    page_count: int | None = None


def is_pdf(file_name: str, content_type: str = "") -> bool:
    """True for a PDF content type or a ``.pdf`` file name."""
    if content_type in PDF_CONTENT_TYPES:
        return True
    return file_name.lower().endswith(".pdf")


def format_file_size(size_bytes: int) -> str:
    """Human-readable size: ``"12 KB"`` or ``"1.5 MB"``; empty for zero."""
    if not size_bytes:
        return ""
    kb = size_bytes / 1024
    if kb > 1024:
        return f"{kb / 1024:.1f} MB"
    return f"{int(kb + 0.5)} KB"


def load_cv_document(path: str | Path) -> CvDocument:
    """Read a CV PDF from disk.

    Args:
        path: Path to the PDF file.

    Returns:
        The encoded document with its page count.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a PDF.
        ImportError: If pymupdf is not installed.
    """
    path = Path(path)
    if not path.exists():
        msg = f"CV file not found: {path}"
        raise FileNotFoundError(msg)
    if not is_pdf(path.name):
        msg = "Please upload a PDF file."
        raise ValueError(msg)

    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required to read CV files. "
            "Install with: pip install 'atshub[pdf]'"
        )
        raise ImportError(msg) from None

    raw = path.read_bytes()
    try:
        doc = pymupdf.open(str(path))
    except RuntimeError as e:
        msg = f"Could not read PDF {path.name}: {e}"
        raise ValueError(msg) from e
    page_count = len(doc)
    doc.close()

    return CvDocument(
        file_name=path.name,
        size_bytes=len(raw),
        base64_data=base64.b64encode(raw).decode("ascii"),
        page_count=page_count,
    )
