"""Text extraction for uploaded knowledge-base documents (.txt, .md, .pdf)."""

import io
from pathlib import Path
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="adapters.log")

TEXT_EXTENSIONS = {".txt", ".md", ".csv"}
PDF_EXTENSIONS = {".pdf"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | PDF_EXTENSIONS


class UnsupportedDocumentError(ValueError):
    """The upload is not a supported document type, or no text could be read from it."""


def _is_pdf(filename: str, content_type: Optional[str]) -> bool:
    return content_type == "application/pdf" or Path(filename).suffix.lower() in PDF_EXTENSIONS


def _is_text(filename: str, content_type: Optional[str]) -> bool:
    return bool(content_type and content_type.startswith("text/")) or Path(filename).suffix.lower() in TEXT_EXTENSIONS


def extract_text(filename: str, content_type: Optional[str], data: bytes) -> str:
    """Return the plain text of an uploaded file. Raises UnsupportedDocumentError for anything else."""
    if _is_pdf(filename, content_type):
        try:
            reader = PdfReader(io.BytesIO(data))
            text = "\n\n".join(page.extract_text() or "" for page in reader.pages)
        except PdfReadError as e:
            raise UnsupportedDocumentError(f"Could not read PDF '{filename}': {e}") from e
        logger.debug(f"📄 Extracted {len(text)} chars from PDF '{filename}'")
    elif _is_text(filename, content_type):
        text = data.decode("utf-8", errors="replace")
    else:
        raise UnsupportedDocumentError("Only text and PDF files are supported")

    text = text.strip()
    if not text:
        raise UnsupportedDocumentError(f"No text found in '{filename}'")
    return text
