"""
analyzer/extraction.py — Text extraction for uploaded DPR files.

Plain text is decoded verbatim. PDF uploads are checked for the binary
signature first: files that only claim to be PDFs are read as text, genuine
PDFs go through pypdf.
"""
import io
import logging

from analyzer.errors import DecodeFailure, UnsupportedExtraction, UnsupportedType
from analyzer.validation import file_extension

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
# Readers accept the header anywhere in the first KiB.
_HEADER_WINDOW = 1024

_KIND_BY_MIME = {
    "application/pdf": "pdf",
    "text/plain": "text",
}
_KIND_BY_EXTENSION = {
    ".pdf": "pdf",
    ".txt": "text",
}


def resolve_kind(mime_type: str | None, filename: str | None = None) -> str | None:
    """Map a MIME type (or, failing that, a filename extension) to 'pdf' or 'text'."""
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime in _KIND_BY_MIME:
        return _KIND_BY_MIME[mime]
    return _KIND_BY_EXTENSION.get(file_extension(filename))


def is_pdf_container(buffer: bytes) -> bool:
    return PDF_MAGIC in buffer[:_HEADER_WINDOW]


def extract_text(buffer: bytes, mime_type: str | None, filename: str | None = None) -> str:
    """
    Convert an uploaded buffer into plain text.

    Raises:
        UnsupportedType: content is neither PDF nor plain text.
        DecodeFailure: a text upload is not valid UTF-8.
        UnsupportedExtraction: a genuine PDF with no extractable text.
    """
    kind = resolve_kind(mime_type, filename)
    if kind == "text":
        return _decode_text(buffer)
    if kind == "pdf":
        if not is_pdf_container(buffer):
            logger.info("PDF upload %s has no PDF signature; reading as text", filename)
            return buffer.decode("utf-8", errors="replace")
        return _extract_pdf(buffer, filename)
    raise UnsupportedType(f"Unsupported file type: {mime_type}")


def _decode_text(buffer: bytes) -> str:
    try:
        return buffer.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeFailure(f"File is not valid UTF-8 text: {exc.reason}") from exc


def _extract_pdf(buffer: bytes, filename: str | None) -> str:
    import pypdf

    try:
        reader = pypdf.PdfReader(io.BytesIO(buffer), strict=False)
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as exc:  # pypdf raises a wide range on malformed input
        raise UnsupportedExtraction(f"Could not read PDF structure: {exc}") from exc

    text = "\n".join(p for p in pages if p.strip())
    if not text.strip():
        raise UnsupportedExtraction(
            "PDF contains no extractable text. Please upload a text-based PDF or a TXT file."
        )
    logger.info("Extracted %d characters from %d PDF page(s) of %s",
                len(text), len(pages), filename)
    return text
