"""
analyzer/validation.py — Upload gate: size and type checks.

Runs synchronously before a record is created, so a rejected upload never
reaches the store.
"""
import os

from analyzer.errors import FileTooLarge, UnsupportedType

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

ALLOWED_MIME = {"application/pdf", "text/plain"}
ALLOWED_EXTENSIONS = {".pdf", ".txt"}


def file_extension(filename: str | None) -> str:
    return os.path.splitext(filename or "")[1].lower()


def validate_upload(filename: str, size_bytes: int, mime_type: str | None,
                    max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """
    Raise a ValidationError subclass if the upload is not acceptable.

    Rules are evaluated in order and the first failure wins:
    size above ``max_bytes`` -> FileTooLarge; MIME type and extension both
    outside PDF/TXT -> UnsupportedType.
    """
    if size_bytes > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise FileTooLarge(f"File size exceeds {limit_mb}MB limit")

    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_MIME and file_extension(filename) not in ALLOWED_EXTENSIONS:
        raise UnsupportedType("Only PDF and TXT files are supported")
