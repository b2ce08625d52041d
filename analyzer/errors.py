"""
analyzer/errors.py — Exception taxonomy for the analysis pipeline.

ValidationError is raised synchronously at the upload boundary (HTTP 400).
ExtractionError and unabsorbed ScoringError surface only inside the
background task, where they become a ``failed`` analysis record.
"""


class AnalysisError(Exception):
    """Base exception for all pipeline errors."""


class ValidationError(AnalysisError):
    """Upload rejected before any processing began."""


class FileTooLarge(ValidationError):
    """Upload exceeds the configured size limit."""


class ExtractionError(AnalysisError):
    """Text could not be extracted from the uploaded buffer."""


class UnsupportedType(ValidationError, ExtractionError):
    """Neither the MIME type nor the extension is PDF or plain text."""


class UnsupportedExtraction(ExtractionError):
    """The buffer is a genuine PDF that yielded no extractable text."""


class DecodeFailure(ExtractionError):
    """A text upload is not valid UTF-8."""


class ScoringError(AnalysisError):
    """A scoring strategy could not produce a result."""


class RemoteScoringError(ScoringError):
    """The remote model call failed, timed out or returned unusable output."""


class StoreError(AnalysisError):
    """The persistence layer failed."""
