"""
analyzer/orchestrator.py — Drives one upload through its lifecycle.

    processing ──extract + score ok──▶ completed
        └──────────any error─────────▶ failed

submit() validates and creates the record synchronously, then hands
extraction and scoring to a detached task and returns at once. The task
writes exactly one more update, either the full result or a zeroed failure
record; a terminal record always carries ``analyzedAt`` and all six
section scores.
"""
import logging
from typing import Any, Dict, Optional

from analyzer import ScoringEngine
from analyzer.extraction import extract_text
from analyzer.results import zero_sections
from analyzer.tasks import TaskRunner
from analyzer.validation import MAX_UPLOAD_BYTES, validate_upload
from models.analysis import utcnow
from models.store import AnalysisStore

logger = logging.getLogger(__name__)


def failure_fields(reason: str) -> Dict[str, Any]:
    """Placeholder results for a failed analysis."""
    return {
        "status": "failed",
        "analyzedAt": utcnow(),
        "overallScore": 0,
        "completenessScore": 0,
        "complianceScore": 0,
        "riskLevel": "high",
        "riskFactors": [],
        "complianceIssues": [],
        "analysisData": {
            "sections": zero_sections(),
            "detailedFindings": [f"Analysis failed: {reason}"],
            "recommendations": [],
            "missingElements": [],
        },
    }


class AnalysisOrchestrator:
    """Coordinates validation, the store, and background scoring."""

    def __init__(self, store: AnalysisStore, engine: ScoringEngine, runner: TaskRunner,
                 max_upload_bytes: int = MAX_UPLOAD_BYTES):
        self.store = store
        self.engine = engine
        self.runner = runner
        self.max_upload_bytes = max_upload_bytes

    def submit(self, filename: str, mime_type: Optional[str], buffer: bytes,
               language: Optional[str] = None) -> Dict[str, Any]:
        """
        Validate an upload, record it as processing and start scoring.

        Raises ValidationError before anything is stored. Returns the
        processing snapshot; the caller polls the store for the outcome.
        """
        validate_upload(filename, len(buffer), mime_type, self.max_upload_bytes)

        analysis = self.store.create({
            "filename": filename,
            "fileType": mime_type or "application/octet-stream",
            "fileSize": len(buffer),
            "status": "processing",
            "language": language or "en",
        })
        analysis_id = analysis["id"]
        self.runner.spawn(
            f"analysis-{analysis_id}",
            self.process,
            lambda exc: self.mark_failed(analysis_id, exc),
            analysis_id, buffer, filename, mime_type,
        )
        return analysis

    def process(self, analysis_id: str, buffer: bytes, filename: str,
                mime_type: Optional[str]) -> Dict[str, Any]:
        text = extract_text(buffer, mime_type, filename)
        result = self.engine.score(text, filename).to_dict()
        updated = self.store.update(analysis_id, {
            "status": "completed",
            "analyzedAt": utcnow(),
            "extractedText": text,
            **result,
        })
        if updated is None:
            logger.warning("Analysis %s was deleted before scoring finished", analysis_id)
        else:
            logger.info("Analysis completed for %s (ID: %s) overall=%s",
                        filename, analysis_id, result["overallScore"])
        return updated

    def mark_failed(self, analysis_id: str, exc: BaseException) -> Dict[str, Any]:
        reason = str(exc) or exc.__class__.__name__
        logger.warning("Analysis %s failed: %s", analysis_id, reason)
        return self.store.update(analysis_id, failure_fields(reason))
