"""
models/store.py — AnalysisStore: the single owner of analysis records.

Every read returns a ``to_dict()`` snapshot, never a live ORM object, and
every write is one commit, so pollers see either the processing record or
the finished one. The store does not police lifecycle transitions; the
orchestrator is the only writer after creation.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from analyzer.errors import StoreError
from extensions import db
from models.analysis import Analysis, utcnow
from models.user import User

logger = logging.getLogger(__name__)

# camelCase API field -> model attribute
FIELD_MAP = {
    "filename": "filename",
    "fileType": "file_type",
    "fileSize": "file_size",
    "status": "status",
    "language": "language",
    "uploadedAt": "uploaded_at",
    "analyzedAt": "analyzed_at",
    "overallScore": "overall_score",
    "completenessScore": "completeness_score",
    "complianceScore": "compliance_score",
    "riskLevel": "risk_level",
    "riskFactors": "risk_factors",
    "complianceIssues": "compliance_issues",
    "extractedText": "extracted_text",
    "analysisData": "analysis_data",
    "createdBy": "created_by",
}
CREATE_FIELDS = {"filename", "fileType", "fileSize", "status", "language", "createdBy"}


def _columns(fields: Dict[str, Any], allowed) -> Dict[str, Any]:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown analysis field(s): {', '.join(sorted(unknown))}")
    return {FIELD_MAP[key]: value for key, value in fields.items()}


class AnalysisStore:
    """CRUD and listing over persisted analyses, keyed by id."""

    def __init__(self, database=db):
        self.db = database

    @property
    def session(self):
        return self.db.session

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store %s failed: %s", action, exc, exc_info=True)
            raise StoreError(f"Failed to {action} analysis") from exc

    def _query(self, action: str, fn):
        try:
            return fn()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store %s failed: %s", action, exc, exc_info=True)
            raise StoreError(f"Failed to {action} analysis") from exc

    # ── Analyses ──────────────────────────────────────────────────────────────

    def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new record; status defaults to processing, results stay null."""
        columns = _columns(fields, CREATE_FIELDS)
        columns.setdefault("status", "processing")
        if not columns.get("language"):
            columns["language"] = "en"
        analysis = Analysis(uploaded_at=utcnow(), **columns)
        self.session.add(analysis)
        self._commit("create")
        logger.info("Created analysis %s for %s", analysis.id, analysis.filename)
        return analysis.to_dict()

    def get(self, analysis_id: str) -> Optional[Dict[str, Any]]:
        analysis = self._query("read", lambda: self.db.session.get(Analysis, analysis_id))
        return analysis.to_dict() if analysis else None

    def update(self, analysis_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow-merge ``fields`` (camelCase keys) onto the stored record."""
        columns = _columns(fields, FIELD_MAP)
        analysis = self._query("read", lambda: self.db.session.get(Analysis, analysis_id))
        if analysis is None:
            return None
        for attr, value in columns.items():
            setattr(analysis, attr, value)
        self._commit("update")
        return analysis.to_dict()

    def delete(self, analysis_id: str) -> bool:
        analysis = self._query("read", lambda: self.db.session.get(Analysis, analysis_id))
        if analysis is None:
            return False
        self.session.delete(analysis)
        self._commit("delete")
        logger.info("Deleted analysis %s", analysis_id)
        return True

    def list_recent(self, limit: int = 10) -> List[Dict[str, Any]]:
        rows = self._query("list", lambda: (
            Analysis.query
            .order_by(Analysis.uploaded_at.desc())
            .limit(limit)
            .all()
        ))
        return [a.to_dict() for a in rows]

    def list_by_status(self, status: str) -> List[Dict[str, Any]]:
        rows = self._query("list", lambda: Analysis.query.filter_by(status=status).all())
        return [a.to_dict() for a in rows]

    # ── Users (stub identity only) ────────────────────────────────────────────

    def create_user(self, username: str, password: str) -> Dict[str, Any]:
        user = User(username=username, password=password)
        self.session.add(user)
        self._commit("create user for")
        return user.to_dict()

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        user = self._query("read", lambda: self.db.session.get(User, user_id))
        return user.to_dict() if user else None

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        user = self._query("read", lambda: User.query.filter_by(username=username).first())
        return user.to_dict() if user else None
