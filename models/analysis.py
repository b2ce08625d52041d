"""models/analysis.py — SQLAlchemy model for DPR analysis records."""
import datetime
import uuid

from extensions import db

STATUSES = ("processing", "completed", "failed")


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp; SQLite drops tzinfo anyway."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _isoformat(value):
    return value.isoformat() + "Z" if value else None


class Analysis(db.Model):
    __tablename__ = "dpr_analyses"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    filename = db.Column(db.String(255), nullable=False)
    file_type = db.Column(db.String(128), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    uploaded_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    analyzed_at = db.Column(db.DateTime)
    status = db.Column(db.String(16), nullable=False, default="processing", index=True)

    # Scores, 0-100
    overall_score = db.Column(db.Integer)
    completeness_score = db.Column(db.Integer)
    compliance_score = db.Column(db.Integer)

    # Risk assessment
    risk_level = db.Column(db.String(8))          # 'low' | 'medium' | 'high'
    risk_factors = db.Column(db.JSON)
    compliance_issues = db.Column(db.JSON)

    extracted_text = db.Column(db.Text)
    analysis_data = db.Column(db.JSON)

    language = db.Column(db.String(8), default="en")
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"))

    def to_dict(self):
        return {
            "id": self.id,
            "filename": self.filename,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "uploadedAt": _isoformat(self.uploaded_at),
            "analyzedAt": _isoformat(self.analyzed_at),
            "status": self.status,
            "overallScore": self.overall_score,
            "completenessScore": self.completeness_score,
            "complianceScore": self.compliance_score,
            "riskLevel": self.risk_level,
            "riskFactors": self.risk_factors,
            "complianceIssues": self.compliance_issues,
            "extractedText": self.extracted_text,
            "analysisData": self.analysis_data,
            "language": self.language,
            "createdBy": self.created_by,
        }

    def __repr__(self):
        return f"<Analysis {self.id} status={self.status} file={self.filename}>"
