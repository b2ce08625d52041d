"""
analyzer/results.py — Value types produced by the scoring engine.

Everything serializes to the camelCase JSON shape the dashboard consumes.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SECTION_NAMES = (
    "technicalSpecs",
    "budgetDetails",
    "timeline",
    "environmental",
    "safety",
    "legalCompliance",
)

LEVELS = ("low", "medium", "high")


def zero_sections() -> Dict[str, int]:
    return {name: 0 for name in SECTION_NAMES}


@dataclass
class RiskFactor:
    category: str
    description: str
    level: str
    probability: int
    impact: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "category": self.category,
            "description": self.description,
            "level": self.level,
            "probability": self.probability,
        }
        if self.impact is not None:
            data["impact"] = self.impact
        return data


@dataclass
class ComplianceIssue:
    title: str
    description: str
    severity: str
    section: Optional[str] = None
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "title": self.title,
            "description": self.description,
            "severity": self.severity,
        }
        if self.section is not None:
            data["section"] = self.section
        if self.recommendation is not None:
            data["recommendation"] = self.recommendation
        return data


@dataclass
class AnalysisData:
    sections: Dict[str, int] = field(default_factory=zero_sections)
    detailed_findings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    missing_elements: List[str] = field(default_factory=list)
    agent_review: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "sections": {name: self.sections.get(name, 0) for name in SECTION_NAMES},
            "detailedFindings": list(self.detailed_findings),
            "recommendations": list(self.recommendations),
            "missingElements": list(self.missing_elements),
        }
        if self.agent_review is not None:
            data["agentReview"] = self.agent_review
        return data


@dataclass
class AnalysisResult:
    overall_score: int
    completeness_score: int
    compliance_score: int
    risk_level: str
    risk_factors: List[RiskFactor] = field(default_factory=list)
    compliance_issues: List[ComplianceIssue] = field(default_factory=list)
    analysis_data: AnalysisData = field(default_factory=AnalysisData)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "completenessScore": self.completeness_score,
            "complianceScore": self.compliance_score,
            "riskLevel": self.risk_level,
            "riskFactors": [r.to_dict() for r in self.risk_factors],
            "complianceIssues": [c.to_dict() for c in self.compliance_issues],
            "analysisData": self.analysis_data.to_dict(),
        }


@dataclass
class AgentResponse:
    agent_name: str
    score: int
    severity: str
    findings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agentName": self.agent_name,
            "score": self.score,
            "severity": self.severity,
            "findings": list(self.findings),
            "recommendations": list(self.recommendations),
        }
