"""
analyzer/remote.py — Remote LLM scoring strategy.

Sends a bounded prefix of the document to an OpenAI-compatible chat
completions endpoint and normalizes the reply. The reply is untrusted:
normalize_result() forces every number into [0, 100] and every enum into its
valid set instead of failing.
"""
import json
import logging
from typing import Any, Dict, List

import requests

from analyzer.errors import RemoteScoringError
from analyzer.heuristic import round_half_up
from analyzer.results import (
    LEVELS, SECTION_NAMES, AnalysisData, AnalysisResult, ComplianceIssue, RiskFactor,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert DPR (Detailed Project Report) analyst. Analyze documents "
    "thoroughly and provide detailed assessments in valid JSON format."
)

RESPONSE_SHAPE = """{
  "overallScore": number (0-100),
  "completenessScore": number (0-100),
  "complianceScore": number (0-100),
  "riskLevel": "low" | "medium" | "high",
  "riskFactors": [
    {"category": "string", "description": "string", "level": "low" | "medium" | "high",
     "probability": number (0-100), "impact": "string"}
  ],
  "complianceIssues": [
    {"title": "string", "description": "string", "severity": "low" | "medium" | "high",
     "section": "string", "recommendation": "string"}
  ],
  "analysisData": {
    "sections": {
      "technicalSpecs": number (0-100),
      "budgetDetails": number (0-100),
      "timeline": number (0-100),
      "environmental": number (0-100),
      "safety": number (0-100),
      "legalCompliance": number (0-100)
    },
    "detailedFindings": ["string"],
    "recommendations": ["string"],
    "missingElements": ["string"]
  }
}"""

FOCUS_AREAS = [
    "Technical specifications completeness",
    "Budget and financial details",
    "Project timeline and milestones",
    "Environmental impact assessment",
    "Safety protocols and measures",
    "Legal and regulatory compliance",
]


def build_prompt(text: str, filename: str, limit: int = 8000) -> str:
    excerpt = text[:limit]
    if len(text) > limit:
        excerpt += " ...(truncated)"
    focus = "\n".join(f"{i}. {area}" for i, area in enumerate(FOCUS_AREAS, start=1))
    return (
        "Analyze this DPR (Detailed Project Report) document and provide a "
        "comprehensive assessment:\n\n"
        f"Document: {filename}\n"
        f"Content: {excerpt}\n\n"
        "Please analyze and return a JSON response with the following structure:\n"
        f"{RESPONSE_SHAPE}\n\n"
        f"Focus on:\n{focus}\n"
    )


# ── Normalization ───────────────────────────────────────────────────────────

def _score(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if isinstance(value, int):
        # Clamp before any float conversion; huge ints overflow float().
        return max(0, min(100, value))
    if not isinstance(value, float) or value != value:  # NaN
        return 0
    return round_half_up(max(0.0, min(100.0, value)))


def _level(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in LEVELS:
        return value.strip().lower()
    return "medium"


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _risk_factors(value: Any) -> List[RiskFactor]:
    if not isinstance(value, list):
        return []
    return [
        RiskFactor(
            category=_text(item.get("category"), "General"),
            description=_text(item.get("description")),
            level=_level(item.get("level")),
            probability=_score(item.get("probability")),
            impact=_optional_text(item.get("impact")),
        )
        for item in value if isinstance(item, dict)
    ]


def _compliance_issues(value: Any) -> List[ComplianceIssue]:
    if not isinstance(value, list):
        return []
    return [
        ComplianceIssue(
            title=_text(item.get("title"), "Compliance Issue"),
            description=_text(item.get("description")),
            severity=_level(item.get("severity")),
            section=_optional_text(item.get("section")),
            recommendation=_optional_text(item.get("recommendation")),
        )
        for item in value if isinstance(item, dict)
    ]


def normalize_result(payload: Any) -> AnalysisResult:
    """Coerce an arbitrary decoded JSON value into a valid AnalysisResult."""
    if not isinstance(payload, dict):
        payload = {}
    data = payload.get("analysisData")
    if not isinstance(data, dict):
        data = {}
    sections = data.get("sections")
    if not isinstance(sections, dict):
        sections = {}

    return AnalysisResult(
        overall_score=_score(payload.get("overallScore")),
        completeness_score=_score(payload.get("completenessScore")),
        compliance_score=_score(payload.get("complianceScore")),
        risk_level=_level(payload.get("riskLevel")),
        risk_factors=_risk_factors(payload.get("riskFactors")),
        compliance_issues=_compliance_issues(payload.get("complianceIssues")),
        analysis_data=AnalysisData(
            sections={name: _score(sections.get(name)) for name in SECTION_NAMES},
            detailed_findings=_strings(data.get("detailedFindings")),
            recommendations=_strings(data.get("recommendations")),
            missing_elements=_strings(data.get("missingElements")),
        ),
    )


# ── Client ───────────────────────────────────────────────────────────────────

class RemoteScorer:
    """Scores documents through an OpenAI-compatible chat completions API."""

    name = "remote"

    def __init__(self, api_key: str, model: str = "gpt-3.5-turbo",
                 base_url: str = "https://api.openai.com/v1",
                 timeout: float = 30, text_limit: int = 8000,
                 session: requests.Session | None = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.text_limit = text_limit
        self.session = session or requests.Session()

    def score(self, text: str, filename: str) -> AnalysisResult:
        content = self._complete(build_prompt(text, filename, self.text_limit))
        try:
            payload = json.loads(content)
        except ValueError as exc:
            raise RemoteScoringError(f"Invalid response format from model: {exc}") from exc
        except RecursionError as exc:
            raise RemoteScoringError("Model response is nested too deeply") from exc
        try:
            return normalize_result(payload)
        except Exception as exc:
            raise RemoteScoringError(f"Could not normalize model response: {exc}") from exc

    def _complete(self, prompt: str) -> str:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.3,
            "max_tokens": 2000,
            "response_format": {"type": "json_object"},
        }
        try:
            resp = self.session.post(
                f"{self.base_url}/chat/completions",
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            reply = resp.json()
        except requests.Timeout as exc:
            raise RemoteScoringError(f"Model call timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise RemoteScoringError(f"Model call failed: {exc}") from exc
        except (ValueError, RecursionError) as exc:
            raise RemoteScoringError(f"Model returned non-JSON body: {exc}") from exc

        try:
            content = reply["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise RemoteScoringError("No response content from model") from exc
        if not isinstance(content, str) or not content.strip():
            raise RemoteScoringError("No response content from model")
        return content
