"""
analyzer/heuristic.py — Local keyword-density scoring strategy.

Each of the six DPR sections is scored by how densely its keywords occur
(hits per 1000 characters). The density picks a score band and a random
jitter places the score inside that band, so scores rise monotonically with
density without pretending to more precision than a keyword count has.
"""
import logging
import math
import random
from typing import Dict, List

from analyzer.results import (
    SECTION_NAMES, AnalysisData, AnalysisResult, ComplianceIssue, RiskFactor,
)

logger = logging.getLogger(__name__)

SECTION_KEYWORDS: Dict[str, List[str]] = {
    "technicalSpecs":  ["technical", "specification", "design", "architecture", "system"],
    "budgetDetails":   ["budget", "cost", "financial", "expense", "fund", "money", "price"],
    "timeline":        ["timeline", "schedule", "deadline", "milestone", "phase", "duration"],
    "environmental":   ["environment", "impact", "sustainability", "eco", "green", "pollution"],
    "safety":          ["safety", "security", "risk", "hazard", "protection", "precaution"],
    "legalCompliance": ["legal", "compliance", "regulation", "law", "policy", "standard"],
}

# (density strictly above, band low, band width)
DENSITY_BANDS = [
    (5.0, 90, 10),
    (3.0, 70, 20),
    (1.0, 50, 20),
    (0.5, 30, 20),
]
LOWEST_BAND = (0, 30)

OVERALL_JITTER = 10
COMPLIANCE_JITTER = 20

RISK_LEVELS = [
    (75, "low"),
    (50, "medium"),
]

SAFETY_RISK_THRESHOLD = 60
LEGAL_ISSUE_THRESHOLD = 70
WELL_DOCUMENTED = 75
PARTIAL = 50


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, value)))


def keyword_density(text: str, keywords: List[str]) -> float:
    """Keyword hits per 1000 characters; empty text has density 0."""
    if not text:
        return 0.0
    lowered = text.lower()
    hits = sum(lowered.count(keyword) for keyword in keywords)
    return hits / (len(text) / 1000)


def band_for(density: float) -> tuple[int, int]:
    for threshold, low, width in DENSITY_BANDS:
        if density > threshold:
            return low, width
    return LOWEST_BAND


def jitter(rng: random.Random, width: int) -> int:
    """Uniform integer offset in [0, width)."""
    return min(int(rng.random() * width), width - 1)


def score_section(text: str, keywords: List[str], rng: random.Random) -> int:
    low, width = band_for(keyword_density(text, keywords))
    return low + jitter(rng, width)


def risk_level_for(overall_score: int) -> str:
    for threshold, label in RISK_LEVELS:
        if overall_score >= threshold:
            return label
    return "high"


class HeuristicScorer:
    """Deterministic-up-to-jitter scorer; needs no network and never suspends."""

    name = "local"

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def score(self, text: str, filename: str) -> AnalysisResult:
        sections = {
            name: score_section(text, SECTION_KEYWORDS[name], self.rng)
            for name in SECTION_NAMES
        }
        completeness = round_half_up(sum(sections.values()) / len(sections))
        overall = min(completeness + jitter(self.rng, OVERALL_JITTER), 100)
        compliance = clamp(sections["legalCompliance"] + jitter(self.rng, COMPLIANCE_JITTER))

        data = AnalysisData(sections=sections)
        for name in SECTION_NAMES:
            section_score = sections[name]
            if section_score < PARTIAL:
                data.missing_elements.append(f"{name} section needs improvement")
                data.recommendations.append(f"Enhance {name} documentation")
            elif section_score < WELL_DOCUMENTED:
                data.detailed_findings.append(f"{name} section is partially complete")
            else:
                data.detailed_findings.append(f"{name} section is well documented")

        risk_factors = []
        if sections["safety"] < SAFETY_RISK_THRESHOLD:
            risk_factors.append(RiskFactor(
                category="Safety Concerns",
                description="Safety documentation appears incomplete",
                level="medium",
                probability=70,
                impact="Gaps in safety planning can cause site incidents, stoppages and liability claims",
            ))

        compliance_issues = []
        if sections["legalCompliance"] < LEGAL_ISSUE_THRESHOLD:
            compliance_issues.append(ComplianceIssue(
                title="Compliance Documentation",
                description="Legal compliance section may need additional details",
                severity="medium",
                section="legalCompliance",
                recommendation="List applicable regulations, clearances and permits with their status",
            ))

        logger.info("Local scoring of %s: overall=%d completeness=%d compliance=%d",
                    filename, overall, completeness, compliance)
        return AnalysisResult(
            overall_score=overall,
            completeness_score=completeness,
            compliance_score=compliance,
            risk_level=risk_level_for(overall),
            risk_factors=risk_factors,
            compliance_issues=compliance_issues,
            analysis_data=data,
        )
