"""
analyzer/agents.py — Independent rule evaluators and their consensus.

Each agent is a plain function ``evaluate(content) -> AgentResponse``. The
agents read the same input and never each other's output, so run_agents()
fans them out on a thread pool and build_consensus() merges the results.
"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional

from analyzer.results import AgentResponse

logger = logging.getLogger(__name__)


@dataclass
class AgentInput:
    text: str
    sections: Dict[str, int] = field(default_factory=dict)
    budget_amount: Optional[float] = None
    duration_days: Optional[float] = None

    @classmethod
    def from_document(cls, text: str, sections: Dict[str, int]) -> "AgentInput":
        return cls(
            text=text,
            sections=dict(sections),
            budget_amount=find_budget_amount(text),
            duration_days=find_duration_days(text),
        )


class Agent(NamedTuple):
    name: str
    evaluate: Callable[[AgentInput], AgentResponse]


# ── Facts pulled from the text ───────────────────────────────────────────────

_AMOUNT_PATTERN = re.compile(
    r"(?:\brs\.?|\binr|₹|\$|\busd)\s*([\d,]+(?:\.\d+)?)\s*(crores?|lakhs?|lacs?|millions?)?",
    re.IGNORECASE,
)
_AMOUNT_MULTIPLIERS = {"crore": 1e7, "lakh": 1e5, "lac": 1e5, "million": 1e6}

_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(day|week|month|year)s?\b", re.IGNORECASE)
_DAYS_PER_UNIT = {"day": 1, "week": 7, "month": 30, "year": 365}


def find_budget_amount(text: str) -> Optional[float]:
    """Largest currency amount stated in the text, or None."""
    amounts = []
    for number, unit in _AMOUNT_PATTERN.findall(text):
        digits = number.replace(",", "")
        if not digits or digits == ".":
            continue
        multiplier = 1.0
        if unit:
            multiplier = _AMOUNT_MULTIPLIERS[unit.lower().rstrip("s")]
        amounts.append(float(digits) * multiplier)
    return max(amounts) if amounts else None


def find_duration_days(text: str) -> Optional[float]:
    """Longest duration stated in the text, converted to days, or None."""
    durations = [
        float(number) * _DAYS_PER_UNIT[unit.lower()]
        for number, unit in _DURATION_PATTERN.findall(text)
    ]
    return max(durations) if durations else None


def _mentions(text: str, terms: List[str]) -> int:
    lowered = text.lower()
    return sum(1 for term in terms if term in lowered)


def _severity(score: int, high_below: int, medium_below: int) -> str:
    if score < high_below:
        return "high"
    if score < medium_below:
        return "medium"
    return "low"


# ── Agents ────────────────────────────────────────────────────────────────────

def evaluate_compliance(content: AgentInput) -> AgentResponse:
    findings: List[str] = []
    recommendations: List[str] = []
    score = 85

    if content.sections.get("environmental", 0) < 50:
        findings.append("Missing environmental impact assessment")
        recommendations.append("Include detailed environmental compliance documentation")
        score -= 15

    if content.sections.get("safety", 0) < 50:
        findings.append("Insufficient safety protocols documentation")
        recommendations.append("Add comprehensive safety management plan")
        score -= 10

    if _mentions(content.text, ["approval", "clearance", "permit", "authorization", "compliance"]) < 3:
        findings.append("Limited regulatory compliance documentation")
        score -= 8

    if not findings:
        findings.append("All major compliance requirements appear to be addressed")

    score = max(0, score)
    return AgentResponse("Compliance Specialist", score, _severity(score, 60, 75),
                         findings, recommendations)


def evaluate_financial(content: AgentInput) -> AgentResponse:
    findings: List[str] = []
    recommendations: List[str] = []
    score = 80

    budget = content.budget_amount
    if not budget or budget <= 0:
        findings.append("Budget information missing or incomplete")
        recommendations.append("Provide detailed budget breakdown with cost justifications")
        score -= 20
    elif budget > 10_000_000:  # 1 crore
        findings.append("Budget exceeds typical project limits - requires special approval")
        recommendations.append("Include detailed cost-benefit analysis for high-value project")
        score -= 5
    elif budget < 100_000:  # 1 lakh
        findings.append("Budget appears unusually low for infrastructure project")
        recommendations.append("Verify all cost components are included")
        score -= 8

    if _mentions(content.text, ["cost", "budget", "expense", "funding", "allocation"]) < 3:
        findings.append("Limited financial documentation")
        score -= 10

    if not findings:
        findings.append("Budget and financial planning appears adequate")

    score = max(0, score)
    return AgentResponse("Financial Analyst", score, _severity(score, 50, 70),
                         findings, recommendations)


def evaluate_risk(content: AgentInput) -> AgentResponse:
    findings: List[str] = []
    recommendations: List[str] = []
    score = 75

    if content.duration_days and content.duration_days > 730:
        findings.append("Extended timeline increases project risk")
        recommendations.append("Consider phase-wise implementation to reduce timeline risks")
        score -= 10

    if _mentions(content.text, ["risk", "challenge", "mitigation", "contingency", "delay"]) < 2:
        findings.append("Insufficient risk assessment documentation")
        recommendations.append("Include comprehensive risk analysis and mitigation strategies")
        score -= 15

    if _mentions(content.text, ["flood", "earthquake", "weather", "monsoon", "environmental"]) == 0:
        findings.append("Environmental risk factors not adequately addressed")
        recommendations.append("Include environmental risk assessment")
        score -= 8

    if not findings:
        findings.append("Risk assessment appears comprehensive")

    score = max(0, score)
    return AgentResponse("Risk Assessment Specialist", score, _severity(score, 55, 70),
                         findings, recommendations)


def evaluate_summary(content: AgentInput) -> AgentResponse:
    findings: List[str] = []
    recommendations: List[str] = []
    score = 78

    if _mentions(content.text, ["introduction", "objective", "scope", "methodology", "conclusion"]) < 3:
        findings.append("Document lacks clear organizational structure")
        recommendations.append(
            "Include standard DPR sections: Introduction, Objectives, Scope, Implementation Plan"
        )
        score -= 12

    if _mentions(content.text, ["summary", "executive"]) == 0:
        findings.append("Missing executive summary section")
        recommendations.append("Add executive summary for quick decision-making reference")
        score -= 8

    if len(content.text.split()) < 500:
        findings.append("Document appears too brief for comprehensive DPR")
        recommendations.append("Expand documentation with detailed project information")
        score -= 15

    if not findings:
        findings.append("Document structure and presentation is well-organized")

    score = max(0, score)
    return AgentResponse("Executive Summary Specialist", score, _severity(score, 60, 75),
                         findings, recommendations)


AGENTS = (
    Agent("Compliance Specialist", evaluate_compliance),
    Agent("Financial Analyst", evaluate_financial),
    Agent("Risk Assessment Specialist", evaluate_risk),
    Agent("Executive Summary Specialist", evaluate_summary),
)


def neutral_response(agent_name: str) -> AgentResponse:
    return AgentResponse(
        agent_name=agent_name,
        score=50,
        severity="medium",
        findings=["Analysis temporarily unavailable"],
        recommendations=["Manual review recommended"],
    )


def run_agents(content: AgentInput, agents=AGENTS) -> List[AgentResponse]:
    """Run every agent concurrently; a failing agent yields its neutral response."""
    if not agents:
        return []
    with ThreadPoolExecutor(max_workers=len(agents), thread_name_prefix="dpr-agent") as pool:
        futures = [(agent, pool.submit(agent.evaluate, content)) for agent in agents]
        responses = []
        for agent, future in futures:
            try:
                responses.append(future.result())
            except Exception as exc:
                logger.error("Agent %s failed: %s", agent.name, exc, exc_info=True)
                responses.append(neutral_response(agent.name))
    return responses


# ── Consensus ────────────────────────────────────────────────────────────────

CRITICAL_HIGH_COUNT = 2
MAX_PRIORITY_ACTIONS = 5

ASSESSMENTS = {
    "CRITICAL": "CRITICAL: Multiple agents detected severe compliance issues. Immediate review required.",
    "EXCELLENT": "EXCELLENT: DPR meets high standards across all evaluation criteria.",
    "ACCEPTABLE": "ACCEPTABLE: DPR meets basic requirements but has areas for improvement.",
    "NEEDS REVISION": "NEEDS REVISION: DPR requires significant improvements before approval.",
}


def assessment_level(responses: List[AgentResponse]) -> str:
    high_count = sum(1 for r in responses if r.severity == "high")
    if high_count >= CRITICAL_HIGH_COUNT:
        return "CRITICAL"
    avg_score = sum(r.score for r in responses) / len(responses) if responses else 0
    if avg_score >= 80:
        return "EXCELLENT"
    if avg_score >= 60:
        return "ACCEPTABLE"
    return "NEEDS REVISION"


def priority_actions(responses: List[AgentResponse]) -> List[str]:
    """Unique recommendations in agent-then-emission order, first five."""
    seen = dict.fromkeys(rec for r in responses for rec in r.recommendations)
    return list(seen)[:MAX_PRIORITY_ACTIONS]


def build_consensus(responses: List[AgentResponse]) -> Dict[str, object]:
    level = assessment_level(responses)
    return {
        "agentResponses": [r.to_dict() for r in responses],
        "assessmentLevel": level,
        "overallAssessment": ASSESSMENTS[level],
        "priorityActions": priority_actions(responses),
    }


def review(text: str, sections: Dict[str, int], agents=AGENTS) -> Dict[str, object]:
    """Run the full multi-agent review for one document."""
    responses = run_agents(AgentInput.from_document(text, sections), agents)
    consensus = build_consensus(responses)
    logger.info("Agent review: %s with %d priority action(s)",
                consensus["assessmentLevel"], len(consensus["priorityActions"]))
    return consensus
