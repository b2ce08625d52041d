"""
analyzer/__init__.py — ScoringEngine: strategy selection and fallback.

Chooses the remote model when a credential is configured and the local
keyword heuristic otherwise. Remote failures never reach the caller: they
are logged and the document is re-scored locally. When enabled, the
multi-agent review is attached to the result's analysis data.
"""
import logging
import random
from typing import Any, Mapping, Optional

from analyzer import agents
from analyzer.errors import ScoringError
from analyzer.heuristic import HeuristicScorer
from analyzer.remote import RemoteScorer
from analyzer.results import AnalysisResult

logger = logging.getLogger(__name__)


class ScoringEngine:
    """Scores extracted DPR text into a bounded AnalysisResult."""

    def __init__(
        self,
        local: HeuristicScorer,
        remote: Optional[RemoteScorer] = None,
        agent_review: bool = True,
    ):
        self.local = local
        self.remote = remote
        self.agent_review = agent_review

    @classmethod
    def from_config(cls, config: Mapping[str, Any],
                    rng: Optional[random.Random] = None) -> "ScoringEngine":
        if rng is None:
            seed = config.get("SCORING_SEED")
            rng = random.Random(seed) if seed is not None else random.Random()

        remote = None
        api_key = config.get("OPENAI_API_KEY")
        if api_key:
            remote = RemoteScorer(
                api_key=api_key,
                model=config.get("OPENAI_MODEL", "gpt-3.5-turbo"),
                base_url=config.get("OPENAI_BASE_URL", "https://api.openai.com/v1"),
                timeout=config.get("OPENAI_TIMEOUT_SECONDS", 30),
                text_limit=config.get("REMOTE_TEXT_LIMIT", 8000),
            )
        else:
            logger.info("No OPENAI_API_KEY configured; using local analysis only")

        return cls(
            local=HeuristicScorer(rng),
            remote=remote,
            agent_review=config.get("AGENT_REVIEW_ENABLED", True),
        )

    @property
    def rng(self) -> random.Random:
        return self.local.rng

    @rng.setter
    def rng(self, value: random.Random) -> None:
        self.local.rng = value

    def score(self, text: str, filename: str) -> AnalysisResult:
        result = self._score_with_fallback(text, filename)
        if self.agent_review:
            result.analysis_data.agent_review = agents.review(
                text, result.analysis_data.sections
            )
        return result

    def _score_with_fallback(self, text: str, filename: str) -> AnalysisResult:
        if self.remote is not None:
            try:
                return self.remote.score(text, filename)
            except ScoringError as exc:
                logger.warning("Remote scoring failed for %s, falling back to local: %s",
                               filename, exc)
        return self.local.score(text, filename)
