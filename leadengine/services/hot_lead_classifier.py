"""Keyword + AI hybrid detection of hot-lead intent in inbound messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from leadengine.core.config import get_config
from leadengine.core.exceptions import ClassificationDegraded, ProviderError
from leadengine.llm.provider import AIProvider, ChatTurn
from leadengine.schemas.tenant_config import TenantAIConfig

logger = logging.getLogger(__name__)

DEFAULT_HOT_LEAD_KEYWORDS = (
    "urgent", "asap", "immediately", "emergency", "deadline",
    "budget", "price", "cost", "money", "payment", "buy", "purchase",
    "interested", "ready to start", "when can we", "schedule", "i need",
    "meeting", "call me", "phone", "contact",
    "problem", "issue", "broken", "not working", "help",
    "competitor", "other company", "comparing", "quote",
)
POINTS_PER_KEYWORD = 25
AI_CONTEXT_TURNS = 3

METHOD_KEYWORD = "keyword"
METHOD_AI_ENHANCED = "ai_enhanced"


@dataclass(frozen=True)
class HotLeadAssessment:
    is_hot_lead: bool
    score: int
    reasoning: str
    keywords: list[str] = field(default_factory=list)
    method: str = METHOD_KEYWORD


class HotLeadClassifier:
    """Scores a message 0-100; ``max(keyword, ai)`` decides, never raises."""

    def __init__(self, provider: AIProvider | None = None, threshold: int | None = None) -> None:
        self.provider = provider
        self.threshold = threshold if threshold is not None else get_config().HOT_LEAD_THRESHOLD

    @staticmethod
    def match_keywords(message: str, tenant_keywords: Sequence[str] = ()) -> list[str]:
        lowered = (message or "").lower()
        matched: list[str] = []
        for keyword in (*DEFAULT_HOT_LEAD_KEYWORDS, *tenant_keywords):
            keyword = keyword.strip().lower()
            if keyword and keyword not in matched and keyword in lowered:
                matched.append(keyword)
        return matched

    def _ai_score(self, message: str, history: Sequence[ChatTurn]):
        try:
            return self.provider.classify_urgency(message, list(history)[-AI_CONTEXT_TURNS:])
        except ProviderError as exc:
            raise ClassificationDegraded(str(exc)) from exc

    def classify(
        self,
        message: str,
        history: Sequence[ChatTurn] = (),
        tenant_config: TenantAIConfig | None = None,
    ) -> HotLeadAssessment:
        tenant_config = tenant_config or TenantAIConfig()
        keywords = self.match_keywords(message, tenant_config.hot_lead_keywords)
        basic_score = min(100, POINTS_PER_KEYWORD * len(keywords))
        reasoning = f"Detected keywords: {', '.join(keywords)}" if keywords else "No hot lead indicators"

        if self.provider is not None and tenant_config.lead_detection_enabled:
            try:
                assessment = self._ai_score(message, history)
            except ClassificationDegraded as exc:
                logger.warning(
                    "hot_lead.classification_degraded",
                    extra={
                        "event": "hot_lead.classification_degraded",
                        "tenant_id": tenant_config.tenant_id,
                        "error": str(exc),
                    },
                )
            else:
                final_score = max(basic_score, assessment.score)
                return HotLeadAssessment(
                    is_hot_lead=final_score >= self.threshold,
                    score=final_score,
                    reasoning=assessment.reasoning,
                    keywords=keywords,
                    method=METHOD_AI_ENHANCED,
                )

        return HotLeadAssessment(
            is_hot_lead=basic_score >= self.threshold,
            score=basic_score,
            reasoning=reasoning,
            keywords=keywords,
            method=METHOD_KEYWORD,
        )
