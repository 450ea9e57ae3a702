from __future__ import annotations

from leadengine.llm.provider import ChatTurn
from leadengine.schemas.tenant_config import TenantAIConfig
from leadengine.services.hot_lead_classifier import HotLeadClassifier

TWO_KEYWORDS = "What's the price? This is urgent."
ONE_KEYWORD = "Can you send a quote?"


def test_keyword_score_stands_when_ai_fails(stub_provider):
    provider = stub_provider(fail=True)
    result = HotLeadClassifier(provider=provider, threshold=60).classify(TWO_KEYWORDS)

    assert result.score == 50
    assert result.method == "keyword"
    assert result.is_hot_lead is False
    assert sorted(result.keywords) == ["price", "urgent"]
    assert len(provider.urgency_calls) == 1


def test_keyword_score_without_provider():
    result = HotLeadClassifier(provider=None, threshold=60).classify(TWO_KEYWORDS)
    assert (result.score, result.method) == (50, "keyword")


def test_ai_score_wins_when_higher(stub_provider):
    result = HotLeadClassifier(provider=stub_provider(urgency=80), threshold=60).classify(ONE_KEYWORD)

    assert result.score == 80
    assert result.is_hot_lead is True
    assert result.method == "ai_enhanced"
    assert result.keywords == ["quote"]


def test_keyword_score_wins_when_ai_is_lower(stub_provider):
    result = HotLeadClassifier(provider=stub_provider(urgency=10), threshold=60).classify(TWO_KEYWORDS)
    assert result.score == 50
    assert result.method == "ai_enhanced"


def test_ai_receives_last_three_turns(stub_provider):
    provider = stub_provider(urgency=0)
    history = [ChatTurn(role="user", content=f"turn {index}") for index in range(6)]
    HotLeadClassifier(provider=provider, threshold=60).classify("hello there", history)

    _text, context = provider.urgency_calls[0]
    assert [turn.content for turn in context] == ["turn 3", "turn 4", "turn 5"]


def test_lead_detection_disabled_skips_ai(stub_provider):
    provider = stub_provider(urgency=100)
    config = TenantAIConfig(lead_detection_enabled=False)
    result = HotLeadClassifier(provider=provider, threshold=60).classify(ONE_KEYWORD, (), config)

    assert result.score == 25
    assert provider.urgency_calls == []


def test_tenant_keywords_extend_defaults():
    config = TenantAIConfig(hot_lead_keywords=["Water Heater", "leak"])
    result = HotLeadClassifier(threshold=60).classify("My water heater has a leak, price?", (), config)
    assert result.keywords == ["price", "water heater", "leak"]
    assert result.score == 75
    assert result.is_hot_lead is True


def test_score_is_capped_and_empty_message_is_cold():
    loud = "urgent asap emergency budget price quote"
    assert HotLeadClassifier(threshold=60).classify(loud).score == 100
    quiet = HotLeadClassifier(threshold=60).classify("")
    assert (quiet.score, quiet.is_hot_lead, quiet.reasoning) == (0, False, "No hot lead indicators")
