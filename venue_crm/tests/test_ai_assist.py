"""
AI Helper Test Module

Tests for venue_crm/services/ai_assist.py. The language model is replaced by
StubTextGenerator from conftest.py, which returns canned text and records
the prompts it receives.

Test Coverage:
- JSON extraction from free-form model answers
- Normalization of model output (clamping, enum matching, list cleanup)
- Documented fallbacks for missing generator, generator errors and non-JSON answers
- Rule-based manager digest computed from the records
- Timeline touchpoints always counted from the records
- GroqTextGenerator request shape against a mocked AsyncGroq client
"""

import json
from datetime import date, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from venue_crm.models import (
    FollowUpType,
    InteractionStatus,
    LeadQualityScore,
    Likelihood,
    Priority,
    Sentiment,
)
from venue_crm.services.ai_assist import (
    AIUnavailableError,
    GroqTextGenerator,
    build_manager_digest,
    build_rule_based_digest,
    draft_follow_up,
    generate_structured_text,
    interactions_on,
    score_lead,
    suggest_next_action,
    summarize_timeline,
    tag_intent,
)
from venue_crm.tests.conftest import (
    StubTextGenerator,
    make_interaction,
    make_lead,
)


def answer(payload: dict) -> StubTextGenerator:
    """Stub generator that wraps the JSON payload in some chatter."""
    return StubTextGenerator(response=f"Sure! Here it is:\n{json.dumps(payload)}\nThanks.")


# =============================================================================
# JSON Extraction
# =============================================================================

@pytest.mark.asyncio
class TestGenerateStructuredText:
    """Tests for pulling the JSON object out of a model answer."""

    async def test_extracts_object_from_prose(self) -> None:
        parsed = await generate_structured_text(answer({"score": 80}), "prompt")

        assert parsed == {"score": 80}

    async def test_no_object_returns_none(self) -> None:
        parsed = await generate_structured_text(StubTextGenerator("no json here"), "prompt")

        assert parsed is None

    async def test_invalid_json_raises(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            await generate_structured_text(StubTextGenerator("{not: json}"), "prompt")

    async def test_missing_generator_raises(self) -> None:
        with pytest.raises(AIUnavailableError):
            await generate_structured_text(None, "prompt")

    async def test_prompt_forwarded(self, stub_generator) -> None:
        await generate_structured_text(stub_generator, "hello")

        assert stub_generator.prompts == ["hello"]


# =============================================================================
# Lead Scoring
# =============================================================================

@pytest.mark.asyncio
class TestScoreLead:
    """Tests for score_lead normalization and fallbacks."""

    async def test_parsed_answer(self) -> None:
        generator = answer({
            "score": 86,
            "reasoning": "Large wedding, budget approved",
            "factors": {
                "eventType": "Wedding",
                "headcount": "120 guests",
                "sentiment": "POSITIVE",
                "keywords": ["budget approved", "", None, "June"],
            },
        })
        interaction = make_interaction("Ann", transcript="Wedding for 120 in June")

        result = await score_lead(generator, interaction, "Wedding", 120)

        assert result.score == 86
        assert result.factors.headcount == 120
        assert result.factors.sentiment == Sentiment.POSITIVE
        assert result.factors.keywords == ["budget approved", "June"]
        assert "Wedding for 120 in June" in generator.prompts[0]

    @pytest.mark.parametrize("raw,expected", [(150, 100), (-4, 0), ("abc", 50), (0, 0)])
    async def test_score_normalized(self, raw, expected) -> None:
        result = await score_lead(answer({"score": raw, "reasoning": "x"}), make_interaction("Ann"))

        assert result.score == expected

    async def test_missing_factors_use_request_values(self) -> None:
        result = await score_lead(answer({"score": 60}), make_interaction("Ann"), "Birthday", 30)

        assert result.reasoning == "Analysis completed"
        assert result.factors.eventType == "Birthday"
        assert result.factors.headcount == 30
        assert result.factors.sentiment == Sentiment.NEUTRAL

    async def test_overflowing_headcount_uses_request_value(self) -> None:
        generator = StubTextGenerator('{"score": 80, "factors": {"headcount": 1e999}}')

        result = await score_lead(generator, make_interaction("Ann"), "Wedding", 40)

        assert result.score == 80
        assert result.factors.headcount == 40

    async def test_no_generator_fallback(self) -> None:
        result = await score_lead(None, make_interaction("Ann"))

        assert result.score == 50
        assert result.reasoning == "Error analyzing lead"
        assert result.factors.eventType == "Unknown"

    async def test_generator_error_fallback(self) -> None:
        generator = StubTextGenerator(error=RuntimeError("rate limited"))

        result = await score_lead(generator, make_interaction("Ann"), "Wedding")

        assert result.reasoning == "Error analyzing lead"
        assert result.factors.eventType == "Wedding"

    async def test_non_json_fallback(self) -> None:
        result = await score_lead(StubTextGenerator("I cannot help"), make_interaction("Ann"))

        assert result.score == 50
        assert result.reasoning == "Unable to parse AI response"


# =============================================================================
# Intent, Next Action, Follow-up
# =============================================================================

@pytest.mark.asyncio
class TestInteractionHelpers:
    """Tests for tag_intent, suggest_next_action and draft_follow_up."""

    async def test_intent_parsed(self) -> None:
        generator = answer({
            "primaryIntent": "Availability check",
            "topics": ["dates", "capacity"],
            "urgency": "High",
            "confidence": 91,
        })

        tags = await tag_intent(generator, make_interaction("Ann"), "Wedding")

        assert tags.primaryIntent == "Availability check"
        assert tags.topics == ["dates", "capacity"]
        assert tags.urgency == Priority.HIGH
        assert tags.confidence == 91

    async def test_intent_fallback(self) -> None:
        tags = await tag_intent(None, make_interaction("Ann"), "Corporate")

        assert tags.primaryIntent == "General enquiry"
        assert tags.topics == ["Corporate"]
        assert tags.urgency == Priority.MEDIUM
        assert tags.confidence == 50

    async def test_next_action_parsed(self) -> None:
        generator = answer({
            "action": "Schedule venue tour",
            "reason": "High interest expressed",
            "priority": "urgent",
            "suggestedTemplate": "",
        })

        action = await suggest_next_action(generator, make_interaction("Ann"), make_lead("Ann"))

        assert action.action == "Schedule venue tour"
        assert action.priority == Priority.MEDIUM
        assert action.suggestedTemplate is None

    async def test_next_action_fallback(self) -> None:
        action = await suggest_next_action(StubTextGenerator(error=TimeoutError()), make_interaction("Ann"))

        assert action.action == "Follow up with customer"
        assert action.reason == "Continue engagement"

    async def test_email_fallback_has_subject(self) -> None:
        draft = await draft_follow_up(None, make_interaction("Ann"), venue_name="The Old Mill")

        assert draft.type == FollowUpType.EMAIL
        assert draft.subject == "Follow-up from The Old Mill"
        assert draft.suggestedTiming == "within 24 hours"

    async def test_sms_never_has_subject(self) -> None:
        generator = answer({"subject": "Hello", "message": "Hi Ann, tour on Friday?"})

        draft = await draft_follow_up(generator, make_interaction("Ann"), follow_up_type=FollowUpType.SMS)

        assert draft.subject is None
        assert draft.message == "Hi Ann, tour on Friday?"
        assert "160 characters" in generator.prompts[0]


# =============================================================================
# Manager Digest
# =============================================================================

class TestRuleBasedDigest:
    """Tests for the deterministic manager digest."""

    def test_sample_day(self, sample_leads, sample_bookings, sample_interactions) -> None:
        digest = build_rule_based_digest(
            sample_interactions, sample_leads, sample_bookings, today=date(2024, 7, 1)
        )

        assert digest.generatedBy == "rules"
        assert digest.summary == (
            "You had 3 interactions today. 5 leads and 3 bookings are on record."
        )
        assert digest.metrics.totalInteractions == 3
        assert digest.metrics.hotLeads == 1
        assert digest.metrics.atRisk == 1
        assert digest.metrics.cancellations == 1
        assert digest.highlights == [
            "1 hot leads ready to progress: Carol",
            "1 leads marked as lost",
            "1 cancelled bookings",
        ]
        assert digest.recommendations == [
            "Prioritise follow-ups with qualified leads",
            "Review cancelled bookings for rebooking opportunities",
            "Confirm 1 pending bookings",
        ]

    def test_missed_calls_today_are_at_risk(self) -> None:
        interactions = [
            make_interaction("Ann", datetime(2024, 7, 1, 9), status=InteractionStatus.MISSED),
            make_interaction("Ben", datetime(2024, 6, 30, 9), status=InteractionStatus.MISSED),
        ]

        digest = build_rule_based_digest(interactions, [], [], today=date(2024, 7, 1))

        assert digest.metrics.atRisk == 1
        assert "1 missed calls today" in digest.highlights

    def test_average_quality_score(self) -> None:
        leads = []
        for name, score in (("Ann", 80), ("Ben", 65)):
            lead = make_lead(name)
            lead.qualityScore = LeadQualityScore(
                score=score, reasoning="", factors={"eventType": "Wedding"}
            )
            leads.append(lead)
        leads.append(make_lead("Cat"))

        digest = build_rule_based_digest([], leads, [], today=date(2024, 7, 1))

        assert digest.metrics.avgQualityScore == 72.5

    def test_empty_day(self) -> None:
        digest = build_rule_based_digest([], [], [], today=date(2024, 7, 1))

        assert digest.highlights == []
        assert digest.recommendations == []
        assert digest.metrics.avgQualityScore == 0

    def test_interactions_on_skips_undated(self) -> None:
        interactions = [make_interaction("Ann"), make_interaction("Ben", datetime(2024, 7, 1, 23, 59))]

        assert [i.customer.name for i in interactions_on(interactions, date(2024, 7, 1))] == ["Ben"]


@pytest.mark.asyncio
class TestBuildManagerDigest:
    """Tests for the AI digest and its rule-based fallback."""

    async def test_no_generator_uses_rules(self, sample_leads, sample_bookings, sample_interactions) -> None:
        digest = await build_manager_digest(
            None, sample_interactions, sample_leads, sample_bookings, today=date(2024, 7, 1)
        )

        assert digest.generatedBy == "rules"

    async def test_non_json_uses_rules(self, sample_leads, sample_bookings, sample_interactions) -> None:
        digest = await build_manager_digest(
            StubTextGenerator("Busy day!"), sample_interactions, sample_leads, sample_bookings,
            today=date(2024, 7, 1),
        )

        assert digest.generatedBy == "rules"

    async def test_ai_digest(self, sample_leads, sample_bookings, sample_interactions) -> None:
        generator = answer({
            "summary": "Steady Monday with strong wedding interest.",
            "highlights": ["Alice called twice"],
            "metrics": {"totalInteractions": 99, "hotLeads": 2, "atRisk": -1,
                        "cancellations": 1, "avgQualityScore": 71.5},
            "recommendations": ["Call Alice back"],
        })

        digest = await build_manager_digest(
            generator, sample_interactions, sample_leads, sample_bookings, today=date(2024, 7, 1)
        )

        assert digest.generatedBy == "ai"
        assert digest.summary == "Steady Monday with strong wedding interest."
        assert digest.metrics.totalInteractions == 3
        assert digest.metrics.hotLeads == 2
        assert digest.metrics.atRisk == 0
        assert digest.metrics.avgQualityScore == 71.5
        assert "Bob: Contacted" in generator.prompts[0]

    async def test_overflowing_metrics_become_zero(self, sample_leads, sample_bookings, sample_interactions) -> None:
        generator = StubTextGenerator(
            '{"summary": "Quiet day", "metrics": {"hotLeads": 1e999, "avgQualityScore": -1e999}}'
        )

        digest = await build_manager_digest(
            generator, sample_interactions, sample_leads, sample_bookings, today=date(2024, 7, 1)
        )

        assert digest.generatedBy == "ai"
        assert digest.metrics.hotLeads == 0
        assert digest.metrics.avgQualityScore == 0


# =============================================================================
# Timeline Summary
# =============================================================================

@pytest.mark.asyncio
class TestSummarizeTimeline:
    """Tests for summarize_timeline."""

    async def test_touchpoints_counted_from_records(self, sample_interactions) -> None:
        generator = answer({
            "synopsis": "Two quick calls about a summer wedding.",
            "touchpoints": 12,
            "likelihoodToBook": "HIGH",
            "estimatedTimeframe": "2 weeks",
            "keyInsights": ["Flexible on date"],
        })

        summary = await summarize_timeline(generator, make_lead("alice"), sample_interactions)

        assert summary.touchpoints == 2
        assert summary.likelihoodToBook == Likelihood.HIGH
        assert summary.estimatedTimeframe == "2 weeks"
        assert "(2 touchpoints)" in generator.prompts[0]

    async def test_non_json_synopsis(self, sample_interactions) -> None:
        summary = await summarize_timeline(
            StubTextGenerator("hmm"), make_lead("Alice"), sample_interactions
        )

        assert summary.synopsis == "Over 2 touchpoints, this lead has shown interest."
        assert summary.likelihoodToBook == Likelihood.MEDIUM

    async def test_error_synopsis(self, sample_interactions) -> None:
        summary = await summarize_timeline(None, make_lead("Dan"), sample_interactions)

        assert summary.synopsis == "Unable to generate summary"
        assert summary.touchpoints == 0


# =============================================================================
# Groq Generator
# =============================================================================

@pytest.mark.asyncio
class TestGroqTextGenerator:
    """Tests for the Groq-backed generator with a mocked client."""

    async def test_json_mode_request(self) -> None:
        message = Mock()
        message.content = '{"ok": true}'
        choice = Mock()
        choice.message = message
        completion = Mock()
        completion.choices = [choice]

        client = Mock()
        client.chat.completions.create = AsyncMock(return_value=completion)

        generator = GroqTextGenerator(
            api_key="test-key", model="test-model", venue_name="The Old Mill", client=client
        )
        text = await generator.generate("Score this lead")

        assert text == '{"ok": true}'
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][1] == {"role": "user", "content": "Score this lead"}
        assert "The Old Mill" in kwargs["messages"][0]["content"]
