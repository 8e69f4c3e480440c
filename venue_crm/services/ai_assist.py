"""
AI-assisted text helpers for the venue CRM dashboard.

The language model is treated as an opaque text generator with a JSON-shaped
contract: each helper builds a prompt asking for a specific JSON object,
extracts the first {...} block from the answer and normalizes it into a
typed Pydantic model.

Helpers:
- score_lead: 0-100 lead quality score with the factors behind it
- tag_intent: primary intent, topics and urgency of an interaction
- suggest_next_action: next-best-action for a customer
- draft_follow_up: email or SMS follow-up draft
- build_manager_digest: end-of-day summary for the venue manager
- summarize_timeline: synopsis of a lead's interaction history

Fallback Behavior:
    No helper raises. When no generator is configured, when the generator
    fails, or when its answer holds no JSON object, a documented default is
    returned instead. The manager digest falls back to a deterministic
    rule-based digest computed from the records themselves.

Generator:
    GroqTextGenerator implements the TextGenerator protocol over the Groq
    chat completions API in JSON mode. Tests inject a stub with an async
    generate(prompt) method.

Usage:
    generator = GroqTextGenerator(api_key=settings.groq_api_key)
    score = await score_lead(generator, interaction, "Wedding", headcount=120)
"""

import json
import logging
import math
import re
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

from groq import AsyncGroq

from venue_crm.models.enums import (
    BookingStatus,
    FollowUpType,
    InteractionStatus,
    LeadStatus,
    Likelihood,
    Priority,
    Sentiment,
)
from venue_crm.models.schemas import (
    Booking,
    DigestMetrics,
    FollowUpDraft,
    IntentTags,
    Interaction,
    Lead,
    LeadQualityScore,
    LeadScoreFactors,
    ManagerDigest,
    NextBestAction,
    TimelineSummary,
    parse_headcount,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_MODEL: str = "llama-3.3-70b-versatile"
DEFAULT_VENUE_NAME: str = "Arlington Estate"

NEUTRAL_SCORE: float = 50
DEFAULT_INTENT: str = "General enquiry"
DEFAULT_ACTION: str = "Follow up with customer"
DEFAULT_ACTION_REASON: str = "Continue engagement"
DEFAULT_FOLLOW_UP_MESSAGE: str = (
    "Thank you for your interest. We look forward to speaking with you soon."
)
DEFAULT_FOLLOW_UP_TIMING: str = "within 24 hours"

DIGEST_SAMPLE_SIZE: int = 10
DIGEST_TRANSCRIPT_CHARS: int = 100
TIMELINE_TRANSCRIPT_CHARS: int = 150

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class AIUnavailableError(Exception):
    """Raised when an AI helper is called without a text generator."""


# =============================================================================
# Text Generator
# =============================================================================


class TextGenerator(Protocol):
    """Anything that turns a prompt into model text."""

    async def generate(self, prompt: str) -> str:
        ...


class GroqTextGenerator:
    """
    TextGenerator backed by Groq chat completions.

    Requests JSON mode so answers are a single JSON object.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.4,
        max_tokens: int = 1024,
        venue_name: str = DEFAULT_VENUE_NAME,
        client: Optional[AsyncGroq] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = (
            f"You are a sales assistant for {venue_name}, an events venue. "
            "Answer with a single JSON object and nothing else."
        )
        self.client = client or AsyncGroq(api_key=api_key)

    async def generate(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


async def generate_structured_text(
    generator: Optional[TextGenerator],
    prompt: str,
) -> Optional[Dict[str, Any]]:
    """
    Run the generator and decode the first JSON object in its answer.

    Returns:
        The decoded object, or None when the answer contains no JSON object.

    Raises:
        AIUnavailableError: If no generator is configured.
        json.JSONDecodeError: If the extracted block is not valid JSON.
    """
    if generator is None:
        raise AIUnavailableError("AI text generator is not configured")

    text = await generator.generate(prompt)
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        return None

    parsed = json.loads(match.group(0))
    return parsed if isinstance(parsed, dict) else None


# =============================================================================
# Normalization Helpers
# =============================================================================


def _clamp_score(value: Any, default: float = NEUTRAL_SCORE) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return min(100.0, max(0.0, number))


def _choice(enum_cls: Type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _same_name(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").lower() == (b or "").lower()


# =============================================================================
# Lead Scoring
# =============================================================================


async def score_lead(
    generator: Optional[TextGenerator],
    interaction: Interaction,
    event_type: str = "",
    headcount: Optional[int] = None,
    event_description: Optional[str] = None,
) -> LeadQualityScore:
    """
    Score a lead from 0 to 100.

    Considers event value, headcount, conversation sentiment and buying
    signals. Falls back to a neutral 50 on any failure.
    """
    prompt = f"""Analyze this lead and provide a quality score (0-100).
- Event Type: {event_type or 'Not specified'}
- Headcount: {headcount or 'Not specified'}
- Event Description: {event_description or 'None'}
- Call Summary: {interaction.transcript or 'No transcript available'}
- Customer: {interaction.customer.name}
- Contact: {interaction.contact}

Consider event type value (weddings are worth more than small meetings), headcount,
sentiment, and keywords indicating urgency, budget or decision-making authority.

Respond in JSON format:
{{"score": <0-100>, "reasoning": "<brief explanation>",
  "factors": {{"eventType": "<event type>", "headcount": <number or null>,
  "sentiment": "<positive|neutral|negative>", "keywords": ["<keyword>"]}}}}"""

    def fallback(reasoning: str) -> LeadQualityScore:
        return LeadQualityScore(
            score=NEUTRAL_SCORE,
            reasoning=reasoning,
            factors=LeadScoreFactors(
                eventType=event_type or "Unknown",
                headcount=headcount,
                sentiment=Sentiment.NEUTRAL,
                keywords=[],
            ),
        )

    try:
        parsed = await generate_structured_text(generator, prompt)
    except Exception as e:
        logger.warning(f"Lead scoring failed for {interaction.id}: {e}")
        return fallback("Error analyzing lead")

    if parsed is None:
        logger.warning(f"Lead scoring returned no JSON for {interaction.id}")
        return fallback("Unable to parse AI response")

    factors = parsed.get("factors") if isinstance(parsed.get("factors"), dict) else {}
    return LeadQualityScore(
        score=_clamp_score(parsed.get("score")),
        reasoning=_text(parsed.get("reasoning"), "Analysis completed"),
        factors=LeadScoreFactors(
            eventType=_text(factors.get("eventType"), event_type or "Unknown"),
            headcount=parse_headcount(factors.get("headcount")) or headcount,
            sentiment=_choice(Sentiment, factors.get("sentiment"), Sentiment.NEUTRAL),
            keywords=_string_list(factors.get("keywords")),
        ),
    )


# =============================================================================
# Intent Tags
# =============================================================================


async def tag_intent(
    generator: Optional[TextGenerator],
    interaction: Interaction,
    event_type: Optional[str] = None,
    event_description: Optional[str] = None,
) -> IntentTags:
    """Identify the primary intent, topics and urgency of an interaction."""
    prompt = f"""Analyze this customer interaction and identify the primary intent
(e.g. "Wedding enquiry", "Corporate event", "Price negotiation", "Availability check"),
the key topics discussed, the urgency (high, medium, low) and your confidence (0-100).

- Customer: {interaction.customer.name}
- Channel: {interaction.channel.value}
- Transcript: {interaction.transcript or 'No transcript'}
- Event Type: {event_type or 'Not specified'}
- Event Description: {event_description or 'None'}

Respond in JSON format:
{{"primaryIntent": "<intent>", "topics": ["<topic>"], "urgency": "<high|medium|low>",
  "confidence": <0-100>}}"""

    fallback = IntentTags(
        primaryIntent=DEFAULT_INTENT,
        topics=[event_type] if event_type else [],
        urgency=Priority.MEDIUM,
        confidence=NEUTRAL_SCORE,
    )

    try:
        parsed = await generate_structured_text(generator, prompt)
    except Exception as e:
        logger.warning(f"Intent tagging failed for {interaction.id}: {e}")
        return fallback

    if parsed is None:
        return fallback

    return IntentTags(
        primaryIntent=_text(parsed.get("primaryIntent"), DEFAULT_INTENT),
        topics=_string_list(parsed.get("topics")),
        urgency=_choice(Priority, parsed.get("urgency"), Priority.MEDIUM),
        confidence=_clamp_score(parsed.get("confidence")),
    )


# =============================================================================
# Next Best Action
# =============================================================================


async def suggest_next_action(
    generator: Optional[TextGenerator],
    interaction: Interaction,
    lead: Optional[Lead] = None,
    event_type: Optional[str] = None,
    headcount: Optional[int] = None,
) -> NextBestAction:
    """Suggest one specific, actionable next step for the customer."""
    lead_status = lead.status.value if lead else LeadStatus.NEW.value
    prompt = f"""Based on this customer interaction, suggest the next best action.

- Customer: {interaction.customer.name}
- Contact: {interaction.contact}
- Transcript: {interaction.transcript or 'No transcript'}
- Event Type: {event_type or 'Not specified'}
- Headcount: {headcount or 'Not specified'}
- Lead Status: {lead_status}

Be specific, for example "Send pricing PDF for weddings (80-120 guests)" or
"Schedule venue tour - high interest expressed".

Respond in JSON format:
{{"action": "<action>", "reason": "<why>", "priority": "<high|medium|low>",
  "suggestedTemplate": "<optional template name>"}}"""

    fallback = NextBestAction(
        action=DEFAULT_ACTION,
        reason=DEFAULT_ACTION_REASON,
        priority=Priority.MEDIUM,
    )

    try:
        parsed = await generate_structured_text(generator, prompt)
    except Exception as e:
        logger.warning(f"Next action suggestion failed for {interaction.id}: {e}")
        return fallback

    if parsed is None:
        return fallback

    return NextBestAction(
        action=_text(parsed.get("action"), DEFAULT_ACTION),
        reason=_text(parsed.get("reason"), DEFAULT_ACTION_REASON),
        priority=_choice(Priority, parsed.get("priority"), Priority.MEDIUM),
        suggestedTemplate=_optional_text(parsed.get("suggestedTemplate")),
    )


# =============================================================================
# Follow-up Drafts
# =============================================================================


async def draft_follow_up(
    generator: Optional[TextGenerator],
    interaction: Interaction,
    lead: Optional[Lead] = None,
    follow_up_type: FollowUpType = FollowUpType.EMAIL,
    next_action: Optional[NextBestAction] = None,
    venue_name: str = DEFAULT_VENUE_NAME,
) -> FollowUpDraft:
    """
    Draft a follow-up email or SMS.

    Emails carry a subject line; SMS drafts never do.
    """
    is_email = follow_up_type == FollowUpType.EMAIL
    length_rule = "keep the email concise but complete" if is_email else "stay under 160 characters"
    subject_field = '"subject": "<email subject>", ' if is_email else ""

    prompt = f"""Write a {follow_up_type.value.upper()} follow-up message for this customer.

Customer: {interaction.customer.name}
Contact: {interaction.contact}
Previous Interaction: {interaction.transcript or 'No transcript'}
Event Type: {lead.company if lead and lead.company else 'Not specified'}
Next Action: {next_action.action if next_action else 'General follow-up'}

Use a professional, friendly tone, reference the previous conversation, include the
next steps and {length_rule}.

Respond in JSON format:
{{{subject_field}"message": "<message>",
  "suggestedTiming": "<immediate|within 1 hour|within 24 hours|next business day>"}}"""

    fallback = FollowUpDraft(
        type=follow_up_type,
        subject=f"Follow-up from {venue_name}" if is_email else None,
        message=DEFAULT_FOLLOW_UP_MESSAGE,
        suggestedTiming=DEFAULT_FOLLOW_UP_TIMING,
    )

    try:
        parsed = await generate_structured_text(generator, prompt)
    except Exception as e:
        logger.warning(f"Follow-up draft failed for {interaction.id}: {e}")
        return fallback

    if parsed is None:
        return fallback

    return FollowUpDraft(
        type=follow_up_type,
        subject=_optional_text(parsed.get("subject")) if is_email else None,
        message=_text(parsed.get("message"), DEFAULT_FOLLOW_UP_MESSAGE),
        suggestedTiming=_text(parsed.get("suggestedTiming"), DEFAULT_FOLLOW_UP_TIMING),
    )


# =============================================================================
# Manager Digest
# =============================================================================


def interactions_on(interactions: List[Interaction], day: date) -> List[Interaction]:
    """Interactions whose timestamp falls on the given calendar day."""
    return [
        i for i in interactions
        if i.timestamp is not None and i.timestamp.date() == day
    ]


def build_rule_based_digest(
    interactions: List[Interaction],
    leads: List[Lead],
    bookings: List[Booking],
    today: Optional[date] = None,
) -> ManagerDigest:
    """
    Build the manager digest from the records alone.

    - hot leads: Qualified leads
    - at risk: Lost leads plus today's Missed interactions
    - cancellations: Cancelled bookings
    - avgQualityScore: mean over leads that carry a quality score
    """
    today = today or date.today()
    todays = interactions_on(interactions, today)

    hot_leads = [lead for lead in leads if lead.status == LeadStatus.QUALIFIED]
    lost_leads = [lead for lead in leads if lead.status == LeadStatus.LOST]
    missed_today = [i for i in todays if i.status == InteractionStatus.MISSED]
    cancelled = [b for b in bookings if b.status == BookingStatus.CANCELLED]
    pending = [b for b in bookings if b.status == BookingStatus.PENDING]
    scores = [lead.qualityScore.score for lead in leads if lead.qualityScore is not None]

    highlights: List[str] = []
    recommendations: List[str] = []

    if hot_leads:
        names = ", ".join(lead.name for lead in hot_leads[:3])
        highlights.append(f"{len(hot_leads)} hot leads ready to progress: {names}")
        recommendations.append("Prioritise follow-ups with qualified leads")
    if missed_today:
        highlights.append(f"{len(missed_today)} missed calls today")
        recommendations.append("Return today's missed calls before close of business")
    if lost_leads:
        highlights.append(f"{len(lost_leads)} leads marked as lost")
    if cancelled:
        highlights.append(f"{len(cancelled)} cancelled bookings")
        recommendations.append("Review cancelled bookings for rebooking opportunities")
    if pending:
        recommendations.append(f"Confirm {len(pending)} pending bookings")

    return ManagerDigest(
        summary=(
            f"You had {len(todays)} interactions today. "
            f"{len(leads)} leads and {len(bookings)} bookings are on record."
        ),
        highlights=highlights,
        metrics=DigestMetrics(
            totalInteractions=len(todays),
            hotLeads=len(hot_leads),
            atRisk=len(lost_leads) + len(missed_today),
            cancellations=len(cancelled),
            avgQualityScore=round(sum(scores) / len(scores), 1) if scores else 0,
        ),
        recommendations=recommendations,
        generatedBy="rules",
    )


def _metric(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


async def build_manager_digest(
    generator: Optional[TextGenerator],
    interactions: List[Interaction],
    leads: List[Lead],
    bookings: List[Booking],
    today: Optional[date] = None,
) -> ManagerDigest:
    """
    Summarize the day for the venue manager.

    totalInteractions always counts today's interactions; the other metrics
    come from the model. Without a usable model answer the rule-based
    digest is returned.
    """
    today = today or date.today()
    todays = interactions_on(interactions, today)

    recent = "\n".join(
        f"- {i.customer.name}: {(i.transcript or 'No transcript')[:DIGEST_TRANSCRIPT_CHARS]}"
        for i in todays[:DIGEST_SAMPLE_SIZE]
    )
    statuses = "\n".join(f"- {lead.name}: {lead.status.value}" for lead in leads)

    prompt = f"""Write an end-of-day manager digest for the venue.

Today's Activity:
- Total Interactions: {len(todays)}
- Total Leads: {len(leads)}
- Total Bookings: {len(bookings)}

Recent Interactions:
{recent or '- None'}

Lead Statuses:
{statuses or '- None'}

Provide a concise summary paragraph, key highlights (hot leads, at-risk leads,
cancellations), a metrics summary and actionable recommendations.

Respond in JSON format:
{{"summary": "<paragraph>", "highlights": ["<highlight>"],
  "metrics": {{"totalInteractions": <n>, "hotLeads": <n>, "atRisk": <n>,
  "cancellations": <n>, "avgQualityScore": <n>}},
  "recommendations": ["<recommendation>"]}}"""

    try:
        parsed = await generate_structured_text(generator, prompt)
    except AIUnavailableError:
        logger.info("No AI generator configured, building rule-based manager digest")
        return build_rule_based_digest(interactions, leads, bookings, today)
    except Exception as e:
        logger.warning(f"Manager digest generation failed, using rules: {e}")
        return build_rule_based_digest(interactions, leads, bookings, today)

    if parsed is None:
        logger.warning("Manager digest returned no JSON, using rules")
        return build_rule_based_digest(interactions, leads, bookings, today)

    metrics = parsed.get("metrics") if isinstance(parsed.get("metrics"), dict) else {}
    return ManagerDigest(
        summary=_text(parsed.get("summary"), "Daily activity summary"),
        highlights=_string_list(parsed.get("highlights")),
        metrics=DigestMetrics(
            totalInteractions=len(todays),
            hotLeads=int(_metric(metrics.get("hotLeads"))),
            atRisk=int(_metric(metrics.get("atRisk"))),
            cancellations=int(_metric(metrics.get("cancellations"))),
            avgQualityScore=_metric(metrics.get("avgQualityScore")),
        ),
        recommendations=_string_list(parsed.get("recommendations")),
        generatedBy="ai",
    )


# =============================================================================
# Timeline Summary
# =============================================================================


async def summarize_timeline(
    generator: Optional[TextGenerator],
    lead: Lead,
    interactions: List[Interaction],
) -> TimelineSummary:
    """
    Summarize a lead's journey across all interactions under its name.

    touchpoints is always the number of matching interactions, whatever
    the model reports.
    """
    history = [i for i in interactions if _same_name(i.customer.name, lead.name)]
    touchpoints = len(history)

    lines = "\n".join(
        f"{n}. {i.timestamp.isoformat() if i.timestamp else 'Unknown time'}: "
        f"{(i.transcript or 'No transcript')[:TIMELINE_TRANSCRIPT_CHARS]}"
        for n, i in enumerate(history, start=1)
    )
    last_seen = lead.lastInteraction.isoformat() if lead.lastInteraction else "Unknown"

    prompt = f"""Analyze the interaction timeline for this lead.

Lead: {lead.name}
Company/Event: {lead.company}
Status: {lead.status.value}
Last Interaction: {last_seen}

Interaction History ({touchpoints} touchpoints):
{lines or 'None'}

Provide a synopsis of the lead's journey, the likelihood to book (high, medium, low),
an estimated timeframe if likely to book, and key insights.

Respond in JSON format:
{{"synopsis": "<paragraph>", "touchpoints": <n>, "likelihoodToBook": "<high|medium|low>",
  "estimatedTimeframe": "<timeframe or null>", "keyInsights": ["<insight>"]}}"""

    default_synopsis = f"Over {touchpoints} touchpoints, this lead has shown interest."

    try:
        parsed = await generate_structured_text(generator, prompt)
    except Exception as e:
        logger.warning(f"Timeline summary failed for lead {lead.id}: {e}")
        return TimelineSummary(
            synopsis="Unable to generate summary",
            touchpoints=touchpoints,
            likelihoodToBook=Likelihood.MEDIUM,
        )

    if parsed is None:
        return TimelineSummary(
            synopsis=default_synopsis,
            touchpoints=touchpoints,
            likelihoodToBook=Likelihood.MEDIUM,
        )

    return TimelineSummary(
        synopsis=_text(parsed.get("synopsis"), default_synopsis),
        touchpoints=touchpoints,
        likelihoodToBook=_choice(Likelihood, parsed.get("likelihoodToBook"), Likelihood.MEDIUM),
        estimatedTimeframe=_optional_text(parsed.get("estimatedTimeframe")),
        keyInsights=_string_list(parsed.get("keyInsights")),
    )
