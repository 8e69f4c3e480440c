"""
Pydantic request/response models for the venue CRM backend.

This module provides type-safe validation and serialization for every record
that flows through the service:

- Source records fetched from the Google Sheet: Interaction, Lead, Contact, Booking
- Analytics engine outputs: FunnelMetrics, MonthlyRevenue, ChannelPerformance, TimeInsight
- AI helper outputs: LeadQualityScore, IntentTags, NextBestAction, FollowUpDraft,
  ManagerDigest, TimelineSummary
- API envelopes and request bodies
- Saved filter definitions

Field names are camelCase so that the JSON contract consumed by the dashboard
frontend is produced without aliasing.

Timestamp-like fields are coerced leniently: datetimes, dates, parseable
strings and epoch-millisecond numbers are accepted, anything else becomes
None rather than a validation error.

All models use Pydantic v2 syntax.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from venue_crm.models.enums import (
    BookingStatus,
    FilterType,
    FollowUpType,
    FunnelStage,
    InteractionChannel,
    InteractionStatus,
    LeadStatus,
    Likelihood,
    Priority,
    Sentiment,
)


# =============================================================================
# Lenient Value Coercion
# =============================================================================

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a timestamp-like value into a datetime.

    Accepts datetime and date objects, ISO-ish strings understood by
    pandas, and numbers interpreted as epoch milliseconds. Values that
    cannot be parsed yield None. Values carrying a UTC offset are converted
    to the server's local time and returned naive, so weekday, hour and
    month buckets are always in local time.

    Args:
        value: Raw timestamp value from a record or request body.

    Returns:
        A datetime, or None when the value is missing or unparseable.

    Example:
        >>> coerce_datetime("2024-07-01T10:30:00")
        datetime.datetime(2024, 7, 1, 10, 30)
        >>> coerce_datetime("not a date") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and not value.strip():
        return None

    try:
        if isinstance(value, (int, float)):
            if isinstance(value, float) and math.isnan(value):
                return None
            parsed = pd.to_datetime(value, unit="ms")
        else:
            parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    return _local_naive(parsed.to_pydatetime())


def parse_headcount(value: Any) -> Optional[int]:
    """
    Parse a headcount leniently, keeping only a leading integer.

    "120 guests" becomes 120; blank or non-numeric values become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


# =============================================================================
# AI Helper Output Models
# =============================================================================


class LeadScoreFactors(BaseModel):
    """Signals the lead score was derived from."""
    eventType: str = Field(..., description="Event type the score refers to")
    headcount: Optional[int] = Field(default=None, description="Expected guest count")
    sentiment: Sentiment = Field(
        default=Sentiment.NEUTRAL,
        description="Overall sentiment of the conversation"
    )
    keywords: List[str] = Field(
        default_factory=list,
        description="Keywords indicating urgency, budget or authority"
    )


class LeadQualityScore(BaseModel):
    """
    Quality score for a lead on a 0-100 scale.

    Produced by the lead scoring helper; falls back to a neutral 50 when the
    text generator is unavailable or its answer cannot be parsed.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "score": 82,
                "reasoning": "Large wedding with fixed date and confirmed budget",
                "factors": {
                    "eventType": "Wedding",
                    "headcount": 120,
                    "sentiment": "positive",
                    "keywords": ["budget approved", "June"]
                }
            }
        }
    )

    score: float = Field(..., ge=0, le=100, description="Lead quality score (0-100)")
    reasoning: str = Field(..., description="Short explanation of the score")
    factors: LeadScoreFactors


class IntentTags(BaseModel):
    """Primary intent, topics and urgency detected in an interaction."""
    primaryIntent: str = Field(..., description="Primary intent, e.g. 'Wedding enquiry'")
    topics: List[str] = Field(default_factory=list)
    urgency: Priority = Priority.MEDIUM
    confidence: float = Field(default=50, ge=0, le=100)


class NextBestAction(BaseModel):
    """Suggested next step for a customer interaction."""
    action: str
    reason: str
    priority: Priority = Priority.MEDIUM
    suggestedTemplate: Optional[str] = None


class FollowUpDraft(BaseModel):
    """Drafted follow-up email or SMS."""
    type: FollowUpType
    subject: Optional[str] = Field(default=None, description="Email subject (email only)")
    message: str
    suggestedTiming: str = Field(
        default="within 24 hours",
        description="immediate | within 1 hour | within 24 hours | next business day"
    )


class DigestMetrics(BaseModel):
    """Headline counters of the manager digest."""
    totalInteractions: int = 0
    hotLeads: int = 0
    atRisk: int = 0
    cancellations: int = 0
    avgQualityScore: float = 0


class ManagerDigest(BaseModel):
    """
    End-of-day summary for the venue manager.

    generatedBy records whether the text came from the AI generator ("ai")
    or from the deterministic rule-based path ("rules").
    """
    summary: str
    highlights: List[str] = Field(default_factory=list)
    metrics: DigestMetrics = Field(default_factory=DigestMetrics)
    recommendations: List[str] = Field(default_factory=list)
    generatedBy: str = Field(default="ai", description="'ai' or 'rules'")


class TimelineSummary(BaseModel):
    """Synopsis of a lead's interaction history."""
    synopsis: str
    touchpoints: int = 0
    likelihoodToBook: Likelihood = Likelihood.MEDIUM
    estimatedTimeframe: Optional[str] = None
    keyInsights: List[str] = Field(default_factory=list)


# =============================================================================
# Source Records (Google Sheet)
# =============================================================================


class Customer(BaseModel):
    """Customer identity attached to an interaction."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    avatar: str = ""


class Interaction(BaseModel):
    """
    A single call or chat with a customer.

    The optional event fields carry the enquiry context captured in the
    sheet; intentTags and nextBestAction are filled in by the AI helpers.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "CA123",
                "customer": {"name": "Jane Doe", "avatar": ""},
                "contact": "jane@example.com",
                "timestamp": "2024-07-06T14:20:00",
                "status": "Completed",
                "channel": "Call",
                "transcript": "Looking for a June wedding for 120 guests",
                "tags": ["Wedding", "Has Summary"],
                "eventType": "Wedding",
                "headcount": 120
            }
        }
    )

    id: str
    customer: Customer
    contact: str = ""
    timestamp: Optional[datetime] = Field(
        default=None,
        description="When the interaction happened; None when unknown"
    )
    status: InteractionStatus = InteractionStatus.COMPLETED
    channel: InteractionChannel = InteractionChannel.CALL
    transcript: str = ""
    tags: List[str] = Field(default_factory=list)
    intentTags: Optional[IntentTags] = None
    nextBestAction: Optional[NextBestAction] = None
    eventType: Optional[str] = None
    eventDescription: Optional[str] = None
    headcount: Optional[int] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Optional[datetime]:
        return coerce_datetime(value)

    @field_validator("headcount", mode="before")
    @classmethod
    def _coerce_headcount(cls, value: Any) -> Optional[int]:
        return parse_headcount(value)


class Lead(BaseModel):
    """
    A prospective customer.

    `company` doubles as the event type label (Wedding, Corporate, ...).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    name: str
    company: str = ""
    contact: str = ""
    status: LeadStatus = LeadStatus.NEW
    lastInteraction: Optional[datetime] = None
    qualityScore: Optional[LeadQualityScore] = None
    timelineSummary: Optional[TimelineSummary] = None

    @field_validator("lastInteraction", mode="before")
    @classmethod
    def _coerce_last_interaction(cls, value: Any) -> Optional[datetime]:
        return coerce_datetime(value)


class Contact(BaseModel):
    """Address book entry; not consumed by the analytics engine."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    name: str
    company: str = ""
    contact: str = ""
    lastInteraction: Optional[datetime] = None

    @field_validator("lastInteraction", mode="before")
    @classmethod
    def _coerce_last_interaction(cls, value: Any) -> Optional[datetime]:
        return coerce_datetime(value)


class Booking(BaseModel):
    """
    A venue booking.

    `customer` is the customer's name and `service` doubles as the event
    type label.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    customer: str
    service: str = ""
    staff: str = ""
    dateTime: Optional[datetime] = None
    status: BookingStatus = BookingStatus.PENDING

    @field_validator("dateTime", mode="before")
    @classmethod
    def _coerce_date_time(cls, value: Any) -> Optional[datetime]:
        return coerce_datetime(value)


# =============================================================================
# Analytics Engine Outputs
# =============================================================================


class FunnelMetrics(BaseModel):
    """
    One stage of the lead-to-booking funnel.

    percentage is relative to the New stage; dropoff is relative to the
    immediately preceding stage and may be negative because stages overlap.
    """
    stage: FunnelStage
    count: int = Field(..., ge=0)
    percentage: float = Field(..., description="Share of the New stage count (0-100)")
    dropoff: float = Field(..., description="Decrease from the previous stage (%)")
    revenue: float = Field(..., ge=0, description="Estimated revenue at this stage")


class MonthlyRevenue(BaseModel):
    """Estimated booking revenue for one calendar month."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "month": "Jul 2024",
                "monthNumber": 7,
                "year": 2024,
                "confirmed": 5000,
                "pending": 500,
                "projected": 5500,
                "total": 5500
            }
        }
    )

    month: str = Field(..., description="Short month and year label, e.g. 'Jul 2024'")
    monthNumber: int = Field(..., ge=1, le=12)
    year: int
    confirmed: float = 0
    pending: float = 0
    projected: float = 0
    total: float = 0


class ChannelPerformance(BaseModel):
    """Interaction volume, conversions and attributed revenue for a channel."""
    channel: InteractionChannel
    total: int = 0
    converted: int = 0
    conversionRate: float = 0
    avgRevenue: float = 0
    totalRevenue: float = 0


class TimeInsight(BaseModel):
    """A time-of-week activity pattern correlated with an event type."""
    pattern: str
    description: str
    frequency: int = Field(..., ge=0)
    percentage: float = Field(..., description="Share of all interactions (0-100)")
    examples: List[str] = Field(default_factory=list)


# =============================================================================
# Sheet-Derived Dashboard Data
# =============================================================================


class VolumePoint(BaseModel):
    """Interaction volume for one weekday."""
    name: str
    calls: int
    chats: int


class ConversionPoint(BaseModel):
    """Conversion rate for one period."""
    date: str
    rate: float


class SheetAnalytics(BaseModel):
    """Summary charts derived directly from the sheet rows."""
    volume: List[VolumePoint] = Field(default_factory=list)
    conversion: List[ConversionPoint] = Field(default_factory=list)


class DashboardData(BaseModel):
    """Everything the dashboard loads in one request."""
    interactions: List[Interaction]
    leads: List[Lead]
    contacts: List[Contact]
    bookings: List[Booking]
    analytics: SheetAnalytics


# =============================================================================
# API Envelopes
# =============================================================================


class FunnelResponse(BaseModel):
    funnel: List[FunnelMetrics]


class MonthlyRevenueResponse(BaseModel):
    monthlyRevenue: List[MonthlyRevenue]


class ChannelPerformanceResponse(BaseModel):
    channelPerformance: List[ChannelPerformance]


class TimeInsightsResponse(BaseModel):
    insights: List[TimeInsight]


class ErrorResponse(BaseModel):
    """Body returned with every 4xx/5xx produced by this service."""
    error: str
    details: Optional[Any] = None


# =============================================================================
# AI Helper Requests
# =============================================================================


class LeadScoreRequest(BaseModel):
    interaction: Interaction
    eventType: str = ""
    headcount: Optional[int] = None
    eventDescription: Optional[str] = None

    @field_validator("headcount", mode="before")
    @classmethod
    def _coerce_headcount(cls, value: Any) -> Optional[int]:
        return parse_headcount(value)


class IntentTagsRequest(BaseModel):
    interaction: Interaction
    eventType: Optional[str] = None
    eventDescription: Optional[str] = None


class NextActionRequest(BaseModel):
    interaction: Interaction
    lead: Optional[Lead] = None
    eventType: Optional[str] = None
    headcount: Optional[int] = None

    @field_validator("headcount", mode="before")
    @classmethod
    def _coerce_headcount(cls, value: Any) -> Optional[int]:
        return parse_headcount(value)


class FollowUpRequest(BaseModel):
    interaction: Interaction
    lead: Optional[Lead] = None
    type: FollowUpType = FollowUpType.EMAIL
    nextAction: Optional[NextBestAction] = None


class ManagerDigestRequest(BaseModel):
    interactions: List[Interaction]
    leads: List[Lead]
    bookings: List[Booking]


class TimelineSummaryRequest(BaseModel):
    lead: Lead
    interactions: List[Interaction] = Field(default_factory=list)


# =============================================================================
# Saved Filters
# =============================================================================


class SavedFilter(BaseModel):
    """
    A named set of list filters.

    Predefined filters ship with the service; custom ones are persisted in
    the injected filter store.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "pending-bookings",
                "name": "Pending Bookings",
                "description": "Bookings awaiting confirmation",
                "type": "bookings",
                "filters": {"status": "Pending"}
            }
        }
    )

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: FilterType
    filters: Dict[str, Any] = Field(default_factory=dict)
    isDefault: Optional[bool] = None
    role: Optional[str] = None


class UserRole(BaseModel):
    """Dashboard role selecting the default views (coordinator, sales, manager)."""
    role: str = Field(..., min_length=1)
