"""
Analytics aggregation engine for the venue CRM dashboard.

Pure, synchronous functions that turn flat lists of interactions, leads and
bookings into the metrics shown on the analytics tab:

- estimate_revenue: Price table lookup for an event type and headcount
- compute_funnel: Five-stage lead-to-booking funnel
- compute_monthly_revenue: Confirmed / pending / projected revenue per month
- compute_channel_performance: Volume, conversions and revenue per channel
- compute_time_insights: Weekday and hour-of-day activity patterns

Matching Rules:
    Records are related to each other only by case-insensitive exact name
    equality: Lead.name against Interaction.customer.name and against
    Booking.customer. No fuzzy matching or identifier joins are performed.

Revenue Estimation:
    Revenue is never read from the data; it is always estimated from the
    event type label (Lead.company or Booking.service) with the
    REVENUE_ESTIMATES table. Unknown labels use the "Other" tier.

Error Semantics:
    None of these functions raise on empty input or zero denominators.
    Degenerate input yields zeroed metrics (or an empty list of insights).
    Inputs are never mutated and identical inputs give identical outputs.

Usage:
    from venue_crm.services.analytics import compute_funnel, estimate_revenue

    funnel = compute_funnel(leads, bookings, interactions)
    estimate_revenue("Wedding", 100)  # 20000.0
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from venue_crm.models.enums import (
    BookingStatus,
    FunnelStage,
    InteractionChannel,
    LeadStatus,
)
from venue_crm.models.schemas import (
    Booking,
    ChannelPerformance,
    FunnelMetrics,
    Interaction,
    Lead,
    MonthlyRevenue,
    TimeInsight,
)


# =============================================================================
# Revenue Estimation
# =============================================================================

@dataclass(frozen=True)
class PriceTier:
    """Flat fee plus per-guest fee for one event type."""
    base: float
    per_person: float


DEFAULT_TIER: str = "Other"

REVENUE_ESTIMATES: Dict[str, PriceTier] = {
    "Wedding": PriceTier(base=5000, per_person=150),
    "Corporate": PriceTier(base=3000, per_person=100),
    "Birthday": PriceTier(base=1500, per_person=75),
    "Anniversary": PriceTier(base=2000, per_person=100),
    "Conference": PriceTier(base=4000, per_person=120),
    "Meeting": PriceTier(base=500, per_person=50),
    DEFAULT_TIER: PriceTier(base=2000, per_person=80),
}

_TIERS_BY_KEY: Dict[str, PriceTier] = {
    name.lower(): tier for name, tier in REVENUE_ESTIMATES.items()
}


def estimate_revenue(event_type: Optional[str], headcount: Optional[float] = None) -> float:
    """
    Estimate booking revenue for an event type.

    Args:
        event_type: Event type label, matched case-insensitively against
            REVENUE_ESTIMATES. Empty, None or unknown labels use "Other".
        headcount: Expected guests. The per-person fee applies only when
            this is a positive number.

    Returns:
        base + per_person * headcount, or just base without a headcount.

    Example:
        >>> estimate_revenue("wedding", 100)
        20000.0
        >>> estimate_revenue("Unknown Type")
        2000.0
    """
    tier = _TIERS_BY_KEY.get((event_type or "").lower(), REVENUE_ESTIMATES[DEFAULT_TIER])
    revenue = float(tier.base)
    if headcount is not None and headcount > 0:
        revenue += tier.per_person * headcount
    return float(revenue)


def _name_key(name: Optional[str]) -> str:
    return (name or "").lower()


# =============================================================================
# Funnel
# =============================================================================


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def compute_funnel(
    leads: List[Lead],
    bookings: List[Booking],
    interactions: List[Interaction],
) -> List[FunnelMetrics]:
    """
    Build the five-stage lead-to-booking funnel.

    Stages are inclusion filters rather than a partition:

    1. New: leads with status New
    2. Contacted: leads with status Contacted, or whose name matches the
       customer of any interaction
    3. Qualified: leads with status Qualified
    4. Booked: leads whose name matches the customer of any booking
    5. Completed: Confirmed bookings (counted per booking, not per lead)

    Because a lead can sit in several stages, a later stage may be larger
    than an earlier one and its dropoff is then negative. That value is
    reported as-is.

    Returns:
        Exactly five FunnelMetrics in stage order. percentage is relative to
        the New count; dropoff is relative to the preceding stage.
    """
    interaction_names = {_name_key(i.customer.name) for i in interactions}
    booking_names = {_name_key(b.customer) for b in bookings}

    new_leads = [lead for lead in leads if lead.status == LeadStatus.NEW]
    contacted_leads = [
        lead for lead in leads
        if lead.status == LeadStatus.CONTACTED or _name_key(lead.name) in interaction_names
    ]
    qualified_leads = [lead for lead in leads if lead.status == LeadStatus.QUALIFIED]
    booked_leads = [lead for lead in leads if _name_key(lead.name) in booking_names]
    completed_bookings = [b for b in bookings if b.status == BookingStatus.CONFIRMED]

    def lead_revenue(stage_leads: Iterable[Lead]) -> float:
        return sum(estimate_revenue(lead.company or DEFAULT_TIER) for lead in stage_leads)

    stages: List[Tuple[FunnelStage, int, float]] = [
        (FunnelStage.NEW, len(new_leads), lead_revenue(new_leads)),
        (FunnelStage.CONTACTED, len(contacted_leads), lead_revenue(contacted_leads)),
        (FunnelStage.QUALIFIED, len(qualified_leads), lead_revenue(qualified_leads)),
        (FunnelStage.BOOKED, len(booked_leads), lead_revenue(booked_leads)),
        (
            FunnelStage.COMPLETED,
            len(completed_bookings),
            sum(estimate_revenue(b.service or DEFAULT_TIER) for b in completed_bookings),
        ),
    ]

    new_count = stages[0][1]
    funnel: List[FunnelMetrics] = []
    previous_count: Optional[int] = None

    for stage, count, revenue in stages:
        if previous_count is None:
            dropoff = 0.0
        else:
            dropoff = _percent(previous_count - count, previous_count)

        funnel.append(FunnelMetrics(
            stage=stage,
            count=count,
            percentage=_percent(count, new_count),
            dropoff=dropoff,
            revenue=float(revenue),
        ))
        previous_count = count

    return funnel


# =============================================================================
# Monthly Revenue
# =============================================================================


def compute_monthly_revenue(bookings: List[Booking]) -> List[MonthlyRevenue]:
    """
    Aggregate estimated booking revenue per calendar month.

    Every booking adds its estimate (service label, no headcount) to
    projected and total. Confirmed bookings also add to confirmed and
    Pending ones to pending; Cancelled bookings add to nothing else.
    Bookings without a usable dateTime are skipped.

    Returns:
        One MonthlyRevenue per (year, month) present, in chronological order.

    Example:
        A Confirmed Wedding and a Pending Meeting, both in July 2024, give
        [{"month": "Jul 2024", "confirmed": 5000, "pending": 500,
          "projected": 5500, "total": 5500, ...}]
    """
    months: Dict[Tuple[int, int], Dict[str, float]] = {}

    for booking in bookings:
        when = booking.dateTime
        if when is None:
            continue

        bucket = months.setdefault(
            (when.year, when.month),
            {"confirmed": 0.0, "pending": 0.0, "projected": 0.0, "total": 0.0},
        )
        revenue = estimate_revenue(booking.service)

        bucket["projected"] += revenue
        bucket["total"] += revenue
        if booking.status == BookingStatus.CONFIRMED:
            bucket["confirmed"] += revenue
        elif booking.status == BookingStatus.PENDING:
            bucket["pending"] += revenue

    return [
        MonthlyRevenue(
            month=datetime(year, month, 1).strftime("%b %Y"),
            monthNumber=month,
            year=year,
            **totals,
        )
        for (year, month), totals in sorted(months.items())
    ]


# =============================================================================
# Channel Performance
# =============================================================================

CHANNEL_ORDER: List[InteractionChannel] = [
    InteractionChannel.CALL,
    InteractionChannel.CHAT,
    InteractionChannel.WEB_FORM,
]


def compute_channel_performance(
    interactions: List[Interaction],
    leads: List[Lead],
    bookings: List[Booking],
) -> List[ChannelPerformance]:
    """
    Attribute booked leads and their revenue to interaction channels.

    For every lead with a booking under the same name, the first interaction
    from that customer decides the channel that gets the conversion. The
    revenue attributed is the estimate for the first matching booking's
    service, falling back to the lead's company.

    Returns:
        Exactly three entries, Call, Chat and Web Form, in that order. A
        channel without interactions reports zeros.
    """
    totals: Dict[InteractionChannel, int] = {channel: 0 for channel in CHANNEL_ORDER}
    converted: Dict[InteractionChannel, int] = {channel: 0 for channel in CHANNEL_ORDER}
    revenue: Dict[InteractionChannel, float] = {channel: 0.0 for channel in CHANNEL_ORDER}

    for interaction in interactions:
        if interaction.channel in totals:
            totals[interaction.channel] += 1

    for lead in leads:
        key = _name_key(lead.name)
        booking = next((b for b in bookings if _name_key(b.customer) == key), None)
        if booking is None:
            continue

        interaction = next(
            (i for i in interactions if _name_key(i.customer.name) == key), None
        )
        if interaction is None or interaction.channel not in totals:
            continue

        converted[interaction.channel] += 1
        revenue[interaction.channel] += estimate_revenue(
            booking.service or lead.company or DEFAULT_TIER
        )

    return [
        ChannelPerformance(
            channel=channel,
            total=totals[channel],
            converted=converted[channel],
            conversionRate=_percent(converted[channel], totals[channel]),
            avgRevenue=revenue[channel] / converted[channel] if converted[channel] else 0.0,
            totalRevenue=revenue[channel],
        )
        for channel in CHANNEL_ORDER
    ]


# =============================================================================
# Time Insights
# =============================================================================

MAX_TIME_INSIGHTS: int = 5
PEAK_HOUR_COUNT: int = 3
MIN_SLOT_FREQUENCY: int = 2
UNKNOWN_EVENT_TYPE: str = "Unknown"


def _hour_range(hour: int) -> str:
    return f"{hour}:00 - {hour + 1}:00"


def _top_event_type(counts: Counter) -> Tuple[str, int]:
    """Most frequent event type in a bucket; ties go to the type seen first."""
    return max(counts.items(), key=lambda item: item[1])


def compute_time_insights(
    interactions: List[Interaction],
    leads: List[Lead],
) -> List[TimeInsight]:
    """
    Mine weekday and hour-of-day activity patterns.

    Each interaction is labelled with an event type: the company of the
    first lead with the same name, else the interaction's own eventType,
    else "Unknown". Interactions are then bucketed by weekday, by hour and
    by (weekday, hour). Three kinds of insight are produced:

    - the most active weekday and its top event type
    - up to three busiest hours (ties go to the earlier hour)
    - every (weekday, hour) slot whose top event type occurs at least twice

    frequency is the top event type's count within the bucket and
    percentage is that count over all interactions, including those
    without a timestamp (which land in no bucket).

    Returns:
        At most five insights ordered by frequency, highest first. Equal
        frequencies keep the order above. Empty input gives [].
    """
    if not interactions:
        return []

    total = len(interactions)
    lead_types: Dict[str, str] = {}
    for lead in leads:
        lead_types.setdefault(_name_key(lead.name), lead.company)

    by_day: Dict[str, Counter] = {}
    by_hour: Dict[int, Counter] = {}
    by_slot: Dict[str, Dict[int, Counter]] = {}

    for interaction in interactions:
        if interaction.timestamp is None:
            continue

        event_type = (
            lead_types.get(_name_key(interaction.customer.name))
            or interaction.eventType
            or UNKNOWN_EVENT_TYPE
        )
        day = interaction.timestamp.strftime("%A")
        hour = interaction.timestamp.hour

        by_day.setdefault(day, Counter())[event_type] += 1
        by_hour.setdefault(hour, Counter())[event_type] += 1
        by_slot.setdefault(day, {}).setdefault(hour, Counter())[event_type] += 1

    insights: List[TimeInsight] = []

    if by_day:
        day, counts = max(by_day.items(), key=lambda item: sum(item[1].values()))
        event_type, frequency = _top_event_type(counts)
        insights.append(TimeInsight(
            pattern=f"{day} Activity",
            description=f"Most enquiries for {event_type} come in on {day}s",
            frequency=frequency,
            percentage=_percent(frequency, total),
            examples=[f"{frequency} {event_type} enquiries on {day}s"],
        ))

    busiest_hours = sorted(
        by_hour.items(), key=lambda item: (-sum(item[1].values()), item[0])
    )[:PEAK_HOUR_COUNT]
    for hour, counts in busiest_hours:
        event_type, frequency = _top_event_type(counts)
        hour_range = _hour_range(hour)
        insights.append(TimeInsight(
            pattern=f"{hour_range} Peak",
            description=f"Peak activity for {event_type} between {hour_range}",
            frequency=frequency,
            percentage=_percent(frequency, total),
            examples=[f"{frequency} {event_type} enquiries during {hour_range}"],
        ))

    for day, hours in by_slot.items():
        for hour in sorted(hours):
            event_type, frequency = _top_event_type(hours[hour])
            if frequency < MIN_SLOT_FREQUENCY:
                continue
            hour_range = _hour_range(hour)
            insights.append(TimeInsight(
                pattern=f"{day} {hour_range}",
                description=f"Most enquiries for {event_type} come in on {day}s between {hour_range}",
                frequency=frequency,
                percentage=_percent(frequency, total),
                examples=[f"{frequency} {event_type} enquiries on {day}s {hour_range}"],
            ))

    insights.sort(key=lambda insight: -insight.frequency)
    return insights[:MAX_TIME_INSIGHTS]
