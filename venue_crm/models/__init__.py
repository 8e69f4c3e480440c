"""
Package initialization file for venue CRM models.

Re-exports every Pydantic schema and enumeration from schemas.py and
enums.py so other modules can import them from venue_crm.models directly.

Usage:
    from venue_crm.models import (
        Interaction,
        Lead,
        Booking,
        FunnelMetrics,
        LeadStatus,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from venue_crm.models.enums import (
    # Record statuses
    InteractionStatus,
    LeadStatus,
    BookingStatus,
    # Analytics dimensions
    InteractionChannel,
    FunnelStage,
    # AI helper vocabularies
    Priority,
    Sentiment,
    Likelihood,
    FollowUpType,
    # Saved filters
    FilterType,
)

# =============================================================================
# Schemas
# =============================================================================

from venue_crm.models.schemas import (
    # Lenient coercion
    coerce_datetime,
    parse_headcount,
    # AI helper outputs
    LeadScoreFactors,
    LeadQualityScore,
    IntentTags,
    NextBestAction,
    FollowUpDraft,
    DigestMetrics,
    ManagerDigest,
    TimelineSummary,
    # Source records
    Customer,
    Interaction,
    Lead,
    Contact,
    Booking,
    # Analytics outputs
    FunnelMetrics,
    MonthlyRevenue,
    ChannelPerformance,
    TimeInsight,
    # Dashboard data
    VolumePoint,
    ConversionPoint,
    SheetAnalytics,
    DashboardData,
    # API envelopes
    FunnelResponse,
    MonthlyRevenueResponse,
    ChannelPerformanceResponse,
    TimeInsightsResponse,
    ErrorResponse,
    # AI helper requests
    LeadScoreRequest,
    IntentTagsRequest,
    NextActionRequest,
    FollowUpRequest,
    ManagerDigestRequest,
    TimelineSummaryRequest,
    # Saved filters
    SavedFilter,
    UserRole,
)

__all__ = [
    # Enums
    "InteractionStatus",
    "LeadStatus",
    "BookingStatus",
    "InteractionChannel",
    "FunnelStage",
    "Priority",
    "Sentiment",
    "Likelihood",
    "FollowUpType",
    "FilterType",
    # Coercion helpers
    "coerce_datetime",
    "parse_headcount",
    # AI helper outputs
    "LeadScoreFactors",
    "LeadQualityScore",
    "IntentTags",
    "NextBestAction",
    "FollowUpDraft",
    "DigestMetrics",
    "ManagerDigest",
    "TimelineSummary",
    # Source records
    "Customer",
    "Interaction",
    "Lead",
    "Contact",
    "Booking",
    # Analytics outputs
    "FunnelMetrics",
    "MonthlyRevenue",
    "ChannelPerformance",
    "TimeInsight",
    # Dashboard data
    "VolumePoint",
    "ConversionPoint",
    "SheetAnalytics",
    "DashboardData",
    # API envelopes
    "FunnelResponse",
    "MonthlyRevenueResponse",
    "ChannelPerformanceResponse",
    "TimeInsightsResponse",
    "ErrorResponse",
    # AI helper requests
    "LeadScoreRequest",
    "IntentTagsRequest",
    "NextActionRequest",
    "FollowUpRequest",
    "ManagerDigestRequest",
    "TimelineSummaryRequest",
    # Saved filters
    "SavedFilter",
    "UserRole",
]
