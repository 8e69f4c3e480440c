"""
Venue CRM Services Module

Business logic for the venue CRM backend. Services hold no request state and
receive their collaborators (HTTP session, text generator, filter store) by
injection so they can be tested with mocks.

Services:
- analytics: Pure aggregation engine (funnel, revenue, channels, time insights)
- sheets: Google Sheet data source producing dashboard records
- ai_assist: AI text helpers with deterministic fallbacks
- filters: Saved filter sets and role default views

All services are consumed by the API layer (venue_crm/api/) and the jobs.
"""

# =============================================================================
# Analytics Engine Exports
# =============================================================================

from venue_crm.services.analytics import (
    PriceTier,
    REVENUE_ESTIMATES,
    CHANNEL_ORDER,
    estimate_revenue,
    compute_funnel,
    compute_monthly_revenue,
    compute_channel_performance,
    compute_time_insights,
)

# =============================================================================
# Sheet Data Source Exports
# =============================================================================

from venue_crm.services.sheets import (
    SheetsClient,
    SheetFetchError,
    SheetRecord,
    records_from_frame,
)

# =============================================================================
# AI Helper Exports
# =============================================================================

from venue_crm.services.ai_assist import (
    AIUnavailableError,
    TextGenerator,
    GroqTextGenerator,
    generate_structured_text,
    score_lead,
    tag_intent,
    suggest_next_action,
    draft_follow_up,
    build_manager_digest,
    build_rule_based_digest,
    summarize_timeline,
)

# =============================================================================
# Saved Filter Exports
# =============================================================================

from venue_crm.services.filters import (
    PREDEFINED_FILTERS,
    ROLE_DEFAULT_VIEWS,
    FilterStore,
    InMemoryFilterStore,
    FilterService,
)

__all__ = [
    # Analytics engine
    "PriceTier",
    "REVENUE_ESTIMATES",
    "CHANNEL_ORDER",
    "estimate_revenue",
    "compute_funnel",
    "compute_monthly_revenue",
    "compute_channel_performance",
    "compute_time_insights",
    # Sheet data source
    "SheetsClient",
    "SheetFetchError",
    "SheetRecord",
    "records_from_frame",
    # AI helpers
    "AIUnavailableError",
    "TextGenerator",
    "GroqTextGenerator",
    "generate_structured_text",
    "score_lead",
    "tag_intent",
    "suggest_next_action",
    "draft_follow_up",
    "build_manager_digest",
    "build_rule_based_digest",
    "summarize_timeline",
    # Saved filters
    "PREDEFINED_FILTERS",
    "ROLE_DEFAULT_VIEWS",
    "FilterStore",
    "InMemoryFilterStore",
    "FilterService",
]
