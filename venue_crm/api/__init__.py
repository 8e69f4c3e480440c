"""
Venue CRM API package initialization.

This package contains FastAPI router modules for the venue CRM dashboard:
- analytics: Funnel, monthly revenue, channel performance, time insights
- data: Dashboard records from the Google Sheet
- ai: AI-assisted helpers (lead score, intent tags, next action, follow-up,
  manager digest, timeline summary)
- filters: Saved filters and role default views
"""

from fastapi import APIRouter

# Import router modules
from venue_crm.api.analytics import router as analytics_router
from venue_crm.api.data import router as data_router
from venue_crm.api.ai import router as ai_router
from venue_crm.api.filters import router as filters_router

# Create main API router; each sub-router carries its own prefix
api_router = APIRouter()

api_router.include_router(analytics_router)
api_router.include_router(data_router)
api_router.include_router(ai_router)
api_router.include_router(filters_router)

# Export all routers for selective imports
__all__ = [
    "api_router",
    "analytics_router",
    "data_router",
    "ai_router",
    "filters_router",
]
