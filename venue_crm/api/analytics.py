"""
FastAPI router module for the analytics tab.

Endpoints:
- GET /analytics/funnel: Five-stage lead-to-booking funnel
- GET /analytics/revenue: Estimated revenue per calendar month
- GET /analytics/channels: Conversions and revenue per interaction channel
- GET /analytics/time-insights: Weekday and hour-of-day activity patterns

Each request fetches fresh records from the Google Sheet (subject to the
sheets client cache) and runs the pure aggregation engine in
venue_crm.services.analytics over them.

Error Handling:
    Any failure, whether fetching the sheet or computing metrics, is logged
    with its traceback and answered with HTTP 500 and a JSON body of the form
    {"error": "<message>"}. Partial results are never returned.

Handlers are plain `def` functions: sheet downloads are blocking, so
FastAPI runs them in its threadpool.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from venue_crm.core.dependencies import SheetsClientDep
from venue_crm.models import (
    ChannelPerformanceResponse,
    ErrorResponse,
    FunnelResponse,
    MonthlyRevenueResponse,
    TimeInsightsResponse,
)
from venue_crm.services.analytics import (
    compute_channel_performance,
    compute_funnel,
    compute_monthly_revenue,
    compute_time_insights,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])

ERROR_RESPONSES = {500: {"model": ErrorResponse, "description": "Fetch or computation failure"}}


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/funnel", response_model=FunnelResponse, responses=ERROR_RESPONSES)
def get_funnel(sheets: SheetsClientDep):
    """
    Return the lead-to-booking funnel.

    Stages are New, Contacted, Qualified, Booked and Completed, always in
    that order, each with count, share of New, dropoff from the previous
    stage and estimated revenue.
    """
    try:
        interactions = sheets.fetch_interactions()
        leads = sheets.fetch_leads()
        bookings = sheets.fetch_bookings()

        funnel = compute_funnel(leads, bookings, interactions)
        return FunnelResponse(funnel=funnel)
    except Exception as e:
        logger.error(f"Error calculating funnel: {str(e)}", exc_info=True)
        return _error("Failed to calculate funnel")


@router.get("/revenue", response_model=MonthlyRevenueResponse, responses=ERROR_RESPONSES)
def get_monthly_revenue(sheets: SheetsClientDep):
    """Return confirmed, pending and projected revenue per month."""
    try:
        bookings = sheets.fetch_bookings()
        return MonthlyRevenueResponse(monthlyRevenue=compute_monthly_revenue(bookings))
    except Exception as e:
        logger.error(f"Error calculating revenue: {str(e)}", exc_info=True)
        return _error("Failed to calculate revenue")


@router.get("/channels", response_model=ChannelPerformanceResponse, responses=ERROR_RESPONSES)
def get_channel_performance(sheets: SheetsClientDep):
    """Return performance for the Call, Chat and Web Form channels."""
    try:
        interactions = sheets.fetch_interactions()
        leads = sheets.fetch_leads()
        bookings = sheets.fetch_bookings()

        performance = compute_channel_performance(interactions, leads, bookings)
        return ChannelPerformanceResponse(channelPerformance=performance)
    except Exception as e:
        logger.error(f"Error calculating channel performance: {str(e)}", exc_info=True)
        return _error("Failed to calculate channel performance")


@router.get("/time-insights", response_model=TimeInsightsResponse, responses=ERROR_RESPONSES)
def get_time_insights(sheets: SheetsClientDep):
    """Return up to five time-of-week activity insights."""
    try:
        interactions = sheets.fetch_interactions()
        leads = sheets.fetch_leads()

        insights = compute_time_insights(interactions, leads)
        return TimeInsightsResponse(insights=insights)
    except Exception as e:
        logger.error(f"Error calculating time insights: {str(e)}", exc_info=True)
        return _error("Failed to calculate time insights")
