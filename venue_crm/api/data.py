"""
FastAPI router module for the dashboard data feed.

GET /data returns every record the dashboard renders, built from the
Google Sheet in one pass: interactions, leads, contacts, bookings and the
overview chart series. Failures are answered with HTTP 500 and
{"error": "Failed to fetch data from Google Sheets"}.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from venue_crm.core.dependencies import SheetsClientDep
from venue_crm.models import DashboardData, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["data"])


@router.get(
    "/data",
    response_model=DashboardData,
    responses={500: {"model": ErrorResponse}},
)
def get_dashboard_data(sheets: SheetsClientDep):
    """Return all dashboard records from the Google Sheet."""
    try:
        return sheets.fetch_dashboard()
    except Exception as e:
        logger.error(f"Error fetching data: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch data from Google Sheets"},
        )
