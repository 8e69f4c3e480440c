"""
Venue CRM Backend Package.

FastAPI service layer for the venue events dashboard. Serves interactions,
leads, contacts and bookings pulled from the venue's Google Sheet, the
analytics aggregation engine built on top of them, and AI-assisted helpers.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Analytics engine, sheet data source, AI helpers, saved filters
    - jobs: Manager digest automation
"""

__version__ = "1.0.0"
