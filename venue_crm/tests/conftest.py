"""
Pytest Configuration and Shared Fixtures for the Venue CRM Backend Tests.

This module provides fixtures and configuration for all backend tests, supporting:
- Async test execution with pytest-asyncio (AI helpers and the Slack job)
- Record factories for interactions, leads and bookings
- A small realistic dataset used across the analytics tests
- Mock external services (Google Sheet HTTP session, Slack webhook)
- A stub text generator standing in for the Groq API
- Settings overrides that never read the developer's .env

Test modules:
- test_analytics.py: Revenue estimator, funnel, monthly revenue, channels, time insights
- test_schemas.py: Lenient timestamp and headcount coercion
- test_sheets.py: CSV parsing, record mapping, tab fallbacks, caching
- test_ai_assist.py: JSON extraction, normalization, fallbacks, rule-based digest
- test_filters.py: Predefined filters, custom filter persistence, default views
- test_api.py: Route contracts with FastAPI TestClient and dependency overrides
- test_jobs.py: Slack manager digest job
"""

from datetime import datetime
from typing import Dict, Generator, List, Optional
from unittest.mock import Mock, patch

import pytest
import requests

from venue_crm.core.config import Settings
from venue_crm.models import (
    Booking,
    BookingStatus,
    Customer,
    Interaction,
    InteractionChannel,
    InteractionStatus,
    Lead,
    LeadStatus,
)


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - integration: Marks tests that would reach the real Google Sheet or Slack
    """
    config.addinivalue_line(
        'markers',
        'integration: marks tests requiring external service connectivity'
    )


# ============================================================
# RECORD FACTORIES (Exported)
# ============================================================

def make_interaction(
    name: str,
    timestamp: Optional[datetime] = None,
    channel: InteractionChannel = InteractionChannel.CALL,
    event_type: Optional[str] = None,
    status: InteractionStatus = InteractionStatus.COMPLETED,
    interaction_id: Optional[str] = None,
    transcript: str = "",
) -> Interaction:
    """Build an Interaction with only the fields a test cares about."""
    return Interaction(
        id=interaction_id or f"call-{name.lower().replace(' ', '-')}",
        customer=Customer(name=name),
        contact=f"{name.lower().replace(' ', '.')}@example.com",
        timestamp=timestamp,
        status=status,
        channel=channel,
        transcript=transcript,
        eventType=event_type,
    )


def make_lead(
    name: str,
    status: LeadStatus = LeadStatus.NEW,
    company: str = "Wedding",
    lead_id: Optional[str] = None,
) -> Lead:
    """Build a Lead; company doubles as the event type label."""
    return Lead(
        id=lead_id or f"L-{name}",
        name=name,
        company=company,
        contact=f"{name.lower()}@example.com",
        status=status,
    )


def make_booking(
    customer: str,
    service: str = "Wedding",
    status: BookingStatus = BookingStatus.PENDING,
    date_time: Optional[datetime] = None,
    booking_id: Optional[str] = None,
) -> Booking:
    """Build a Booking; service doubles as the event type label."""
    return Booking(
        id=booking_id or f"B-{customer}",
        customer=customer,
        service=service,
        staff="Event Coordinator",
        dateTime=date_time,
        status=status,
    )


def assert_close(actual: float, expected: float, tolerance: float = 0.001) -> None:
    """
    Assert two floats are close within tolerance.

    Error Format:
        AssertionError: 33.34 not close to 33.333 within tolerance 0.001
    """
    if abs(actual - expected) >= tolerance:
        raise AssertionError(
            f'{actual} not close to {expected} within tolerance {tolerance}'
        )


# ============================================================
# SAMPLE DATASET
# ============================================================

@pytest.fixture
def sample_leads() -> List[Lead]:
    """
    Five leads covering every status.

    - Alice: New wedding lead, booked (Confirmed), called in
    - Bob: Contacted corporate lead, booked (Pending), chatted
    - Carol: Qualified birthday lead, no booking, called in
    - Dan: New lead with no interaction or booking
    - Eve: Lost conference lead, booking Cancelled, via web form
    """
    return [
        make_lead("Alice", LeadStatus.NEW, "Wedding", "L1"),
        make_lead("Bob", LeadStatus.CONTACTED, "Corporate", "L2"),
        make_lead("Carol", LeadStatus.QUALIFIED, "Birthday", "L3"),
        make_lead("Dan", LeadStatus.NEW, "Meeting", "L4"),
        make_lead("Eve", LeadStatus.LOST, "Conference", "L5"),
    ]


@pytest.fixture
def sample_bookings() -> List[Booking]:
    """Bookings for Alice (Jul 2024), Bob (Jul 2024) and Eve (Aug 2024)."""
    return [
        make_booking("alice", "Wedding", BookingStatus.CONFIRMED, datetime(2024, 7, 6, 15, 0), "B1"),
        make_booking("Bob", "Corporate", BookingStatus.PENDING, datetime(2024, 7, 20, 10, 0), "B2"),
        make_booking("Eve", "Conference", BookingStatus.CANCELLED, datetime(2024, 8, 2, 9, 30), "B3"),
    ]


@pytest.fixture
def sample_interactions() -> List[Interaction]:
    """
    Interactions on two weekdays.

    2024-07-01 is a Monday and 2024-07-02 a Tuesday.
    """
    return [
        make_interaction("ALICE", datetime(2024, 7, 1, 10, 15), InteractionChannel.CALL, interaction_id="I1"),
        make_interaction("Alice", datetime(2024, 7, 1, 10, 45), InteractionChannel.CHAT, interaction_id="I2"),
        make_interaction("Bob", datetime(2024, 7, 1, 14, 0), InteractionChannel.CHAT, interaction_id="I3"),
        make_interaction("Carol", datetime(2024, 7, 2, 10, 5), InteractionChannel.CALL, interaction_id="I4"),
        make_interaction("Eve", datetime(2024, 7, 2, 16, 30), InteractionChannel.WEB_FORM, interaction_id="I5"),
    ]


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def test_settings() -> Settings:
    """
    Settings built without reading .env, with AI and Slack disabled.

    Usage:
        def test_with_settings(test_settings):
            test_settings.slack_webhook_url = 'https://hooks.slack.com/services/T/B/X'
    """
    return Settings(
        _env_file=None,
        google_sheet_id='test-sheet-id',
        sheet_cache_seconds=0,
        groq_api_key=None,
        slack_webhook_url=None,
    )


# ============================================================
# EXTERNAL SERVICE MOCKS
# ============================================================

class StubTextGenerator:
    """
    Stand-in for GroqTextGenerator returning canned text.

    Records every prompt so tests can assert on what was sent. When
    `error` is set, generate() raises it instead.
    """

    def __init__(self, response: str = "", error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def stub_generator() -> StubTextGenerator:
    return StubTextGenerator()


def make_http_response(text: str = "", status_code: int = 200) -> Mock:
    """
    Mock requests.Response with raise_for_status behaving like the real one.
    """
    response = Mock()
    response.text = text
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def mock_session() -> Mock:
    """
    Mock requests.Session whose get() returns tab CSVs from `tabs`.

    Usage:
        def test_fetch(mock_session):
            mock_session.tabs['Sheet1'] = 'Name,Email\\nAlice,a@x.com\\n'
    Tabs not present in `tabs` answer 400.
    """
    session = Mock()
    session.tabs = {}

    def get(url: str, params: Optional[Dict[str, str]] = None, timeout: float = 0):
        name = (params or {}).get('sheet')
        body = session.tabs.get(name)
        if isinstance(body, Exception):
            raise body
        if body is None:
            return make_http_response('', status_code=400)
        return make_http_response(body)

    session.get = Mock(side_effect=get)
    return session


@pytest.fixture
def mock_slack_client() -> Generator[Mock, None, None]:
    """
    Mock Slack WebhookClient for testing the manager digest job.

    Mocked Methods:
        - client.send(text=..., blocks=...): Returns response with status_code=200

    Note:
        Patches at 'venue_crm.jobs.manager_digest.WebhookClient' so every
        instantiation inside the job uses the mock.
    """
    client = Mock()

    response = Mock()
    response.status_code = 200
    response.body = 'ok'

    client.send = Mock(return_value=response)

    with patch('venue_crm.jobs.manager_digest.WebhookClient', return_value=client):
        yield client


# ============================================================
# MODULE EXPORTS
# ============================================================

__all__ = [
    'make_interaction',
    'make_lead',
    'make_booking',
    'make_http_response',
    'assert_close',
    'StubTextGenerator',
]
