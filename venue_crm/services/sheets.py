"""
Google Sheet data source for the venue CRM dashboard.

The venue logs every enquiry call as one row of a public Google Sheet. This
module downloads a tab through the gviz CSV export, parses it with pandas and
maps each row onto the dashboard records:

- Interaction: one per row (every row is a phone call)
- Lead: one per row, status derived from the call summary and event type
- Contact: one per row
- Booking: one per row of the bookings tab (or the main tab)
- SheetAnalytics: weekly volume and conversion series for the overview charts

Sheet Layout (positional columns):
    A Name | B Email | C Phone | D Event Type | E Event Description |
    F Head Count | G Call_ID | H Call Recording | I Call Summary

    An optional column headed "Timestamp" or "Date" supplies interaction
    timestamps. Rows without a name are dropped before record ids are
    assigned.

Tabs:
    - Sheet1: main tab. When it has no data rows, tab "0" is tried instead.
    - LeadsGeneral Calls: preferred source for bookings.

Error Handling:
    Failure to download or parse the main tab raises SheetFetchError. The
    fallback tabs are best-effort: their failures are logged and ignored.

Caching:
    Each tab is cached in memory for `cache_seconds` (see Settings.
    sheet_cache_seconds) so a dashboard load that fetches every record type
    downloads the sheet once.

Usage:
    from venue_crm.services.sheets import SheetsClient

    client = SheetsClient(sheet_id="1mitXb...")
    data = client.fetch_dashboard()
"""

import io
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import pandas as pd
import requests

from venue_crm.models.enums import (
    BookingStatus,
    InteractionChannel,
    InteractionStatus,
    LeadStatus,
)
from venue_crm.models.schemas import (
    Booking,
    Contact,
    ConversionPoint,
    Customer,
    DashboardData,
    Interaction,
    Lead,
    SheetAnalytics,
    VolumePoint,
    coerce_datetime,
    parse_headcount,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

GVIZ_CSV_URL: str = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq"
AVATAR_URL: str = "https://ui-avatars.com/api/?name={name}&background=random&size=40"

MAIN_TAB: str = "Sheet1"
ALTERNATE_TAB: str = "0"
BOOKINGS_TAB: str = "LeadsGeneral Calls"

TIMESTAMP_HEADERS: Tuple[str, ...] = ("timestamp", "date")

# Summaries longer than this mark a lead as Contacted
CONTACTED_SUMMARY_LENGTH: int = 50

DEFAULT_COMPANY: str = "Individual"
DEFAULT_SERVICE: str = "Event Booking"
DEFAULT_STAFF: str = "Event Coordinator"
NO_CONTACT_INFO: str = "No contact info"

BOOKING_DAY_SPREAD: int = 30
BOOKING_START_HOUR: int = 9

WEEKDAYS: List[str] = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
CONVERSION_SERIES: List[Tuple[str, float]] = [
    ("Week 1", 0.8),
    ("Week 2", 0.9),
    ("Week 3", 1.0),
    ("Week 4", 1.1),
    ("Current", 1.0),
]


class SheetFetchError(Exception):
    """Raised when a sheet tab cannot be downloaded or parsed."""


# =============================================================================
# Row Parsing
# =============================================================================

@dataclass
class SheetRecord:
    """One non-blank row of the call log, with cells stripped."""
    name: str
    email: str = ""
    phone: str = ""
    event_type: str = ""
    event_description: str = ""
    headcount: str = ""
    call_id: str = ""
    call_summary: str = ""
    timestamp: str = ""


def _cell(row: List[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return str(value).strip() if value is not None else ""


def records_from_frame(df: pd.DataFrame) -> List[SheetRecord]:
    """
    Convert a parsed tab into SheetRecords.

    Columns are read by position; missing trailing columns read as blank.
    Rows whose name cell is blank are skipped.
    """
    headers = [str(column).strip().lower() for column in df.columns]
    timestamp_index = next(
        (i for i, header in enumerate(headers) if header in TIMESTAMP_HEADERS), None
    )

    records: List[SheetRecord] = []
    for row in df.values.tolist():
        name = _cell(row, 0)
        if not name:
            continue
        records.append(SheetRecord(
            name=name,
            email=_cell(row, 1),
            phone=_cell(row, 2),
            event_type=_cell(row, 3),
            event_description=_cell(row, 4),
            headcount=_cell(row, 5),
            call_id=_cell(row, 6),
            call_summary=_cell(row, 8),
            timestamp=_cell(row, timestamp_index),
        ))
    return records


def parse_csv(text: str) -> pd.DataFrame:
    """Parse gviz CSV text keeping every cell as a string."""
    if not text.strip():
        return pd.DataFrame()
    try:
        return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except pd.errors.ParserError as e:
        raise SheetFetchError(f"Failed to parse sheet CSV: {e}") from e


# =============================================================================
# Record Builders
# =============================================================================


def build_interactions(records: List[SheetRecord], fetched_at: datetime) -> List[Interaction]:
    """Map call log rows onto Interaction records."""
    interactions: List[Interaction] = []
    for index, record in enumerate(records, start=1):
        if not record.call_summary and not record.call_id:
            status = InteractionStatus.MISSED
        else:
            status = InteractionStatus.COMPLETED

        tags = [record.event_type] if record.event_type else []
        if record.call_summary:
            tags.append("Has Summary")

        interactions.append(Interaction(
            id=record.call_id or f"call-{index}",
            customer=Customer(
                name=record.name,
                avatar=AVATAR_URL.format(name=quote(record.name, safe="")),
            ),
            contact=record.email or record.phone or NO_CONTACT_INFO,
            timestamp=coerce_datetime(record.timestamp) or fetched_at,
            status=status,
            channel=InteractionChannel.CALL,
            transcript=record.call_summary,
            tags=tags,
            eventType=record.event_type or None,
            eventDescription=record.event_description or None,
            headcount=parse_headcount(record.headcount),
        ))
    return interactions


def lead_status_for(record: SheetRecord) -> LeadStatus:
    """
    Derive a lead's status from its row.

    Wedding enquiries are Qualified; otherwise a call summary longer than
    50 characters means Contacted, and anything else is New.
    """
    if record.event_type and "wedding" in record.event_type.lower():
        return LeadStatus.QUALIFIED
    if len(record.call_summary) > CONTACTED_SUMMARY_LENGTH:
        return LeadStatus.CONTACTED
    return LeadStatus.NEW


def build_leads(records: List[SheetRecord], fetched_at: datetime) -> List[Lead]:
    return [
        Lead(
            id=f"L{index}",
            name=record.name,
            company=record.event_type or DEFAULT_COMPANY,
            contact=record.email or record.phone,
            status=lead_status_for(record),
            lastInteraction=coerce_datetime(record.timestamp) or fetched_at,
        )
        for index, record in enumerate(records, start=1)
    ]


def build_contacts(records: List[SheetRecord], fetched_at: datetime) -> List[Contact]:
    return [
        Contact(
            id=f"C{index}",
            name=record.name,
            company=record.event_type or DEFAULT_COMPANY,
            contact=record.email or record.phone,
            lastInteraction=coerce_datetime(record.timestamp) or fetched_at,
        )
        for index, record in enumerate(records, start=1)
    ]


def build_bookings(records: List[SheetRecord], reference: datetime) -> List[Booking]:
    """
    Map rows onto Booking records.

    The sheet carries no booking dates, so row n (0-based) is scheduled
    n % 30 days after the reference day, starting at 09:00 and shifted by
    2n % 24 hours and 15n % 60 minutes. Hours past midnight roll over into
    the following day.
    """
    day_start = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    bookings: List[Booking] = []
    for index, record in enumerate(records):
        status = BookingStatus.PENDING
        if "confirmed" in record.call_summary.lower():
            status = BookingStatus.CONFIRMED

        bookings.append(Booking(
            id=f"B{index + 1}",
            customer=record.name,
            service=record.event_type or record.event_description or DEFAULT_SERVICE,
            staff=DEFAULT_STAFF,
            dateTime=day_start + timedelta(
                days=index % BOOKING_DAY_SPREAD,
                hours=BOOKING_START_HOUR + (index * 2) % 24,
                minutes=(index * 15) % 60,
            ),
            status=status,
        ))
    return bookings


def build_analytics(records: List[SheetRecord]) -> SheetAnalytics:
    """Derive the overview chart series from the call log."""
    total_calls = len(records)
    completed_calls = sum(1 for record in records if record.call_summary)

    volume = [
        VolumePoint(name=day, calls=total_calls // 7 + index % 3, chats=0)
        for index, day in enumerate(WEEKDAYS)
    ]

    rate = completed_calls / total_calls * 100 if total_calls else 0.0
    conversion = [
        ConversionPoint(date=label, rate=rate * factor)
        for label, factor in CONVERSION_SERIES
    ]
    return SheetAnalytics(volume=volume, conversion=conversion)


# =============================================================================
# Sheets Client
# =============================================================================


class SheetsClient:
    """
    Downloads and caches tabs of the venue's Google Sheet.

    Args:
        sheet_id: Spreadsheet id from the sheet URL.
        cache_seconds: How long a downloaded tab is reused. 0 disables caching.
        timeout: HTTP timeout in seconds.
        session: Optional requests.Session (injected in tests).
        clock: Monotonic clock used for cache expiry.
        now: Wall clock used for fetch timestamps and booking dates.
    """

    def __init__(
        self,
        sheet_id: str,
        cache_seconds: float = 60,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.sheet_id = sheet_id
        self.cache_seconds = cache_seconds
        self.timeout = timeout
        self.session = session or requests.Session()
        self._clock = clock
        self._now = now
        self._cache: Dict[str, Tuple[float, pd.DataFrame]] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Tab access
    # -------------------------------------------------------------------------

    def fetch_tab(self, sheet_name: str) -> pd.DataFrame:
        """
        Download one tab as a DataFrame of strings.

        Raises:
            SheetFetchError: On network errors, non-2xx responses or
                unparseable CSV.
        """
        with self._lock:
            cached = self._cache.get(sheet_name)
            if cached is not None and cached[0] > self._clock():
                return cached[1]

        url = GVIZ_CSV_URL.format(sheet_id=self.sheet_id)
        try:
            response = self.session.get(
                url,
                params={"tqx": "out:csv", "sheet": sheet_name},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise SheetFetchError(f'Failed to fetch sheet "{sheet_name}": {e}') from e

        df = parse_csv(response.text)
        logger.debug(f'Fetched sheet "{sheet_name}": {len(df)} rows')

        if self.cache_seconds > 0:
            with self._lock:
                self._cache[sheet_name] = (self._clock() + self.cache_seconds, df)
        return df

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _optional_records(self, sheet_name: str) -> List[SheetRecord]:
        try:
            return records_from_frame(self.fetch_tab(sheet_name))
        except SheetFetchError as e:
            logger.warning(f'Optional sheet "{sheet_name}" unavailable: {e}')
            return []

    def main_records(self) -> List[SheetRecord]:
        """Rows of the main tab, or of tab "0" when the main tab is empty."""
        records = records_from_frame(self.fetch_tab(MAIN_TAB))
        if records:
            return records
        logger.info(f'Sheet "{MAIN_TAB}" has no data rows, trying "{ALTERNATE_TAB}"')
        return self._optional_records(ALTERNATE_TAB)

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def fetch_interactions(self) -> List[Interaction]:
        return build_interactions(self.main_records(), self._now())

    def fetch_leads(self) -> List[Lead]:
        return build_leads(self.main_records(), self._now())

    def fetch_contacts(self) -> List[Contact]:
        return build_contacts(self.main_records(), self._now())

    def fetch_bookings(self) -> List[Booking]:
        """Bookings from the bookings tab, falling back to the main tab."""
        records = self._optional_records(BOOKINGS_TAB)
        if not records:
            records = self.main_records()
        return build_bookings(records, self._now())

    def fetch_analytics(self) -> SheetAnalytics:
        return build_analytics(self.main_records())

    def fetch_dashboard(self) -> DashboardData:
        """Fetch every record type in one pass over the main tab."""
        records = self.main_records()
        fetched_at = self._now()
        booking_records = self._optional_records(BOOKINGS_TAB) or records

        data = DashboardData(
            interactions=build_interactions(records, fetched_at),
            leads=build_leads(records, fetched_at),
            contacts=build_contacts(records, fetched_at),
            bookings=build_bookings(booking_records, fetched_at),
            analytics=build_analytics(records),
        )
        logger.info(
            f"Loaded dashboard data: {len(data.interactions)} interactions, "
            f"{len(data.leads)} leads, {len(data.bookings)} bookings"
        )
        return data
