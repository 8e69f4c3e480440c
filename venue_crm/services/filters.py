"""
Saved filter sets and role-based default views.

Every list view of the dashboard (interactions, leads, bookings, contacts)
offers a set of predefined filters plus any custom filters the user saved.
Custom filters are kept in a key-value FilterStore as a JSON array under
the key "saved-filters-{type}"; predefined filters are never written to
the store and cannot be overwritten or deleted.

Each role (coordinator, sales, manager) opens every list on a default view
given by ROLE_DEFAULT_VIEWS. The current role is stored under "user-role"
and defaults to "manager".

Usage:
    service = FilterService(InMemoryFilterStore())
    service.save_filter(SavedFilter(id="vip", name="VIP", type="leads", filters={}))
    service.get_saved_filters(FilterType.LEADS)
"""

import json
import logging
import threading
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from venue_crm.models.enums import FilterType
from venue_crm.models.schemas import SavedFilter

logger = logging.getLogger(__name__)


# =============================================================================
# Predefined Filters
# =============================================================================

PREDEFINED_FILTERS: List[SavedFilter] = [
    SavedFilter(
        id="today-calls",
        name="Today's Calls",
        description="All calls from today",
        type=FilterType.INTERACTIONS,
        filters={"channel": "Call", "dateRange": "today", "status": "all"},
    ),
    SavedFilter(
        id="unqualified-wedding-leads",
        name="Unqualified Wedding Leads",
        description="Wedding leads that need qualification",
        type=FilterType.LEADS,
        filters={"status": "New", "eventType": "Wedding", "search": ""},
    ),
    SavedFilter(
        id="high-value-corporate",
        name="High-Value Corporate",
        description="Corporate events with high headcount",
        type=FilterType.LEADS,
        filters={
            "status": ["New", "Contacted", "Qualified"],
            "eventType": "Corporate",
            "minHeadcount": 50,
        },
    ),
    SavedFilter(
        id="upcoming-bookings",
        name="Upcoming Bookings",
        description="All upcoming confirmed bookings",
        type=FilterType.BOOKINGS,
        filters={"status": "Confirmed", "dateRange": "future"},
        role="coordinator",
    ),
    SavedFilter(
        id="new-qualified-leads",
        name="New + Qualified Leads",
        description="New and qualified leads for sales",
        type=FilterType.LEADS,
        filters={"status": ["New", "Qualified"]},
        role="sales",
    ),
    SavedFilter(
        id="pending-bookings",
        name="Pending Bookings",
        description="Bookings awaiting confirmation",
        type=FilterType.BOOKINGS,
        filters={"status": "Pending"},
    ),
    SavedFilter(
        id="missed-interactions",
        name="Missed Interactions",
        description="All missed calls and chats",
        type=FilterType.INTERACTIONS,
        filters={"status": "Missed"},
    ),
    SavedFilter(
        id="completed-today",
        name="Completed Today",
        description="All completed interactions today",
        type=FilterType.INTERACTIONS,
        filters={"status": "Completed", "dateRange": "today"},
    ),
]

PREDEFINED_IDS = frozenset(f.id for f in PREDEFINED_FILTERS)

# "default" under contacts names no filter, so contacts open unfiltered
ROLE_DEFAULT_VIEWS: Dict[str, Dict[FilterType, str]] = {
    "coordinator": {
        FilterType.INTERACTIONS: "completed-today",
        FilterType.LEADS: "unqualified-wedding-leads",
        FilterType.BOOKINGS: "upcoming-bookings",
        FilterType.CONTACTS: "default",
    },
    "sales": {
        FilterType.INTERACTIONS: "today-calls",
        FilterType.LEADS: "new-qualified-leads",
        FilterType.BOOKINGS: "pending-bookings",
        FilterType.CONTACTS: "default",
    },
    "manager": {
        FilterType.INTERACTIONS: "today-calls",
        FilterType.LEADS: "high-value-corporate",
        FilterType.BOOKINGS: "upcoming-bookings",
        FilterType.CONTACTS: "default",
    },
}

DEFAULT_ROLE: str = "manager"
ROLE_KEY: str = "user-role"


def storage_key(filter_type: FilterType) -> str:
    return f"saved-filters-{filter_type.value}"


# =============================================================================
# Filter Stores
# =============================================================================


class FilterStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryFilterStore:
    """Process-local FilterStore; contents are lost on restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


# =============================================================================
# Filter Service
# =============================================================================


class FilterService:
    """
    Reads and writes saved filters through a FilterStore.

    save_filter and delete_filter hold the service lock for their whole
    read-modify-write, so share one instance between concurrent callers.
    """

    def __init__(self, store: FilterStore):
        self.store = store
        self._lock = threading.Lock()

    def _custom_filters(self, filter_type: FilterType) -> List[SavedFilter]:
        raw = self.store.get(storage_key(filter_type))
        if not raw:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("stored filters are not a list")
            return [SavedFilter.model_validate(item) for item in items]
        except (ValueError, ValidationError) as e:
            logger.error(f"Ignoring unreadable saved filters for {filter_type.value}: {e}")
            return []

    def _write_custom(self, filter_type: FilterType, filters: List[SavedFilter]) -> None:
        custom = [f for f in filters if f.id not in PREDEFINED_IDS]
        payload = json.dumps([f.model_dump(mode="json", exclude_none=True) for f in custom])
        self.store.set(storage_key(filter_type), payload)

    def get_saved_filters(self, filter_type: FilterType) -> List[SavedFilter]:
        """Predefined filters of this type followed by custom ones."""
        predefined = [f for f in PREDEFINED_FILTERS if f.type == filter_type]
        return predefined + self._custom_filters(filter_type)

    def save_filter(self, saved: SavedFilter) -> SavedFilter:
        """
        Insert or replace a custom filter by id.

        Saving under a predefined id leaves the predefined filter untouched.
        """
        with self._lock:
            existing = self.get_saved_filters(saved.type)
            if any(f.id == saved.id for f in existing):
                updated = [saved if f.id == saved.id else f for f in existing]
            else:
                updated = existing + [saved]
            self._write_custom(saved.type, updated)
        logger.info(f"Saved filter {saved.id} ({saved.type.value})")
        return saved

    def delete_filter(self, filter_id: str, filter_type: FilterType) -> bool:
        """Remove a custom filter. Returns False if nothing was removed."""
        with self._lock:
            existing = self.get_saved_filters(filter_type)
            remaining = [f for f in existing if f.id != filter_id]
            removed = len(remaining) != len(existing) and filter_id not in PREDEFINED_IDS
            self._write_custom(filter_type, remaining)
        return removed

    def get_default_view(self, role: str, filter_type: FilterType) -> Optional[SavedFilter]:
        view_id = ROLE_DEFAULT_VIEWS.get(role, {}).get(filter_type)
        if not view_id:
            return None
        return next((f for f in self.get_saved_filters(filter_type) if f.id == view_id), None)

    def get_current_role(self) -> str:
        return self.store.get(ROLE_KEY) or DEFAULT_ROLE

    def set_current_role(self, role: str) -> None:
        self.store.set(ROLE_KEY, role)
