"""
Enumeration definitions for the venue CRM backend.

All enums inherit from both `str` and `Enum` so that Pydantic models serialize
them as their plain string values and incoming JSON strings validate directly
against them.

Groups:
- Record statuses: InteractionStatus, LeadStatus, BookingStatus
- Analytics dimensions: InteractionChannel, FunnelStage
- AI helper vocabularies: Priority, Sentiment, Likelihood, FollowUpType
- Saved filters: FilterType
"""

from enum import Enum


class InteractionStatus(str, Enum):
    """
    Outcome of a customer interaction (call or chat).

    - Completed: The conversation took place and has a summary or call id
    - Missed: No call id and no summary were recorded
    - In Progress: The conversation is still open
    """
    COMPLETED = "Completed"
    MISSED = "Missed"
    IN_PROGRESS = "In Progress"


class InteractionChannel(str, Enum):
    """
    Medium of a customer interaction.

    The sheet fetchers only ever produce Call; Chat and Web Form are kept so
    that channel performance always reports all three channels.
    """
    CALL = "Call"
    CHAT = "Chat"
    WEB_FORM = "Web Form"


class LeadStatus(str, Enum):
    """Sales status of a lead."""
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    LOST = "Lost"


class BookingStatus(str, Enum):
    """
    Status of a venue booking.

    Cancelled bookings still count toward projected revenue but never toward
    confirmed or pending revenue.
    """
    CONFIRMED = "Confirmed"
    PENDING = "Pending"
    CANCELLED = "Cancelled"


class FunnelStage(str, Enum):
    """
    Lead-to-booking funnel stages, declared in their fixed display order.

    Stages are inclusion filters, so one lead may count toward several of
    them at once.
    """
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    BOOKED = "Booked"
    COMPLETED = "Completed"


class Priority(str, Enum):
    """Urgency / priority level shared by intent tags and next-best-action."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Sentiment(str, Enum):
    """Conversation sentiment reported by lead scoring."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Likelihood(str, Enum):
    """Likelihood that a lead books, from the timeline summary."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FollowUpType(str, Enum):
    """Delivery channel for a drafted follow-up message."""
    EMAIL = "email"
    SMS = "sms"


class FilterType(str, Enum):
    """Record list a saved filter applies to."""
    INTERACTIONS = "interactions"
    LEADS = "leads"
    BOOKINGS = "bookings"
    CONTACTS = "contacts"
