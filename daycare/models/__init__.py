# daycare/models/__init__.py
from .base import Base, TimestampMixin
from .user import User
from .child import Child, child_parents
from .activity import Activity, activity_participants, activity_assistants
from .finance import Transaction
from .message import Message
from .calendar import CalendarEvent
from .inventory import InventoryItem
from .progress import ProgressReport

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Child",
    "child_parents",
    "Activity",
    "activity_participants",
    "activity_assistants",
    "Transaction",
    "Message",
    "CalendarEvent",
    "InventoryItem",
    "ProgressReport",
]
