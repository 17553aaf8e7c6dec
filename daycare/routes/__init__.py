# daycare/routes/__init__.py
from . import activities, calendar, children, finance, inventory, messages, progress, reports, users

__all__ = [
    "activities",
    "calendar",
    "children",
    "finance",
    "inventory",
    "messages",
    "progress",
    "reports",
    "users",
]
