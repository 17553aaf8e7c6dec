# daycare/services/__init__.py
from .base_service import BaseService
from .integrity import IntegrityCoordinator
from .reporting import ReportingEngine, ReportKind
from .user_service import UserService
from .child_service import ChildService
from .activity_service import ActivityService
from .finance_service import FinanceService
from .message_service import MessageService
from .calendar_service import CalendarService
from .inventory_service import InventoryService
from .progress_service import ProgressService

__all__ = [
    "BaseService",
    "IntegrityCoordinator",
    "ReportingEngine",
    "ReportKind",
    "UserService",
    "ChildService",
    "ActivityService",
    "FinanceService",
    "MessageService",
    "CalendarService",
    "InventoryService",
    "ProgressService",
]
