# daycare/schemas/enums.py
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"
    STAFF = "staff"
    FINANCE = "finance"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Department(str, Enum):
    ADMINISTRATION = "administration"
    TEACHING = "teaching"
    FINANCE = "finance"
    MAINTENANCE = "maintenance"
    KITCHEN = "kitchen"


class FeeStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class ActivityStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ActivityType(str, Enum):
    EDUCATIONAL = "educational"
    RECREATIONAL = "recreational"
    OUTDOOR = "outdoor"
    ARTS_CRAFTS = "arts_crafts"
    MUSIC = "music"
    STORY_TIME = "story_time"
    PHYSICAL = "physical"
    FIELD_TRIP = "field_trip"
    SPECIAL_EVENT = "special_event"


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCategory(str, Enum):
    # Income categories
    TUITION_FEES = "tuition_fees"
    REGISTRATION_FEES = "registration_fees"
    LATE_FEES = "late_fees"
    ACTIVITY_FEES = "activity_fees"
    DONATIONS = "donations"
    GRANTS = "grants"
    OTHER_INCOME = "other_income"
    # Expense categories
    SALARIES = "salaries"
    UTILITIES = "utilities"
    SUPPLIES = "supplies"
    FOOD = "food"
    MAINTENANCE = "maintenance"
    INSURANCE = "insurance"
    RENT = "rent"
    EQUIPMENT = "equipment"
    TRAINING = "training"
    OTHER_EXPENSE = "other_expense"


INCOME_CATEGORIES = frozenset({
    TransactionCategory.TUITION_FEES,
    TransactionCategory.REGISTRATION_FEES,
    TransactionCategory.LATE_FEES,
    TransactionCategory.ACTIVITY_FEES,
    TransactionCategory.DONATIONS,
    TransactionCategory.GRANTS,
    TransactionCategory.OTHER_INCOME,
})

EXPENSE_CATEGORIES = frozenset(set(TransactionCategory) - INCOME_CATEGORIES)


class TransactionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHECK = "check"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    ONLINE_PAYMENT = "online_payment"


class MessageType(str, Enum):
    GENERAL = "general"
    INCIDENT = "incident"
    ACHIEVEMENT = "achievement"
    CONCERN = "concern"
    REMINDER = "reminder"
    EMERGENCY = "emergency"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MessageBox(str, Enum):
    INBOX = "inbox"
    SENT = "sent"


class EventType(str, Enum):
    HOLIDAY = "holiday"
    FIELD_TRIP = "field_trip"
    PARENT_MEETING = "parent_meeting"
    STAFF_MEETING = "staff_meeting"
    TRAINING = "training"
    SPECIAL_EVENT = "special_event"
    BIRTHDAY = "birthday"
    MAINTENANCE = "maintenance"
    CLOSURE = "closure"


class EventStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class InventoryCategory(str, Enum):
    TOYS = "toys"
    BOOKS = "books"
    ART_SUPPLIES = "art_supplies"
    EDUCATIONAL_MATERIALS = "educational_materials"
    FURNITURE = "furniture"
    ELECTRONICS = "electronics"
    SAFETY_EQUIPMENT = "safety_equipment"
    CLEANING_SUPPLIES = "cleaning_supplies"
    FOOD_SUPPLIES = "food_supplies"
    MEDICAL_SUPPLIES = "medical_supplies"
    OUTDOOR_EQUIPMENT = "outdoor_equipment"
    OFFICE_SUPPLIES = "office_supplies"


class InventoryUnit(str, Enum):
    PIECES = "pieces"
    BOXES = "boxes"
    BOTTLES = "bottles"
    PACKS = "packs"
    SETS = "sets"
    ROLLS = "rolls"
    BAGS = "bags"
    LITERS = "liters"
    KILOGRAMS = "kilograms"
    METERS = "meters"


class ItemCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DAMAGED = "damaged"


class ItemStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    DISPOSED = "disposed"


class ReportType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class ReportGranularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
