"""
Shared enumerations for database models.

Enums are mapped to database enums so an unknown split method
or category is rejected by the database, not just by Python.
"""

import enum


class SplitMethod(str, enum.Enum):
    """How an expense total is divided among participants."""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    UNEQUAL = "unequal"
    SHARES = "shares"


class ExpenseCategory(str, enum.Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    HOME = "home"
    BILLS = "bills"
    HEALTH = "health"
    TRAVEL = "travel"
    EDUCATION = "education"
    OTHER = "other"


class ActivityType(str, enum.Enum):
    GROUP_CREATED = "group_created"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    FRIEND_ADDED = "friend_added"
    FRIEND_REMOVED = "friend_removed"
    EXPENSE_ADDED = "expense_added"
    ADMIN_CHANGED = "admin_changed"
