"""Domain records and balance calculations."""

from .models import (
    AVATAR_OPTIONS,
    CATEGORY_INFO,
    DEFAULT_AVATAR,
    Expense,
    ExpenseCategory,
    Person,
    PersonBalance,
    Settlement,
    SettingEntry,
    SharedAccess,
    Trip,
    TripSummary,
    new_id,
)
from .balances import (
    SETTLEMENT_TOLERANCE,
    compute_balances,
    generate_settlements,
    summarize_trip,
)

__all__ = [
    "AVATAR_OPTIONS",
    "CATEGORY_INFO",
    "DEFAULT_AVATAR",
    "Expense",
    "ExpenseCategory",
    "Person",
    "PersonBalance",
    "Settlement",
    "SettingEntry",
    "SharedAccess",
    "Trip",
    "TripSummary",
    "new_id",
    "SETTLEMENT_TOLERANCE",
    "compute_balances",
    "generate_settlements",
    "summarize_trip",
]
