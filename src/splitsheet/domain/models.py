"""Domain records for trips, people and expenses."""

import datetime as dt
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a record identifier."""
    return str(uuid.uuid4())


AVATAR_OPTIONS = [
    "👨‍💼", "👩‍💼", "👨‍🎓", "👩‍🎓", "👨‍🍳", "👩‍🍳",
    "👨‍🎨", "👩‍🎨", "👨‍⚕️", "👩‍⚕️", "👨‍🔬", "👩‍🔬",
    "🧑‍💻", "👨‍💻", "👩‍💻", "🧑‍🎤", "👨‍🎤", "👩‍🎤",
    "🧑‍🌾", "👨‍🌾", "👩‍🌾", "🧑‍🏫", "👨‍🏫", "👩‍🏫",
    "🧙‍♂️", "🧙‍♀️", "🦸‍♂️", "🦸‍♀️", "🧝‍♂️", "🧝‍♀️",
]

DEFAULT_AVATAR = AVATAR_OPTIONS[0]


class ExpenseCategory(str, Enum):
    """Closed set of expense categories."""

    FOOD = "food"
    TRANSPORT = "transport"
    ACCOMMODATION = "accommodation"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_INFO[self]["label"]

    @property
    def icon(self) -> str:
        return CATEGORY_INFO[self]["icon"]


CATEGORY_INFO: dict[ExpenseCategory, dict[str, str]] = {
    ExpenseCategory.FOOD: {"label": "Food", "icon": "🍽️"},
    ExpenseCategory.TRANSPORT: {"label": "Transport", "icon": "🚗"},
    ExpenseCategory.ACCOMMODATION: {"label": "Accommodation", "icon": "🏨"},
    ExpenseCategory.ENTERTAINMENT: {"label": "Entertainment", "icon": "🎉"},
    ExpenseCategory.SHOPPING: {"label": "Shopping", "icon": "🛍️"},
    ExpenseCategory.OTHER: {"label": "Other", "icon": "📋"},
}


class Record(BaseModel):
    """Base for sheet-backed records.

    Attributes are snake_case; aliases are the camelCase sheet headers and
    are what gets serialized.
    """

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value, info):
        # Empty optional cells mean "not set"
        field = cls.model_fields.get(info.field_name)
        if value == "" and field is not None and not field.is_required() and field.default is None:
            return None
        return value


class Person(Record):
    """Someone who takes part in trips."""

    id: str
    name: str
    email: Optional[str] = None
    avatar: str = DEFAULT_AVATAR
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")


class Trip(Record):
    """A trip shared by a group of people."""

    id: str
    name: str
    description: Optional[str] = None
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    people: list[str] = Field(default_factory=list)  # Person ids, in display order
    created_by: str = Field(alias="createdBy")
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")

    @model_validator(mode="after")
    def _check_dates(self) -> "Trip":
        if self.start_date > self.end_date:
            raise ValueError(
                f"Trip start date {self.start_date} is after end date {self.end_date}"
            )
        return self


class Expense(Record):
    """Money spent by one person on behalf of some trip members."""

    id: str
    trip_id: str = Field(alias="tripId")
    description: str
    amount: float = Field(ge=0)
    paid_by: str = Field(alias="paidBy")
    participants: list[str] = Field(min_length=1)
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: dt.date
    is_settled: bool = Field(default=False, alias="isSettled")
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")


class SharedAccess(Record):
    """A trip shared with another Google account."""

    trip_id: str = Field(alias="tripId")
    shared_with: str = Field(alias="sharedWith")
    permission: str = "read"
    shared_at: datetime = Field(default_factory=_utc_now, alias="sharedAt")
    status: str = "pending"


class SettingEntry(Record):
    """A key/value preference stored in the workbook."""

    key: str
    value: str = ""
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")


class PersonBalance(BaseModel):
    """How much one person paid and owes within a trip."""

    model_config = ConfigDict(populate_by_name=True)

    person_id: str = Field(alias="personId")
    total_paid: float = Field(default=0.0, alias="totalPaid")
    total_owed: float = Field(default=0.0, alias="totalOwed")

    @computed_field
    @property
    def balance(self) -> float:
        """Positive means the person is owed money, negative means they owe."""
        return self.total_paid - self.total_owed


class Settlement(BaseModel):
    """A transfer that moves money from a debtor to a creditor."""

    model_config = ConfigDict(populate_by_name=True)

    from_person: str = Field(alias="from")
    to_person: str = Field(alias="to")
    amount: float


class TripSummary(BaseModel):
    """Aggregated figures for a trip."""

    model_config = ConfigDict(populate_by_name=True)

    trip: Trip
    total_amount: float = Field(alias="totalAmount")
    expense_count: int = Field(alias="expenseCount")
    people_count: int = Field(alias="peopleCount")
    average_per_person: float = Field(alias="averagePerPerson")
    top_category: ExpenseCategory = Field(alias="topCategory")
    balances: list[PersonBalance] = Field(default_factory=list)
    settlements: list[Settlement] = Field(default_factory=list)
