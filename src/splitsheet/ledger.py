"""In-memory view of a workbook with validated mutations."""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from .domain.balances import summarize_trip
from .domain.models import (
    DEFAULT_AVATAR,
    Expense,
    ExpenseCategory,
    Person,
    Trip,
    TripSummary,
    new_id,
)
from .sheets.client import SheetsStoreClient
from .sheets.layout import SheetName

logger = logging.getLogger(__name__)


class LedgerValidationError(ValueError):
    """Raised when a change would break a data model invariant."""

    pass


class RecordNotFoundError(LookupError):
    """Raised when a referenced record does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _reject_null_lists(changes: dict, *fields: str):
    for field in fields:
        if field in changes and changes[field] is None:
            raise LedgerValidationError(f"'{field}' must be a list, not null")


class TripLedger:
    """Trips, people and expenses of one workbook.

    Collections are loaded once and kept in memory. Every mutation rewrites
    the whole affected sheet, there is no per-row update or delete.
    """

    def __init__(self, client: SheetsStoreClient, workbook_id: str):
        self.client = client
        self.workbook_id = workbook_id
        self.people: list[Person] = []
        self.trips: list[Trip] = []
        self.expenses: list[Expense] = []

    async def load(self) -> "TripLedger":
        """Read people, trips and expenses from the workbook."""
        self.people = await self.client.read_entities(self.workbook_id, SheetName.PEOPLE)
        self.trips = await self.client.read_entities(self.workbook_id, SheetName.TRIPS)
        self.expenses = await self.client.read_entities(self.workbook_id, SheetName.EXPENSES)
        logger.info(
            f"Loaded workbook {self.workbook_id}: {len(self.people)} people, "
            f"{len(self.trips)} trips, {len(self.expenses)} expenses"
        )
        return self

    # Lookups
    def get_person(self, person_id: str) -> Person:
        for person in self.people:
            if person.id == person_id:
                return person
        raise RecordNotFoundError("Person", person_id)

    def get_trip(self, trip_id: str) -> Trip:
        for trip in self.trips:
            if trip.id == trip_id:
                return trip
        raise RecordNotFoundError("Trip", trip_id)

    def get_expense(self, expense_id: str) -> Expense:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        raise RecordNotFoundError("Expense", expense_id)

    def expenses_for(self, trip_id: str) -> list[Expense]:
        """Expenses of a trip in sheet order."""
        self.get_trip(trip_id)
        return [e for e in self.expenses if e.trip_id == trip_id]

    def summary(self, trip_id: str) -> TripSummary:
        """Totals, balances and settlements of a trip."""
        return summarize_trip(self.get_trip(trip_id), self.expenses)

    # Persistence. The in-memory collection is replaced only after the write succeeds.
    async def _save_people(self, people: list[Person]):
        await self.client.write_entities(self.workbook_id, SheetName.PEOPLE, people)
        self.people = people

    async def _save_trips(self, trips: list[Trip]):
        await self.client.write_entities(self.workbook_id, SheetName.TRIPS, trips)
        self.trips = trips

    async def _save_expenses(self, expenses: list[Expense]):
        await self.client.write_entities(self.workbook_id, SheetName.EXPENSES, expenses)
        self.expenses = expenses

    # People
    async def add_person(
        self, name: str, email: Optional[str] = None, avatar: Optional[str] = None
    ) -> Person:
        if not name.strip():
            raise LedgerValidationError("Person name must not be empty")
        person = Person(
            id=new_id(), name=name.strip(), email=email or None, avatar=avatar or DEFAULT_AVATAR
        )
        await self._save_people(self.people + [person])
        return person

    async def update_person(self, person_id: str, **changes) -> Person:
        current = self.get_person(person_id)
        if "name" in changes and not str(changes["name"]).strip():
            raise LedgerValidationError("Person name must not be empty")
        data = current.model_dump()
        data.update(changes)
        try:
            updated = Person.model_validate(data)
        except ValueError as e:
            raise LedgerValidationError(str(e)) from e
        await self._save_people([updated if p.id == person_id else p for p in self.people])
        return updated

    async def delete_person(self, person_id: str) -> None:
        self.get_person(person_id)
        in_use = [t.name for t in self.trips if person_id in t.people or t.created_by == person_id]
        if in_use:
            raise LedgerValidationError(
                f"Person '{person_id}' still belongs to trips: {', '.join(in_use)}"
            )
        await self._save_people([p for p in self.people if p.id != person_id])

    # Trips
    def _check_trip_people(self, people: list[str], created_by: str):
        known = {p.id for p in self.people}
        unknown = [pid for pid in people if pid not in known]
        if unknown:
            raise LedgerValidationError(f"Unknown people in trip: {', '.join(unknown)}")
        if len(set(people)) != len(people):
            raise LedgerValidationError("Trip people must not repeat")
        if created_by not in known:
            raise LedgerValidationError(f"Unknown trip creator '{created_by}'")

    async def add_trip(
        self,
        name: str,
        start_date: date,
        end_date: date,
        people: list[str],
        created_by: str,
        description: Optional[str] = None,
    ) -> Trip:
        self._check_trip_people(people, created_by)
        try:
            trip = Trip(
                id=new_id(),
                name=name,
                description=description or None,
                start_date=start_date,
                end_date=end_date,
                people=list(people),
                created_by=created_by,
            )
        except ValueError as e:
            raise LedgerValidationError(str(e)) from e

        await self._save_trips(self.trips + [trip])
        return trip

    async def update_trip(self, trip_id: str, **changes) -> Trip:
        current = self.get_trip(trip_id)
        _reject_null_lists(changes, "people")
        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = _utc_now()
        self._check_trip_people(data["people"], data["created_by"])

        removed = set(current.people) - set(data["people"])
        still_used = [
            e.id
            for e in self.expenses
            if e.trip_id == trip_id and removed & ({e.paid_by} | set(e.participants))
        ]
        if still_used:
            raise LedgerValidationError(
                f"Cannot remove people who appear in expenses: {', '.join(sorted(removed))}"
            )

        try:
            updated = Trip.model_validate(data)
        except ValueError as e:
            raise LedgerValidationError(str(e)) from e

        await self._save_trips([updated if t.id == trip_id else t for t in self.trips])
        return updated

    async def delete_trip(self, trip_id: str) -> None:
        """Delete a trip together with its expenses."""
        self.get_trip(trip_id)
        # A trip is never removed while its expenses remain
        remaining = [e for e in self.expenses if e.trip_id != trip_id]
        if len(remaining) != len(self.expenses):
            await self._save_expenses(remaining)

        await self._save_trips([t for t in self.trips if t.id != trip_id])

    # Expenses
    def _check_expense_people(self, trip: Trip, paid_by: str, participants: list[str]):
        if not participants:
            raise LedgerValidationError("An expense needs at least one participant")
        members = set(trip.people)
        if paid_by not in members:
            raise LedgerValidationError(f"Payer '{paid_by}' is not a member of trip '{trip.name}'")
        outsiders = [pid for pid in participants if pid not in members]
        if outsiders:
            raise LedgerValidationError(
                f"Participants not in trip '{trip.name}': {', '.join(outsiders)}"
            )

    async def add_expense(
        self,
        trip_id: str,
        description: str,
        amount: float,
        paid_by: str,
        participants: list[str],
        expense_date: date,
        category: ExpenseCategory = ExpenseCategory.OTHER,
    ) -> Expense:
        trip = self.get_trip(trip_id)
        participants = list(dict.fromkeys(participants))
        self._check_expense_people(trip, paid_by, participants)
        try:
            expense = Expense(
                id=new_id(),
                trip_id=trip_id,
                description=description,
                amount=amount,
                paid_by=paid_by,
                participants=participants,
                category=category,
                date=expense_date,
            )
        except ValueError as e:
            raise LedgerValidationError(str(e)) from e

        await self._save_expenses(self.expenses + [expense])
        return expense

    async def update_expense(self, expense_id: str, **changes) -> Expense:
        current = self.get_expense(expense_id)
        _reject_null_lists(changes, "participants")
        data = current.model_dump()
        data.update(changes)
        data["participants"] = list(dict.fromkeys(data["participants"]))
        data["updated_at"] = _utc_now()

        trip = self.get_trip(data["trip_id"])
        self._check_expense_people(trip, data["paid_by"], data["participants"])
        try:
            updated = Expense.model_validate(data)
        except ValueError as e:
            raise LedgerValidationError(str(e)) from e

        await self._save_expenses([updated if e.id == expense_id else e for e in self.expenses])
        return updated

    async def delete_expense(self, expense_id: str) -> None:
        self.get_expense(expense_id)
        await self._save_expenses([e for e in self.expenses if e.id != expense_id])

    async def toggle_expense_settled(self, expense_id: str) -> Expense:
        current = self.get_expense(expense_id)
        return await self.update_expense(expense_id, is_settled=not current.is_settled)
