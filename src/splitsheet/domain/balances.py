"""Balance computation and debt settlement for a trip."""

import logging
from collections.abc import Iterable

from .models import Expense, ExpenseCategory, PersonBalance, Settlement, Trip, TripSummary

logger = logging.getLogger(__name__)

# Balances closer to zero than this are considered settled
SETTLEMENT_TOLERANCE = 0.01


def compute_balances(
    expenses: Iterable[Expense],
    people: list[str],
    include_settled: bool = True,
) -> list[PersonBalance]:
    """Compute what each person paid and owes using an equal split.

    The payer accrues the full amount, and every participant accrues an equal
    share. Balances come back in the order of ``people``; anyone referenced
    by an expense but missing from ``people`` is appended in order of first
    appearance.
    """
    balances: dict[str, PersonBalance] = {
        person_id: PersonBalance(person_id=person_id) for person_id in people
    }

    def _balance_for(person_id: str) -> PersonBalance:
        if person_id not in balances:
            balances[person_id] = PersonBalance(person_id=person_id)
        return balances[person_id]

    for expense in expenses:
        if expense.is_settled and not include_settled:
            continue
        _balance_for(expense.paid_by).total_paid += expense.amount

        share = expense.amount / len(expense.participants)
        for person_id in expense.participants:
            _balance_for(person_id).total_owed += share

    return list(balances.values())


def generate_settlements(balances: list[PersonBalance]) -> list[Settlement]:
    """Net balances into a minimal list of transfers.

    Repeatedly pays the largest creditor from the largest debtor. When several
    people share the extreme balance, the first in ``balances`` order wins.
    """
    order = [b.person_id for b in balances]
    remaining = {b.person_id: b.balance for b in balances}
    settlements: list[Settlement] = []

    while order:
        # max()/min() return the first extreme element, which gives stable ties
        creditor = max(order, key=lambda person_id: remaining[person_id])
        debtor = min(order, key=lambda person_id: remaining[person_id])
        credit = remaining[creditor]
        debt = -remaining[debtor]
        if credit < SETTLEMENT_TOLERANCE or debt < SETTLEMENT_TOLERANCE:
            break

        amount = min(credit, debt)
        remaining[creditor] -= amount
        remaining[debtor] += amount
        if credit <= debt:
            remaining[creditor] = 0.0
        if debt <= credit:
            remaining[debtor] = 0.0

        settlements.append(
            Settlement(from_person=debtor, to_person=creditor, amount=round(amount, 2))
        )

    logger.debug(f"Generated {len(settlements)} settlements for {len(order)} people")
    return settlements


def _top_category(expenses: list[Expense]) -> ExpenseCategory:
    totals: dict[ExpenseCategory, float] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, 0.0) + expense.amount
    if not totals:
        return ExpenseCategory.OTHER
    return max(totals, key=lambda category: totals[category])


def summarize_trip(trip: Trip, expenses: Iterable[Expense]) -> TripSummary:
    """Build the summary shown for a trip."""
    trip_expenses = [e for e in expenses if e.trip_id == trip.id]
    total_amount = sum(e.amount for e in trip_expenses)
    people_count = len(trip.people)

    balances = compute_balances(trip_expenses, trip.people)
    settlements = generate_settlements(balances)

    return TripSummary(
        trip=trip,
        total_amount=total_amount,
        expense_count=len(trip_expenses),
        people_count=people_count,
        average_per_person=total_amount / people_count if people_count else 0.0,
        top_category=_top_category(trip_expenses),
        balances=balances,
        settlements=settlements,
    )
