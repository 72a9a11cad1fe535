"""Fixed workbook layout: sheet names, headers and A1 ranges."""

from enum import Enum
from typing import Optional

from ..config import settings


class SheetName(str, Enum):
    """Tabs created in every workbook."""

    TRIPS = "Trips"
    EXPENSES = "Expenses"
    PEOPLE = "People"
    SHARED_ACCESS = "Shared_Access"
    SETTINGS = "Settings"


SHEET_HEADERS: dict[SheetName, list[str]] = {
    SheetName.TRIPS: [
        "id", "name", "description", "startDate", "endDate",
        "people", "createdBy", "createdAt", "updatedAt",
    ],
    SheetName.EXPENSES: [
        "id", "tripId", "description", "amount", "paidBy",
        "participants", "category", "date", "isSettled",
        "createdAt", "updatedAt",
    ],
    SheetName.PEOPLE: ["id", "name", "email", "avatar", "createdAt"],
    SheetName.SHARED_ACCESS: ["tripId", "sharedWith", "permission", "sharedAt", "status"],
    SheetName.SETTINGS: ["key", "value", "updatedAt"],
}

# Sheet ids are assigned explicitly on creation so header formatting can
# address them without looking them up first.
SHEET_IDS: dict[SheetName, int] = {sheet: index for index, sheet in enumerate(SheetName)}

# Row 1 holds the headers, data starts on row 2
FIRST_DATA_ROW = 2

WORKBOOK_TITLE_TEMPLATE = "{product_name} - {user_name}"


def workbook_title(user_name: str, product_name: Optional[str] = None) -> str:
    """Title of a user's workbook."""
    return WORKBOOK_TITLE_TEMPLATE.format(
        product_name=product_name or settings.product_name,
        user_name=user_name,
    )


def index_to_col_letter(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def last_column(sheet: SheetName) -> str:
    """Letter of the last header column of a sheet."""
    return index_to_col_letter(len(SHEET_HEADERS[sheet]) - 1)


def data_range(sheet: SheetName, last_row: int) -> str:
    """A1 range covering the data rows of a sheet up to ``last_row``."""
    last_row = max(last_row, FIRST_DATA_ROW)
    return f"{sheet.value}!A{FIRST_DATA_ROW}:{last_column(sheet)}{last_row}"
