"""Pytest configuration and shared fixtures."""

import json
from datetime import date, datetime, timezone
from typing import Optional

import httpx
import pytest

from splitsheet.auth import GoogleSession
from splitsheet.domain import Expense, ExpenseCategory, Person, Trip
from splitsheet.sheets import SheetsStoreClient

FAKE_BASE_URL = "https://sheets.test/v4/spreadsheets"
FAKE_BASE_PATH = "/v4/spreadsheets"


class FakeSheetsAPI:
    """In-memory stand-in for the Sheets REST API, used as an httpx MockTransport handler.

    Values writes behave like the real API: only the addressed rows change,
    and trailing blank rows are not returned by reads.
    """

    def __init__(self, workbook_id: str = "wb-123"):
        self.workbooks: dict[str, dict[str, list[list[str]]]] = {workbook_id: {}}
        self.requests: list[httpx.Request] = []
        self.fail_status: Optional[int] = None
        self.failing_writes: set[str] = set()  # Sheets whose PUTs return 429
        self.created_id = "wb-new"

    def seed(self, workbook_id: str, sheet: str, rows: list[list[str]]):
        self.workbooks.setdefault(workbook_id, {})[sheet] = [list(r) for r in rows]

    def rows(self, workbook_id: str, sheet: str) -> list[list[str]]:
        return self.workbooks[workbook_id].get(sheet, [])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status:
            return httpx.Response(
                self.fail_status,
                json={"error": {"code": self.fail_status, "message": "Request failed"}},
            )

        path = request.url.path.removeprefix(FAKE_BASE_PATH)
        if request.method == "POST" and path in ("", "/"):
            self.workbooks[self.created_id] = {}
            return httpx.Response(200, json={"spreadsheetId": self.created_id})

        workbook_id, _, range_notation = path.lstrip("/").partition("/values/")
        if request.method == "POST" and workbook_id.endswith(":batchUpdate"):
            return httpx.Response(200, json={"replies": []})

        if workbook_id not in self.workbooks:
            return httpx.Response(
                404, json={"error": {"code": 404, "message": "Requested entity was not found."}}
            )
        sheets = self.workbooks[workbook_id]

        if not range_notation:
            return httpx.Response(200, json={"spreadsheetId": workbook_id})

        sheet = range_notation.split("!")[0]
        if request.method == "GET":
            body = {"range": range_notation, "majorDimension": "ROWS"}
            if sheets.get(sheet):
                body["values"] = sheets[sheet]
            return httpx.Response(200, json=body)

        if request.method == "PUT" and sheet in self.failing_writes:
            return httpx.Response(
                429, json={"error": {"code": 429, "message": "Quota exceeded"}}
            )

        if request.method == "PUT":
            written = json.loads(request.content)["values"]
            existing = sheets.get(sheet, [])
            merged = [list(r) for r in written] + existing[len(written):]
            while merged and not any(cell for cell in merged[-1]):
                merged.pop()
            sheets[sheet] = merged
            return httpx.Response(200, json={"updatedRows": len(written)})

        return httpx.Response(405)


@pytest.fixture
def fake_sheets() -> FakeSheetsAPI:
    return FakeSheetsAPI()


@pytest.fixture
def http_client(fake_sheets) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_sheets))


@pytest.fixture
def session() -> GoogleSession:
    return GoogleSession(access_token="test-token")


@pytest.fixture
def store_client(session, http_client) -> SheetsStoreClient:
    return SheetsStoreClient(session, http_client=http_client, base_url=FAKE_BASE_URL)


@pytest.fixture
def anonymous_client(http_client) -> SheetsStoreClient:
    return SheetsStoreClient(GoogleSession(), http_client=http_client, base_url=FAKE_BASE_URL)


@pytest.fixture
def created_at() -> datetime:
    return datetime(2024, 5, 1, 9, 30, 15, 123000, tzinfo=timezone.utc)


@pytest.fixture
def people(created_at) -> list[Person]:
    return [
        Person(id="p-alice", name="Alice", email="alice@example.com", avatar="👩‍💼", created_at=created_at),
        Person(id="p-bob", name="Bob", created_at=created_at),
        Person(id="p-carol", name="Carol", email="carol@example.com", created_at=created_at),
    ]


@pytest.fixture
def trip(created_at) -> Trip:
    return Trip(
        id="t-rome",
        name="Rome",
        description="Long weekend",
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 4),
        people=["p-alice", "p-bob", "p-carol"],
        created_by="p-alice",
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def expense(created_at) -> Expense:
    return Expense(
        id="e-dinner",
        trip_id="t-rome",
        description="Dinner",
        amount=90.0,
        paid_by="p-alice",
        participants=["p-alice", "p-bob", "p-carol"],
        category=ExpenseCategory.FOOD,
        date=date(2024, 6, 2),
        created_at=created_at,
        updated_at=created_at,
    )
