"""API routes for SplitSheet."""

import datetime as dt
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..auth.session import GoogleSession
from ..domain.models import AVATAR_OPTIONS, CATEGORY_INFO, ExpenseCategory
from ..ledger import LedgerValidationError, RecordNotFoundError, TripLedger
from ..registry import WorkbookRegistry, open_workbook
from ..sheets.client import SheetsStoreClient
from ..sheets.errors import (
    NotAuthenticatedError,
    SheetDataError,
    SheetsAPIError,
    SheetsErrorKind,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session(authorization: Optional[str] = Header(default=None)) -> GoogleSession:
    """Session of the calling user, from the Authorization header."""
    return GoogleSession.from_authorization_header(authorization)


def get_store_client(session: GoogleSession = Depends(get_session)) -> SheetsStoreClient:
    """Sheets client acting for the calling user."""
    return SheetsStoreClient(session)


def get_registry() -> WorkbookRegistry:
    """Get the global workbook registry."""
    from .app import get_registry as _get_registry

    return _get_registry()


async def get_ledger(
    workbook_id: str, client: SheetsStoreClient = Depends(get_store_client)
) -> TripLedger:
    """Ledger of the addressed workbook, loaded from the sheets."""
    return await TripLedger(client, workbook_id).load()


# Request models


class WorkbookCreateRequest(BaseModel):
    """Request to open or create a workbook."""

    owner_name: str
    user_id: Optional[str] = None  # Reuse the registered workbook of this user


class PersonCreateRequest(BaseModel):
    """Request to create a person."""

    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None


class PersonUpdateRequest(BaseModel):
    """Request to edit a person."""

    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None


class TripCreateRequest(BaseModel):
    """Request to create a trip."""

    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    people: list[str] = Field(default_factory=list)
    created_by: str


class TripUpdateRequest(BaseModel):
    """Request to edit a trip."""

    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    people: Optional[list[str]] = None


class ExpenseCreateRequest(BaseModel):
    """Request to record an expense."""

    description: str
    amount: float = Field(ge=0)
    paid_by: str
    participants: list[str]
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: dt.date


class ExpenseUpdateRequest(BaseModel):
    """Request to edit an expense."""

    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    paid_by: Optional[str] = None
    participants: Optional[list[str]] = None
    category: Optional[ExpenseCategory] = None
    date: Optional[dt.date] = None
    is_settled: Optional[bool] = None


def _dump(record: BaseModel) -> dict:
    return record.model_dump(mode="json")


# Error handling

_KIND_STATUS = {
    SheetsErrorKind.UNAUTHORIZED: 401,
    SheetsErrorKind.FORBIDDEN: 403,
    SheetsErrorKind.RATE_LIMITED: 429,
    SheetsErrorKind.UNKNOWN: 502,
}


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": code, "message": message}},
    )


def register_exception_handlers(app: FastAPI):
    """Map domain and remote errors to HTTP responses."""

    @app.exception_handler(NotAuthenticatedError)
    async def _unauthenticated(request: Request, exc: NotAuthenticatedError):
        return _error_response(401, "UNAUTHENTICATED", str(exc))

    @app.exception_handler(SheetsAPIError)
    async def _sheets_error(request: Request, exc: SheetsAPIError):
        return _error_response(_KIND_STATUS[exc.kind], exc.code, exc.message)

    @app.exception_handler(SheetDataError)
    async def _data_error(request: Request, exc: SheetDataError):
        logger.error(f"Workbook data error: {exc}")
        return _error_response(502, "DATA_ERROR", str(exc))

    @app.exception_handler(LedgerValidationError)
    async def _validation_error(request: Request, exc: LedgerValidationError):
        return _error_response(422, "VALIDATION_ERROR", str(exc))

    @app.exception_handler(RecordNotFoundError)
    async def _not_found(request: Request, exc: RecordNotFoundError):
        return _error_response(404, "NOT_FOUND", str(exc))


# Metadata endpoints


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "splitsheet"}


@router.get("/categories")
async def list_categories():
    """Expense categories with their labels and icons."""
    return [
        {"id": category.value, "label": info["label"], "icon": info["icon"]}
        for category, info in CATEGORY_INFO.items()
    ]


@router.get("/avatars")
async def list_avatars():
    """Avatar symbols a person can pick from."""
    return AVATAR_OPTIONS


# Workbook endpoints


@router.post("/workbooks")
async def create_workbook(
    request: WorkbookCreateRequest,
    client: SheetsStoreClient = Depends(get_store_client),
):
    """Create a workbook, or reopen the one registered for the user."""
    if request.user_id:
        record = await open_workbook(get_registry(), client, request.user_id, request.owner_name)
        return {"workbook_id": record.workbook_id, "owner_name": record.owner_name}

    workbook_id = await client.create_workbook(request.owner_name)
    return {"workbook_id": workbook_id, "owner_name": request.owner_name}


@router.get("/workbooks/{workbook_id}/access")
async def verify_workbook_access(
    workbook_id: str,
    client: SheetsStoreClient = Depends(get_store_client),
):
    """Check whether the caller can open a workbook."""
    return {"workbook_id": workbook_id, "accessible": await client.verify_access(workbook_id)}


# People endpoints


@router.get("/workbooks/{workbook_id}/people")
async def list_people(ledger: TripLedger = Depends(get_ledger)):
    """List all people."""
    return [_dump(p) for p in ledger.people]


@router.post("/workbooks/{workbook_id}/people", status_code=201)
async def create_person(request: PersonCreateRequest, ledger: TripLedger = Depends(get_ledger)):
    """Create a person."""
    person = await ledger.add_person(request.name, email=request.email, avatar=request.avatar)
    return _dump(person)


@router.patch("/workbooks/{workbook_id}/people/{person_id}")
async def update_person(
    person_id: str,
    request: PersonUpdateRequest,
    ledger: TripLedger = Depends(get_ledger),
):
    """Edit a person."""
    person = await ledger.update_person(person_id, **request.model_dump(exclude_unset=True))
    return _dump(person)


@router.delete("/workbooks/{workbook_id}/people/{person_id}")
async def delete_person(person_id: str, ledger: TripLedger = Depends(get_ledger)):
    """Delete a person who is not part of any trip."""
    await ledger.delete_person(person_id)
    return {"status": "deleted", "id": person_id}


# Trip endpoints


@router.get("/workbooks/{workbook_id}/trips")
async def list_trips(ledger: TripLedger = Depends(get_ledger)):
    """List all trips."""
    return [_dump(t) for t in ledger.trips]


@router.post("/workbooks/{workbook_id}/trips", status_code=201)
async def create_trip(request: TripCreateRequest, ledger: TripLedger = Depends(get_ledger)):
    """Create a trip."""
    trip = await ledger.add_trip(
        name=request.name,
        start_date=request.start_date,
        end_date=request.end_date,
        people=request.people,
        created_by=request.created_by,
        description=request.description,
    )
    return _dump(trip)


@router.patch("/workbooks/{workbook_id}/trips/{trip_id}")
async def update_trip(
    trip_id: str,
    request: TripUpdateRequest,
    ledger: TripLedger = Depends(get_ledger),
):
    """Edit a trip."""
    trip = await ledger.update_trip(trip_id, **request.model_dump(exclude_unset=True))
    return _dump(trip)


@router.delete("/workbooks/{workbook_id}/trips/{trip_id}")
async def delete_trip(trip_id: str, ledger: TripLedger = Depends(get_ledger)):
    """Delete a trip and its expenses."""
    await ledger.delete_trip(trip_id)
    return {"status": "deleted", "id": trip_id}


@router.get("/workbooks/{workbook_id}/trips/{trip_id}/summary")
async def trip_summary(trip_id: str, ledger: TripLedger = Depends(get_ledger)):
    """Totals, balances and settlements of a trip."""
    return _dump(ledger.summary(trip_id))


# Expense endpoints


@router.get("/workbooks/{workbook_id}/trips/{trip_id}/expenses")
async def list_expenses(trip_id: str, ledger: TripLedger = Depends(get_ledger)):
    """List the expenses of a trip."""
    return [_dump(e) for e in ledger.expenses_for(trip_id)]


@router.post("/workbooks/{workbook_id}/trips/{trip_id}/expenses", status_code=201)
async def create_expense(
    trip_id: str,
    request: ExpenseCreateRequest,
    ledger: TripLedger = Depends(get_ledger),
):
    """Record an expense on a trip."""
    expense = await ledger.add_expense(
        trip_id=trip_id,
        description=request.description,
        amount=request.amount,
        paid_by=request.paid_by,
        participants=request.participants,
        expense_date=request.date,
        category=request.category,
    )
    return _dump(expense)


@router.patch("/workbooks/{workbook_id}/expenses/{expense_id}")
async def update_expense(
    expense_id: str,
    request: ExpenseUpdateRequest,
    ledger: TripLedger = Depends(get_ledger),
):
    """Edit an expense."""
    expense = await ledger.update_expense(expense_id, **request.model_dump(exclude_unset=True))
    return _dump(expense)


@router.delete("/workbooks/{workbook_id}/expenses/{expense_id}")
async def delete_expense(expense_id: str, ledger: TripLedger = Depends(get_ledger)):
    """Delete an expense."""
    await ledger.delete_expense(expense_id)
    return {"status": "deleted", "id": expense_id}


@router.post("/workbooks/{workbook_id}/expenses/{expense_id}/settle")
async def toggle_expense_settled(expense_id: str, ledger: TripLedger = Depends(get_ledger)):
    """Flip the settled flag of an expense."""
    expense = await ledger.toggle_expense_settled(expense_id)
    return _dump(expense)
