"""Async client for the Google Sheets v4 REST API."""

import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from ..auth.session import GoogleSession
from ..config import settings
from .codec import codec_for
from .errors import NotAuthenticatedError, classify_error
from .layout import (
    FIRST_DATA_ROW,
    SHEET_HEADERS,
    SHEET_IDS,
    SheetName,
    data_range,
    workbook_title,
)

logger = logging.getLogger(__name__)

HEADER_BACKGROUND = {"red": 0.9, "green": 0.9, "blue": 0.9}


def _log_api_call(operation: str, **details: Any):
    logger.debug(f"[Google API] {operation}: {details}")


def _json_body(response: httpx.Response) -> dict:
    """Decode a success response, classifying an unreadable body as UNKNOWN."""
    try:
        body = response.json()
    except ValueError as e:
        raise classify_error(ValueError(f"Malformed response body: {e}")) from e
    if not isinstance(body, dict):
        raise classify_error(ValueError(f"Unexpected response body: {body!r}"))
    return body


class SheetsStoreClient:
    """Reads and writes domain records to a user's workbook.

    Every call acts on behalf of the given session and fails with
    NotAuthenticatedError before touching the network when the session has
    no access token. HTTP failures are raised as classified SheetsAPIError.
    No call is retried.
    """

    def __init__(
        self,
        session: GoogleSession,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.session = session
        self.base_url = (base_url or settings.sheets_api_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout_seconds
        self._http_client = http_client
        # Last known number of data rows per (workbook, sheet)
        self._row_counts: dict[tuple[str, SheetName], int] = {}

    def _require_token(self) -> dict[str, str]:
        if not self.session.is_authenticated:
            raise NotAuthenticatedError()
        return self.session.auth_headers()

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        **kwargs: Any,
    ) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.request(method, url, headers=headers, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, headers=headers, **kwargs)

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request and classify any failure."""
        try:
            response = await self._send(method, url, headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise classify_error(e) from e
        return response

    def _values_url(self, workbook_id: str, range_notation: str) -> str:
        return f"{self.base_url}/{workbook_id}/values/{quote(range_notation, safe='!:')}"

    async def create_workbook(self, owner_name: str) -> str:
        """Create a workbook with one sheet per entity and initialize its headers.

        Returns the new spreadsheet id.
        """
        _log_api_call("create_workbook", owner_name=owner_name)
        headers = self._require_token()

        body = {
            "properties": {"title": workbook_title(owner_name)},
            "sheets": [
                {"properties": {"sheetId": SHEET_IDS[sheet], "title": sheet.value}}
                for sheet in SheetName
            ],
        }
        response = await self._request("POST", self.base_url, headers, json=body)
        workbook_id = _json_body(response).get("spreadsheetId")
        if not workbook_id:
            raise classify_error(ValueError("Create response has no spreadsheetId"))
        logger.info(f"Created workbook {workbook_id} for '{owner_name}'")

        await self.initialize_headers(workbook_id)
        return workbook_id

    async def initialize_headers(self, workbook_id: str) -> None:
        """Write the bold, shaded header row of every sheet in one batch update."""
        _log_api_call("initialize_headers", workbook_id=workbook_id)
        headers = self._require_token()

        requests = []
        for sheet, sheet_headers in SHEET_HEADERS.items():
            requests.append(
                {
                    "updateCells": {
                        "range": {
                            "sheetId": SHEET_IDS[sheet],
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                            "startColumnIndex": 0,
                            "endColumnIndex": len(sheet_headers),
                        },
                        "rows": [
                            {
                                "values": [
                                    {
                                        "userEnteredValue": {"stringValue": header},
                                        "userEnteredFormat": {
                                            "textFormat": {"bold": True},
                                            "backgroundColor": HEADER_BACKGROUND,
                                        },
                                    }
                                    for header in sheet_headers
                                ]
                            }
                        ],
                        "fields": "userEnteredValue,userEnteredFormat",
                    }
                }
            )

        await self._request(
            "POST",
            f"{self.base_url}/{workbook_id}:batchUpdate",
            headers,
            json={"requests": requests},
        )

    async def read_entities(
        self, workbook_id: str, sheet_name: Union[SheetName, str]
    ) -> list[BaseModel]:
        """Read and decode every non-empty data row of a sheet."""
        sheet = SheetName(sheet_name)
        codec = codec_for(sheet)
        _log_api_call("read_entities", workbook_id=workbook_id, sheet=sheet.value)
        headers = self._require_token()

        range_notation = data_range(sheet, settings.max_sheet_rows)
        response = await self._request("GET", self._values_url(workbook_id, range_notation), headers)
        rows = _json_body(response).get("values", [])
        self._row_counts[(workbook_id, sheet)] = len(rows)
        if len(rows) > settings.max_sheet_rows - FIRST_DATA_ROW:
            logger.warning(
                f"{sheet.value} filled the read range {range_notation}; "
                f"rows past {settings.max_sheet_rows} are not read"
            )

        entities = codec.decode_rows(rows)
        logger.debug(f"Read {len(entities)} records from {sheet.value} ({len(rows)} rows)")
        return entities

    async def write_entities(
        self,
        workbook_id: str,
        sheet_name: Union[SheetName, str],
        entities: list[BaseModel],
    ) -> None:
        """Overwrite the data rows of a sheet with the given records.

        When the sheet previously held more rows than are written now, the
        surplus rows are blanked in the same request.
        """
        sheet = SheetName(sheet_name)
        codec = codec_for(sheet)
        _log_api_call(
            "write_entities", workbook_id=workbook_id, sheet=sheet.value, count=len(entities)
        )
        headers = self._require_token()

        values = [codec.encode(entity) for entity in entities]
        previous = self._row_counts.get((workbook_id, sheet), 0)
        stale = previous - len(values)
        if stale > 0:
            values.extend([[""] * codec.width for _ in range(stale)])

        range_notation = data_range(sheet, FIRST_DATA_ROW + len(values))
        await self._request(
            "PUT",
            self._values_url(workbook_id, range_notation),
            headers,
            params={"valueInputOption": "RAW"},
            json={"range": range_notation, "majorDimension": "ROWS", "values": values},
        )
        self._row_counts[(workbook_id, sheet)] = len(entities)

    async def verify_access(self, workbook_id: str) -> bool:
        """Check that the workbook exists and the session may open it."""
        if not self.session.is_authenticated:
            return False
        try:
            response = await self._send(
                "GET",
                f"{self.base_url}/{workbook_id}",
                self.session.auth_headers(),
                params={"fields": "spreadsheetId"},
            )
        except Exception as e:
            logger.debug(f"Workbook {workbook_id} is not accessible: {e}")
            return False
        return response.is_success
