"""Errors raised while talking to the Sheets API."""

import logging
from enum import Enum
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class SheetsErrorKind(str, Enum):
    """Closed classification of remote failures."""

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"
    UNKNOWN = "UNKNOWN"


_STATUS_KINDS = {
    401: SheetsErrorKind.UNAUTHORIZED,
    403: SheetsErrorKind.FORBIDDEN,
    429: SheetsErrorKind.RATE_LIMITED,
}

_KIND_MESSAGES = {
    SheetsErrorKind.UNAUTHORIZED: "Access token expired. Please sign in again.",
    SheetsErrorKind.FORBIDDEN: "Insufficient permissions for this operation.",
    SheetsErrorKind.RATE_LIMITED: "Too many API requests. Try again in a few minutes.",
}


class SheetsAPIError(Exception):
    """A classified failure of a Sheets API call."""

    def __init__(
        self,
        kind: SheetsErrorKind,
        message: str,
        status: Optional[int] = None,
    ):
        self.kind = kind
        self.message = message
        self.status = status
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry after backing off."""
        return self.kind is SheetsErrorKind.RATE_LIMITED

    def __repr__(self) -> str:
        return f"SheetsAPIError(kind={self.kind.value}, status={self.status}, message={self.message!r})"


class NotAuthenticatedError(Exception):
    """Raised when an operation needs an access token and the session has none."""

    def __init__(self, message: str = "No access token available. Please sign in."):
        super().__init__(message)


class SheetDataError(Exception):
    """Raised when a sheet row cannot be turned into a record."""

    def __init__(self, sheet: str, message: str, column: Optional[str] = None):
        self.sheet = sheet
        self.column = column
        location = f"{sheet}.{column}" if column else sheet
        super().__init__(f"Invalid data in {location}: {message}")


def _google_error_message(response: httpx.Response) -> Optional[str]:
    """Extract the message from a Google API error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message")
    return None


def classify_error(error: Exception) -> SheetsAPIError:
    """Turn any failure of a remote call into a SheetsAPIError."""
    if isinstance(error, SheetsAPIError):
        return error

    status = None
    message = str(error) or "Unknown Google API error"
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        message = _google_error_message(error.response) or message

    kind = _STATUS_KINDS.get(status, SheetsErrorKind.UNKNOWN)
    classified = SheetsAPIError(kind, _KIND_MESSAGES.get(kind, message), status)
    logger.error(f"Google API error: {classified!r}")
    return classified
