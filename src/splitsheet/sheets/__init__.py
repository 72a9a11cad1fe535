"""Google Sheets storage for SplitSheet records."""

from .layout import SHEET_HEADERS, SHEET_IDS, SheetName, workbook_title
from .errors import (
    NotAuthenticatedError,
    SheetDataError,
    SheetsAPIError,
    SheetsErrorKind,
    classify_error,
)
from .codec import CODECS, RowCodec, codec_for
from .client import SheetsStoreClient

__all__ = [
    "SHEET_HEADERS",
    "SHEET_IDS",
    "SheetName",
    "workbook_title",
    "NotAuthenticatedError",
    "SheetDataError",
    "SheetsAPIError",
    "SheetsErrorKind",
    "classify_error",
    "CODECS",
    "RowCodec",
    "codec_for",
    "SheetsStoreClient",
]
