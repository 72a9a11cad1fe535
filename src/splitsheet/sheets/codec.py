"""Mapping between sheet rows and domain records."""

import json
import logging
from collections.abc import Sequence
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..domain.models import Expense, Person, SettingEntry, SharedAccess, Trip
from .errors import SheetDataError
from .layout import SHEET_HEADERS, SheetName

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class RowCodec(Generic[RecordT]):
    """Encodes records to fixed-width rows of strings and back.

    Column order follows the sheet's header list. List-valued columns are
    stored as JSON text in a single cell, booleans as ``TRUE``/``FALSE`` and
    missing optional values as empty cells.
    """

    def __init__(
        self,
        sheet: SheetName,
        model: type[RecordT],
        list_columns: Sequence[str] = (),
        bool_columns: Sequence[str] = (),
    ):
        self.sheet = sheet
        self.model = model
        self.headers = SHEET_HEADERS[sheet]
        self.list_columns = set(list_columns)
        self.bool_columns = set(bool_columns)
        self._fields_by_header = {
            (field.alias or name): field for name, field in model.model_fields.items()
        }

        missing = [h for h in self.headers if h not in self._fields_by_header]
        if missing:
            raise ValueError(f"{model.__name__} has no fields for headers {missing}")

    @property
    def width(self) -> int:
        return len(self.headers)

    def encode(self, record: RecordT) -> list[str]:
        """Serialize a record into one row of cell strings."""
        data = record.model_dump(by_alias=True, mode="json")
        return [self._encode_cell(header, data.get(header)) for header in self.headers]

    def _encode_cell(self, header: str, value: Any) -> str:
        if value is None:
            return ""
        if header in self.list_columns:
            return json.dumps(value)
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        return str(value)

    def decode(self, row: Sequence[Any]) -> Optional[RecordT]:
        """Parse one row; returns None when the leading identifier cell is empty."""
        cells = [str(cell) for cell in row]
        cells += [""] * (self.width - len(cells))
        if not cells[0].strip():
            return None

        data: dict[str, Any] = {}
        for header, cell in zip(self.headers, cells):
            if cell == "" and self._blank_means_default(header):
                continue
            if header in self.list_columns:
                data[header] = self._decode_list(header, cell)
            elif header in self.bool_columns:
                data[header] = cell.strip().upper() == "TRUE"
            else:
                data[header] = cell

        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            raise SheetDataError(self.sheet.value, str(e)) from e

    def _blank_means_default(self, header: str) -> bool:
        # Optional and generated fields take their default, other blanks stay ""
        field = self._fields_by_header[header]
        if field.is_required():
            return False
        return field.default is None or field.default_factory is not None

    def _decode_list(self, header: str, cell: str) -> list[str]:
        if not cell.strip():
            return []
        try:
            value = json.loads(cell)
        except json.JSONDecodeError as e:
            raise SheetDataError(self.sheet.value, f"malformed JSON list: {e}", header) from e
        if not isinstance(value, list):
            raise SheetDataError(
                self.sheet.value, f"expected a JSON list, got {type(value).__name__}", header
            )
        return [str(item) for item in value]

    def decode_rows(self, rows: Sequence[Sequence[Any]]) -> list[RecordT]:
        """Decode many rows, dropping the empty ones."""
        records = [self.decode(row) for row in rows]
        return [record for record in records if record is not None]


TRIP_CODEC = RowCodec(SheetName.TRIPS, Trip, list_columns=["people"])
EXPENSE_CODEC = RowCodec(
    SheetName.EXPENSES,
    Expense,
    list_columns=["participants"],
    bool_columns=["isSettled"],
)
PERSON_CODEC = RowCodec(SheetName.PEOPLE, Person)
SHARED_ACCESS_CODEC = RowCodec(SheetName.SHARED_ACCESS, SharedAccess)
SETTINGS_CODEC = RowCodec(SheetName.SETTINGS, SettingEntry)

CODECS: dict[SheetName, RowCodec] = {
    SheetName.TRIPS: TRIP_CODEC,
    SheetName.EXPENSES: EXPENSE_CODEC,
    SheetName.PEOPLE: PERSON_CODEC,
    SheetName.SHARED_ACCESS: SHARED_ACCESS_CODEC,
    SheetName.SETTINGS: SETTINGS_CODEC,
}


def codec_for(sheet: Union[SheetName, str]) -> RowCodec:
    """Look up the codec of a sheet by enum member or tab name."""
    try:
        return CODECS[SheetName(sheet)]
    except ValueError:
        raise ValueError(f"Unknown sheet: {sheet}")
