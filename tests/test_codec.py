"""Tests for the sheet row codec."""

import json

import pytest

from splitsheet.domain import Expense, Person, SettingEntry, SharedAccess, Trip
from splitsheet.sheets import SHEET_HEADERS, SheetDataError, SheetName, codec_for
from splitsheet.sheets.codec import EXPENSE_CODEC, PERSON_CODEC, TRIP_CODEC


class TestRoundTrip:
    """decode(encode(record)) gives the record back."""

    def test_people_round_trip(self, people):
        for person in people:
            assert PERSON_CODEC.decode(PERSON_CODEC.encode(person)) == person

    def test_trip_round_trip(self, trip):
        assert TRIP_CODEC.decode(TRIP_CODEC.encode(trip)) == trip

    def test_trip_without_optional_fields(self, trip):
        bare = trip.model_copy(update={"description": None, "people": []})
        assert TRIP_CODEC.decode(TRIP_CODEC.encode(bare)) == bare

    def test_expense_round_trip(self, expense):
        assert EXPENSE_CODEC.decode(EXPENSE_CODEC.encode(expense)) == expense

    def test_settled_expense_with_fractional_amount(self, expense):
        settled = expense.model_copy(
            update={"is_settled": True, "amount": 0.1 + 0.2, "participants": ["p-bob"]}
        )
        assert EXPENSE_CODEC.decode(EXPENSE_CODEC.encode(settled)) == settled

    def test_shared_access_and_settings_round_trip(self, created_at):
        access = SharedAccess(
            trip_id="t-rome", shared_with="dan@example.com", permission="edit", shared_at=created_at
        )
        setting = SettingEntry(key="currency", value="EUR", updated_at=created_at)

        shared_codec = codec_for(SheetName.SHARED_ACCESS)
        settings_codec = codec_for(SheetName.SETTINGS)
        assert shared_codec.decode(shared_codec.encode(access)) == access
        assert settings_codec.decode(settings_codec.encode(setting)) == setting

    def test_blank_values_with_other_defaults_are_kept(self, created_at):
        person = Person(id="p-1", name="Ann", avatar="", created_at=created_at)
        access = SharedAccess(
            trip_id="t-rome", shared_with="dan@example.com", permission="", status="",
            shared_at=created_at,
        )
        shared_codec = codec_for(SheetName.SHARED_ACCESS)

        assert PERSON_CODEC.decode(PERSON_CODEC.encode(person)).avatar == ""
        assert shared_codec.decode(shared_codec.encode(access)) == access

    def test_blank_generated_and_optional_cells_use_defaults(self):
        person = PERSON_CODEC.decode(["p-1", "Ann", "", "🧑‍💻", ""])

        assert person.email is None
        assert person.created_at.tzinfo is not None


class TestEncode:
    """Test row layout."""

    def test_row_width_and_order_follow_headers(self, trip):
        row = TRIP_CODEC.encode(trip)

        assert len(row) == len(SHEET_HEADERS[SheetName.TRIPS])
        assert row[0] == "t-rome"
        assert row[1] == "Rome"
        assert row[3] == "2024-06-01"
        assert row[4] == "2024-06-04"
        assert json.loads(row[5]) == ["p-alice", "p-bob", "p-carol"]
        assert row[6] == "p-alice"

    def test_all_cells_are_strings(self, expense):
        row = EXPENSE_CODEC.encode(expense)
        assert all(isinstance(cell, str) for cell in row)
        assert row[3] == "90.0"
        assert row[6] == "food"
        assert row[8] == "FALSE"

    def test_missing_optional_values_become_empty_cells(self, people):
        row = PERSON_CODEC.encode(people[1])
        assert row[2] == ""


class TestDecode:
    """Test row parsing."""

    def test_empty_identifier_yields_nothing(self):
        assert TRIP_CODEC.decode(["", "Ghost trip", "", "2024-01-01", "2024-01-02"]) is None
        assert PERSON_CODEC.decode(["   ", "Nobody"]) is None
        assert PERSON_CODEC.decode([]) is None

    def test_decode_rows_filters_empty_rows(self, people):
        rows = [PERSON_CODEC.encode(people[0]), [""], [], PERSON_CODEC.encode(people[1])]
        decoded = PERSON_CODEC.decode_rows(rows)
        assert [p.id for p in decoded] == ["p-alice", "p-bob"]

    def test_short_rows_are_padded(self):
        person = PERSON_CODEC.decode(["p-1", "Ann"])

        assert isinstance(person, Person)
        assert person.name == "Ann"
        assert person.email is None

    def test_bool_cells_are_case_insensitive(self, expense):
        row = EXPENSE_CODEC.encode(expense)
        row[8] = "true"
        assert EXPENSE_CODEC.decode(row).is_settled is True

    def test_malformed_embedded_json_is_a_data_error(self, trip):
        row = TRIP_CODEC.encode(trip)
        row[5] = '["p-alice", '

        with pytest.raises(SheetDataError) as exc_info:
            TRIP_CODEC.decode(row)
        assert exc_info.value.sheet == "Trips"
        assert exc_info.value.column == "people"

    def test_non_list_json_is_a_data_error(self, expense):
        row = EXPENSE_CODEC.encode(expense)
        row[5] = '{"p-alice": true}'

        with pytest.raises(SheetDataError, match="participants"):
            EXPENSE_CODEC.decode(row)

    def test_invalid_record_is_a_data_error(self):
        row = ["t-1", "Trip", "", "not a date", "2024-01-02", "[]", "p-1", "", ""]
        with pytest.raises(SheetDataError, match="Trips"):
            TRIP_CODEC.decode(row)

    def test_numbers_from_sheet_are_accepted(self, expense):
        row = EXPENSE_CODEC.encode(expense)
        row[3] = 42
        assert EXPENSE_CODEC.decode(row).amount == 42.0


class TestCodecLookup:
    """Test codec_for."""

    def test_lookup_by_tab_name(self):
        assert codec_for("Trips") is TRIP_CODEC
        assert codec_for(SheetName.EXPENSES) is EXPENSE_CODEC

    def test_each_codec_matches_its_headers(self):
        for sheet in SheetName:
            assert codec_for(sheet).headers == SHEET_HEADERS[sheet]

    def test_unknown_sheet(self):
        with pytest.raises(ValueError, match="Unknown sheet"):
            codec_for("Budgets")

    def test_models(self):
        assert codec_for(SheetName.TRIPS).model is Trip
        assert codec_for(SheetName.EXPENSES).model is Expense
        assert codec_for(SheetName.PEOPLE).model is Person
