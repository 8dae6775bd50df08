"""
Unit tests for row normalization and timestamp helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from done_export.core.timestamps import (
    file_date,
    parse_iso_utc,
    threshold_date,
    to_iso_utc,
)
from done_export.export.readers import normalize_row, normalize_rows, normalize_value


class TestNormalizeValue:
    """Tests for single value normalization"""

    @pytest.mark.parametrize("raw,expected", [
        ("2023-01-01T00:00:00Z", "2023-01-01T00:00:00.000Z"),
        ("2023-01-01T10:05Z", "2023-01-01T10:05:00.000Z"),
        ("2023-06-30T23:59:59.5Z", "2023-06-30T23:59:59.500Z"),
        ("2023-06-30T23:59:59.1234567Z", "2023-06-30T23:59:59.123Z"),
        ("2023-01-01T00:00:00.000Z", "2023-01-01T00:00:00.000Z"),
    ])
    def test_iso_utc_strings_are_canonicalized(self, raw, expected):
        assert normalize_value(raw) == expected

    @pytest.mark.parametrize("raw", [
        "2023-13-01T00:00:00Z",   # no month 13
        "2023-02-30T00:00:00Z",   # no Feb 30
        "2023-01-01T00:00:00",    # no UTC designator
        "2023-01-01",             # date only
        "2023-01-01T00:00:00+02:00",
        "Released 2023Z",
        "Z",
    ])
    def test_other_strings_pass_through(self, raw):
        assert normalize_value(raw) == raw

    def test_none_becomes_empty_string(self):
        assert normalize_value(None) == ""

    @pytest.mark.parametrize("raw", [0, 5, 2.5, True, False, "", "Done", ["a"], {"lookupValue": "x"}])
    def test_non_timestamp_values_unchanged(self, raw):
        assert normalize_value(raw) == raw

    @given(st.datetimes(
        min_value=datetime(1, 1, 1),
        max_value=datetime(9999, 12, 31, 23, 59, 59),
        timezones=st.just(timezone.utc),
    ))
    def test_canonical_form_is_fixed_point(self, value):
        """Property: normalizing a canonical timestamp returns it unchanged"""
        canonical = to_iso_utc(value)
        assert normalize_value(canonical) == canonical

    @given(st.one_of(st.text(max_size=30), st.integers(), st.none()))
    def test_normalization_is_idempotent(self, value):
        """Property: normalize(normalize(v)) == normalize(v)"""
        once = normalize_value(value)
        assert normalize_value(once) == once


class TestNormalizeRow:
    """Tests for row projection"""

    def test_projects_requested_fields_in_order(self):
        raw = {"Status": "Done", "ID": 7, "FileRef": "/x", "DoneDate": "2023-01-01T00:00:00Z"}

        row = normalize_row(raw, ["ID", "Status", "DoneDate"], "2025-11-17T08:30:15.123Z", "ExportedOnUtc")

        assert list(row) == ["ID", "Status", "DoneDate", "ExportedOnUtc"]
        assert row == {
            "ID": 7,
            "Status": "Done",
            "DoneDate": "2023-01-01T00:00:00.000Z",
            "ExportedOnUtc": "2025-11-17T08:30:15.123Z",
        }

    def test_missing_field_becomes_empty_string(self):
        row = normalize_row({"ID": 1}, ["ID", "Assignee"], "stamp", "ExportedOnUtc")
        assert row["Assignee"] == ""

    def test_all_rows_share_one_export_timestamp(self):
        exported_on = datetime(2025, 11, 17, 8, 30, 15, 123456, tzinfo=timezone.utc)

        rows = normalize_rows([{"ID": 1}, {"ID": 2}], ["ID"], exported_on, "ExportedAt")

        assert [r["ExportedAt"] for r in rows] == ["2025-11-17T08:30:15.123Z"] * 2

    def test_empty_input(self):
        assert normalize_rows([], ["ID"], datetime.now(timezone.utc), "ExportedOnUtc") == []


class TestTimestamps:
    """Tests for timestamp helpers"""

    def test_to_iso_utc_converts_offsets(self):
        cet = timezone(timedelta(hours=1))
        assert to_iso_utc(datetime(2025, 1, 1, 1, 0, tzinfo=cet)) == "2025-01-01T00:00:00.000Z"

    def test_to_iso_utc_treats_naive_as_utc(self):
        assert to_iso_utc(datetime(2025, 1, 1, 12, 0)) == "2025-01-01T12:00:00.000Z"

    def test_parse_iso_utc_rejects_garbage(self):
        assert parse_iso_utc("yesterday") is None

    def test_threshold_date_subtracts_days(self):
        now = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)
        assert threshold_date(30, now) == datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_threshold_date_zero_days_is_now(self):
        now = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)
        assert threshold_date(0, now) == now

    def test_threshold_date_rejects_negative(self):
        with pytest.raises(ValueError):
            threshold_date(-1)

    def test_file_date_uses_utc_day(self):
        late_evening_pacific = datetime(2025, 11, 16, 20, 0, tzinfo=timezone(timedelta(hours=-8)))
        assert file_date(late_evening_pacific) == "2025-11-17"

    @pytest.mark.parametrize("text,expected", [
        ("2023-06-30T23:59:59Z", datetime(2023, 6, 30, 23, 59, 59, tzinfo=timezone.utc)),
        ("2023-06-30T23:59Z", datetime(2023, 6, 30, 23, 59, tzinfo=timezone.utc)),
        ("2023-06-30T23:59:59.5Z", datetime(2023, 6, 30, 23, 59, 59, 500000, tzinfo=timezone.utc)),
        ("2023-06-30T23:59:59.12345Z", datetime(2023, 6, 30, 23, 59, 59, 123450, tzinfo=timezone.utc)),
        ("2023-06-30T23:59:59.123456789Z", datetime(2023, 6, 30, 23, 59, 59, 123456, tzinfo=timezone.utc)),
    ])
    def test_parse_iso_utc_fraction_lengths(self, text, expected):
        assert parse_iso_utc(text) == expected

    @pytest.mark.parametrize("text", ["2023-06-30T24:00:00Z", "2023-06-30T23:60Z", "2023-06-30T23:59:59+00:00"])
    def test_parse_iso_utc_rejects_invalid(self, text):
        assert parse_iso_utc(text) is None

    def test_early_years_are_zero_padded(self):
        value = datetime(999, 3, 4, 5, 6, 7, 891000, tzinfo=timezone.utc)
        assert to_iso_utc(value) == "0999-03-04T05:06:07.891Z"
        assert file_date(value) == "0999-03-04"
