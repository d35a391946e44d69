"""Tests for composite key decoding."""

from tsmrules.storage.keys import (
    SERIES_FIELD_SEPARATOR,
    composite_key,
    series_and_field_from_composite_key,
)


class TestSeriesAndField:
    def test_splits_series_and_field(self):
        assert series_and_field_from_composite_key(b"cpu,host=a#!~#usage") == (
            b"cpu,host=a",
            b"usage",
        )

    def test_splits_at_first_separator(self):
        key = b"cpu#!~#f#!~#g"
        assert series_and_field_from_composite_key(key) == (b"cpu", b"f#!~#g")

    def test_missing_separator_keeps_whole_key(self):
        assert series_and_field_from_composite_key(b"cpu") == (b"cpu", b"")

    def test_empty_key(self):
        assert series_and_field_from_composite_key(b"") == (b"", b"")

    def test_accepts_bytearray(self):
        series, field = series_and_field_from_composite_key(bytearray(b"m#!~#v"))
        assert series == b"m"
        assert field == b"v"


class TestCompositeKey:
    def test_joins_strings(self):
        assert composite_key("cpu", "usage") == b"cpu" + SERIES_FIELD_SEPARATOR + b"usage"

    def test_joins_bytes(self):
        assert composite_key(b"mem", b"free") == b"mem#!~#free"

    def test_decodes_back(self):
        key = composite_key("disk,path=/", "used")
        assert series_and_field_from_composite_key(key) == (b"disk,path=/", b"used")
