"""
Composite key helpers for TSM blocks.

A TSM block key joins a series key and a field name with a fixed
separator: ``cpu,host=a#!~#usage``.  Rules that reason about series
rather than fields strip the field suffix with
``series_and_field_from_composite_key``.

Usage::

    from tsmrules.storage.keys import series_and_field_from_composite_key

    series, field = series_and_field_from_composite_key(b"cpu,host=a#!~#usage")
    # (b"cpu,host=a", b"usage")
"""

from __future__ import annotations

SERIES_FIELD_SEPARATOR = b"#!~#"


def series_and_field_from_composite_key(key: bytes) -> tuple[bytes, bytes]:
    """Split a composite key into its series key and field name.

    The split happens at the first separator.  A key without a
    separator is returned whole as the series key with an empty field.
    """
    series, sep, field = bytes(key).partition(SERIES_FIELD_SEPARATOR)
    if not sep:
        return series, b""
    return series, field


def composite_key(series: bytes | str, field: bytes | str) -> bytes:
    """Build a composite key from a series key and a field name."""
    if isinstance(series, str):
        series = series.encode("utf-8")
    if isinstance(field, str):
        field = field.encode("utf-8")
    return series + SERIES_FIELD_SEPARATOR + field
