"""
Output formatters for series reports.

A formatter writes one line per reported series to an open text
destination.  The variant is picked by name when a rule is built, so an
unknown name fails at construction and never while reporting.

Usage::

    import sys
    from tsmrules.rules.formatters import new_formatter

    fmt = new_formatter("json", with_timestamp=True, timestamp_layout="RFC3339")
    fmt.format(sys.stdout, "cpu,host=a", 0)
    # {"Serie":"cpu,host=a","Timestamp":"1970-01-01T00:00:00Z"}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol, TextIO, runtime_checkable

from tsmrules.rules.errors import UnsupportedFormatError
from tsmrules.rules.timestamps import format_timestamp


def _valid_utf8(series: str) -> str:
    """Replace bytes that were not valid UTF-8 with U+FFFD."""
    return series.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _for_stream(out: TextIO, series: str) -> str:
    """Keep raw series bytes when ``out`` can write them back, else replace them."""
    if getattr(out, "errors", None) in (None, "surrogateescape"):
        return series
    return _valid_utf8(series)


@runtime_checkable
class Formatter(Protocol):
    """Writes one report line for a series."""

    def format(self, out: TextIO, series: str, timestamp: int) -> None:
        ...


@dataclass(frozen=True)
class TextFormatter:
    """``<series>`` or ``<series>: <timestamp>`` per line."""

    with_timestamp: bool = False
    timestamp_layout: str = ""

    def format(self, out: TextIO, series: str, timestamp: int) -> None:
        series = _for_stream(out, series)
        if self.with_timestamp:
            out.write(f"{series}: {format_timestamp(timestamp, self.timestamp_layout)}\n")
        else:
            out.write(f"{series}\n")


@dataclass(frozen=True)
class JSONFormatter:
    """One compact JSON object per line.

    Objects carry a ``Serie`` key and, when timestamps are enabled, a
    ``Timestamp`` key.  Consumers must not depend on key order.
    """

    with_timestamp: bool = False
    timestamp_layout: str = ""

    def format(self, out: TextIO, series: str, timestamp: int) -> None:
        data: dict[str, Any] = {"Serie": _valid_utf8(series)}
        if self.with_timestamp:
            data["Timestamp"] = format_timestamp(timestamp, self.timestamp_layout)
        out.write(json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False))
        out.write("\n")


FORMATTERS: dict[str, type] = {
    "text": TextFormatter,
    "json": JSONFormatter,
}


def new_formatter(
    name: str,
    with_timestamp: bool = False,
    timestamp_layout: str = "",
) -> Formatter:
    """Build the formatter registered under ``name``.

    Raises:
        UnsupportedFormatError: If no formatter is registered for ``name``.
    """
    cls = FORMATTERS.get(name)
    if cls is None:
        raise UnsupportedFormatError(name)
    return cls(with_timestamp=with_timestamp, timestamp_layout=timestamp_layout)
