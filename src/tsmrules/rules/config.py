"""
Configuration model and builder for the old series rule.

Rules files list rule configurations per rule name.  The ``old-serie``
entry maps onto ``StaleSeriesRuleConfig``, whose ``build()`` parses the
threshold, resolves the formatter and opens the output destination.

Build failures raise ``ConfigError`` subclasses before any block can
be applied:

- ``InvalidTimeError`` when ``time`` is not RFC 3339
- ``UnsupportedFormatError`` when ``format`` is unknown
- ``OutputError`` when the output file cannot be created

Usage::

    from tsmrules.rules.config import StaleSeriesRuleConfig

    cfg = StaleSeriesRuleConfig(time="2020-01-01T00:08:00Z", format="json")
    rule = cfg.build()
"""

from __future__ import annotations

import re
import sys
import textwrap
from datetime import datetime, timedelta, timezone
from typing import TextIO

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tsmrules.rules.errors import InvalidTimeError, OutputError
from tsmrules.rules.formatters import new_formatter
from tsmrules.rules.old_series import StaleSeriesRule
from tsmrules.rules.timestamps import to_unix_nano

DEFAULT_FORMAT = "text"

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))\Z"
)


def parse_rfc3339(value: str) -> int:
    """Parse an RFC 3339 timestamp into nanoseconds since the epoch.

    Fractional seconds are kept to nanosecond precision.

    Raises:
        InvalidTimeError: If ``value`` is not a valid RFC 3339 timestamp.
    """
    match = _RFC3339_RE.match(value)
    if match is None:
        raise InvalidTimeError(value)

    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction, zulu, sign, off_h, off_m = match.group(7, 8, 9, 10, 11)

    if zulu:
        tz = timezone.utc
    else:
        hours, minutes = int(off_h), int(off_m)
        if hours > 23 or minutes > 59:
            raise InvalidTimeError(value)
        offset = timedelta(hours=hours, minutes=minutes)
        tz = timezone(-offset if sign == "-" else offset)

    try:
        dt = datetime(year, month, day, hour, minute, second, tzinfo=tz)
    except ValueError as exc:
        raise InvalidTimeError(value) from exc

    nanos = int(fraction.ljust(9, "0")) if fraction else 0
    return to_unix_nano(dt) + nanos


def open_output(out: str) -> TextIO:
    """Resolve an ``out`` setting to a writable text destination.

    ``""`` and ``"stdout"`` select standard output and ``"stderr"``
    standard error; anything else is a path that is created or
    truncated.  The caller owns the returned stream.

    Raises:
        OutputError: If the file cannot be created.
    """
    if out in ("", "stdout"):
        return sys.stdout
    if out == "stderr":
        return sys.stderr
    try:
        return open(out, "w", encoding="utf-8", errors="surrogateescape")
    except OSError as exc:
        raise OutputError(out, exc.strerror or str(exc)) from exc


def close_output(out: TextIO) -> None:
    """Close a destination returned by ``open_output`` unless it is a standard stream."""
    if out is not sys.stdout and out is not sys.stderr:
        out.close()


class StaleSeriesRuleConfig(BaseModel):
    """Configuration of the ``old-serie`` rule."""

    model_config = ConfigDict(extra="forbid")

    time: str = Field(..., description="RFC 3339 threshold; older series are reported")
    out: str = Field("", description="'', 'stdout', 'stderr' or an output file path")
    format: str = Field(DEFAULT_FORMAT, description="Report format: 'text' or 'json'")
    timestamp: bool = Field(False, description="Include the newest timestamp per series")
    timestamp_layout: str = Field(
        "", description="Timestamp layout: '', 'RFC3339', strftime or Go reference layout"
    )

    @field_validator("time", mode="before")
    @classmethod
    def render_datetime(cls, v: object) -> object:
        """Turn an unquoted YAML timestamp back into RFC 3339 text."""
        if isinstance(v, datetime):
            if v.tzinfo is None:
                v = v.replace(tzinfo=timezone.utc)
            return v.isoformat()
        return v

    @staticmethod
    def sample() -> str:
        return textwrap.dedent("""\
            rules:
              old-serie:
                - time: "2020-01-01T00:08:00Z"
                  out: stdout
                  # out: out_file.log
                  format: text
                  # format: json
                  timestamp: true
                  timestamp_layout: RFC3339
        """)

    def build(self) -> StaleSeriesRule:
        """Build the configured rule.

        Raises:
            InvalidTimeError: If ``time`` is not RFC 3339.
            UnsupportedFormatError: If ``format`` is unknown.
            OutputError: If the output file cannot be created.
        """
        threshold = parse_rfc3339(self.time)
        formatter = new_formatter(
            self.format or DEFAULT_FORMAT,
            with_timestamp=self.timestamp,
            timestamp_layout=self.timestamp_layout,
        )
        return StaleSeriesRule(threshold, open_output(self.out), formatter)
