"""
Human-readable rendering of nanosecond timestamps for rule reports.

Layouts follow the conventions of rule configuration files written for
the storage engine tooling:

- ``""`` renders the raw value as a single character whose code point
  is the timestamp.  This is the legacy report format and is kept for
  compatibility with existing consumers; it is not a readable date.
- ``"RFC3339"`` (any case) renders ``2006-01-02T15:04:05Z07:00``.
- A layout containing ``%`` is a ``strftime`` pattern.
- Any other layout is a Go reference-time layout (``2006-01-02 15:04``,
  ``Jan _2``, ``.000``, ``-07:00`` ...).

All timestamps are converted to UTC before rendering.

Usage::

    from tsmrules.rules.timestamps import format_timestamp

    format_timestamp(0, "RFC3339")              # "1970-01-01T00:00:00Z"
    format_timestamp(0, "2006-01-02 15:04:05")  # "1970-01-01 00:00:00"
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

NANOS_PER_SECOND = 1_000_000_000
RFC3339_LAYOUT = "2006-01-02T15:04:05Z07:00"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_REPLACEMENT_CHAR = "�"
_MAX_CODE_POINT = 0x10FFFF

_Renderer = Callable[[datetime, int], str]


def to_datetime(unix_nano: int) -> tuple[datetime, int]:
    """Split a nanosecond timestamp into a UTC datetime and leftover nanoseconds."""
    seconds, nanos = divmod(unix_nano, NANOS_PER_SECOND)
    return _EPOCH + timedelta(seconds=seconds), nanos


def to_unix_nano(dt: datetime) -> int:
    """Convert a datetime to nanoseconds since the epoch (naive means UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * NANOS_PER_SECOND + delta.microseconds * 1000


def _legacy_char(unix_nano: int) -> str:
    if 0 <= unix_nano <= _MAX_CODE_POINT and not 0xD800 <= unix_nano <= 0xDFFF:
        return chr(unix_nano)
    return _REPLACEMENT_CHAR


def _offset(dt: datetime, sep: str, seconds: bool, hours_only: bool, zulu: bool) -> str:
    delta = dt.utcoffset() or timedelta(0)
    total = int(delta.total_seconds())
    if zulu and total == 0:
        return "Z"
    sign = "-" if total < 0 else "+"
    total = abs(total)
    hh, rem = divmod(total, 3600)
    mm, ss = divmod(rem, 60)
    if hours_only:
        return f"{sign}{hh:02d}"
    text = f"{sign}{hh:02d}{sep}{mm:02d}"
    if seconds:
        text += f"{sep}{ss:02d}"
    return text


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


def _fraction(digits: int, trim: bool) -> _Renderer:
    def render(dt: datetime, nanos: int) -> str:
        text = f"{nanos:09d}"[:digits]
        if trim:
            text = text.rstrip("0")
            return f".{text}" if text else ""
        return f".{text}"

    return render


# Longest tokens first so that e.g. "January" wins over "Jan".
_TOKENS: list[tuple[str, _Renderer]] = [
    ("January", lambda dt, _: dt.strftime("%B")),
    ("Monday", lambda dt, _: dt.strftime("%A")),
    ("Z07:00:00", lambda dt, _: _offset(dt, ":", True, False, True)),
    ("-07:00:00", lambda dt, _: _offset(dt, ":", True, False, False)),
    ("Z070000", lambda dt, _: _offset(dt, "", True, False, True)),
    ("-070000", lambda dt, _: _offset(dt, "", True, False, False)),
    ("Z07:00", lambda dt, _: _offset(dt, ":", False, False, True)),
    ("-07:00", lambda dt, _: _offset(dt, ":", False, False, False)),
    ("Z0700", lambda dt, _: _offset(dt, "", False, False, True)),
    ("-0700", lambda dt, _: _offset(dt, "", False, False, False)),
    ("2006", lambda dt, _: f"{dt.year:04d}"),
    ("Z07", lambda dt, _: _offset(dt, "", False, True, True)),
    ("-07", lambda dt, _: _offset(dt, "", False, True, False)),
    ("Jan", lambda dt, _: dt.strftime("%b")),
    ("Mon", lambda dt, _: dt.strftime("%a")),
    ("MST", lambda dt, _: dt.tzname() or "UTC"),
    ("002", lambda dt, _: f"{dt.timetuple().tm_yday:03d}"),
    ("_2006", lambda dt, _: f"_{dt.year:04d}"),
    ("__2", lambda dt, _: f"{dt.timetuple().tm_yday:>3d}"),
    ("_2", lambda dt, _: f"{dt.day:>2d}"),
    ("01", lambda dt, _: f"{dt.month:02d}"),
    ("02", lambda dt, _: f"{dt.day:02d}"),
    ("03", lambda dt, _: f"{_hour12(dt):02d}"),
    ("04", lambda dt, _: f"{dt.minute:02d}"),
    ("05", lambda dt, _: f"{dt.second:02d}"),
    ("06", lambda dt, _: f"{dt.year % 100:02d}"),
    ("15", lambda dt, _: f"{dt.hour:02d}"),
    ("PM", lambda dt, _: "PM" if dt.hour >= 12 else "AM"),
    ("pm", lambda dt, _: "pm" if dt.hour >= 12 else "am"),
    ("1", lambda dt, _: str(dt.month)),
    ("2", lambda dt, _: str(dt.day)),
    ("3", lambda dt, _: str(_hour12(dt))),
    ("4", lambda dt, _: str(dt.minute)),
    ("5", lambda dt, _: str(dt.second)),
]

# "Jan" and "Mon" only count as tokens when not followed by a lowercase letter.
_WORD_TOKENS = {"Jan", "Mon"}


def _match_fraction(layout: str, i: int) -> tuple[int, _Renderer] | None:
    """Match ``.000`` / ``.999`` style fractional-second tokens at ``i``."""
    if layout[i] not in ".," or i + 1 >= len(layout):
        return None
    digit = layout[i + 1]
    if digit not in "09":
        return None
    j = i + 1
    while j < len(layout) and layout[j] == digit:
        j += 1
    if j < len(layout) and layout[j].isdigit():
        return None
    count = min(j - i - 1, 9)
    return j - i, _fraction(count, trim=digit == "9")


def render_go_layout(dt: datetime, nanos: int, layout: str) -> str:
    """Render ``dt`` using a Go reference-time layout."""
    out: list[str] = []
    i = 0
    while i < len(layout):
        frac = _match_fraction(layout, i)
        if frac is not None:
            width, render = frac
            out.append(render(dt, nanos))
            i += width
            continue

        for token, render in _TOKENS:
            if not layout.startswith(token, i):
                continue
            end = i + len(token)
            if token in _WORD_TOKENS and end < len(layout) and layout[end].islower():
                continue
            out.append(render(dt, nanos))
            i = end
            break
        else:
            out.append(layout[i])
            i += 1
    return "".join(out)


def format_timestamp(unix_nano: int, layout: str) -> str:
    """Render a nanosecond timestamp according to ``layout``.

    Args:
        unix_nano: Nanoseconds since the Unix epoch.
        layout: ``""``, ``"RFC3339"``, a ``strftime`` pattern, or a Go
            reference-time layout.

    Returns:
        The rendered timestamp.
    """
    if layout == "":
        return _legacy_char(unix_nano)

    dt, nanos = to_datetime(unix_nano)
    if layout.lower() == "rfc3339":
        return render_go_layout(dt, nanos, RFC3339_LAYOUT)
    if "%" in layout:
        return dt.strftime(layout)
    return render_go_layout(dt, nanos, layout)
