"""Tests for report line formatters."""

import io
import json

import pytest

from tsmrules.rules.config import open_output
from tsmrules.rules.errors import ConfigError, UnsupportedFormatError
from tsmrules.rules.formatters import (
    FORMATTERS,
    Formatter,
    JSONFormatter,
    TextFormatter,
    new_formatter,
)


def _render(formatter: Formatter, series: str, ts: int) -> str:
    out = io.StringIO()
    formatter.format(out, series, ts)
    return out.getvalue()


class TestTextFormatter:
    def test_series_only(self):
        assert _render(TextFormatter(), "cpu.load", 0) == "cpu.load\n"

    def test_with_rfc3339_timestamp(self):
        f = TextFormatter(with_timestamp=True, timestamp_layout="RFC3339")
        assert _render(f, "cpu.load", 0) == "cpu.load: 1970-01-01T00:00:00Z\n"

    def test_with_legacy_timestamp(self):
        f = TextFormatter(with_timestamp=True)
        assert _render(f, "cpu", 66) == "cpu: B\n"

    def test_timestamp_ignored_when_disabled(self):
        f = TextFormatter(with_timestamp=False, timestamp_layout="RFC3339")
        assert _render(f, "cpu", 0) == "cpu\n"

    def test_invalid_utf8_kept_for_string_buffer(self):
        assert _render(TextFormatter(), "cpu\udcff", 0) == "cpu\udcff\n"

    def test_invalid_utf8_replaced_for_strict_stream(self):
        raw = io.BytesIO()
        out = io.TextIOWrapper(raw, encoding="utf-8")
        TextFormatter().format(out, "cpu\udcff", 0)
        out.flush()
        assert raw.getvalue() == "cpu\ufffd\n".encode("utf-8")

    def test_invalid_utf8_written_back_to_output_file(self, tmp_path):
        path = tmp_path / "report.txt"
        out = open_output(str(path))
        try:
            TextFormatter().format(out, "cpu\udcff", 0)
        finally:
            out.close()
        assert path.read_bytes() == b"cpu\xff\n"


class TestJSONFormatter:
    def test_series_only(self):
        line = _render(JSONFormatter(), "cpu,host=a", 0)
        assert line.endswith("\n")
        assert line.count("\n") == 1
        assert json.loads(line) == {"Serie": "cpu,host=a"}

    def test_with_timestamp(self):
        f = JSONFormatter(with_timestamp=True, timestamp_layout="RFC3339")
        data = json.loads(_render(f, "cpu", 0))
        assert data == {"Serie": "cpu", "Timestamp": "1970-01-01T00:00:00Z"}

    def test_compact(self):
        line = _render(JSONFormatter(with_timestamp=True, timestamp_layout="RFC3339"), "cpu", 0)
        assert " " not in line

    def test_invalid_utf8_replaced(self):
        line = _render(JSONFormatter(), "cpu\udcff", 0)
        assert json.loads(line) == {"Serie": "cpu\ufffd"}

    def test_escapes_quotes(self):
        data = json.loads(_render(JSONFormatter(), 'm,tag="x"', 0))
        assert data["Serie"] == 'm,tag="x"'


class TestNewFormatter:
    @pytest.mark.parametrize("name,cls", [("text", TextFormatter), ("json", JSONFormatter)])
    def test_known_names(self, name, cls):
        f = new_formatter(name, with_timestamp=True, timestamp_layout="RFC3339")
        assert isinstance(f, cls)
        assert f.with_timestamp is True
        assert f.timestamp_layout == "RFC3339"

    def test_defaults(self):
        f = new_formatter("text")
        assert f == TextFormatter(with_timestamp=False, timestamp_layout="")

    @pytest.mark.parametrize("name", ["xml", "", "TEXT", "csv"])
    def test_unknown_name_rejected(self, name):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            new_formatter(name)
        assert exc_info.value.name == name
        assert isinstance(exc_info.value, ConfigError)

    def test_registry_matches_protocol(self):
        for cls in FORMATTERS.values():
            assert isinstance(cls(), Formatter)
