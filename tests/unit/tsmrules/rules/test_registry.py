"""Tests for the rule registry and rules file loading."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

import tsmrules.rules.config as rule_config
from tsmrules.rules.base import Rule
from tsmrules.rules.config import StaleSeriesRuleConfig
from tsmrules.rules.errors import ConfigError, UnknownRuleError, UnsupportedFormatError
from tsmrules.rules.old_series import StaleSeriesRule
from tsmrules.rules.registry import (
    RULE_CONFIGS,
    RulesFile,
    RulesLoader,
    build_rules,
    sample,
)

RULES_YAML = textwrap.dedent("""\
    rules:
      old-serie:
        - time: "2020-01-01T00:00:00Z"
          out: stdout
        - time: "2021-01-01T00:00:00Z"
          out: stderr
          format: json
          timestamp: true
          timestamp_layout: RFC3339
""")


class TestRegistry:
    def test_old_serie_registered(self):
        assert RULE_CONFIGS["old-serie"] is StaleSeriesRuleConfig

    def test_sample(self):
        assert "old-serie" in sample("old-serie")

    def test_sample_unknown(self):
        with pytest.raises(UnknownRuleError):
            sample("delete-everything")


class TestRulesLoader:
    def test_load_from_string(self):
        rules_file = RulesLoader().load_from_string(RULES_YAML)
        assert len(rules_file.rules["old-serie"]) == 2

    def test_load_from_file(self, tmp_path: Path):
        f = tmp_path / "rules.yaml"
        f.write_text(RULES_YAML)
        assert len(RulesLoader().load(f).rules["old-serie"]) == 2

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            RulesLoader().load(Path("/nonexistent/rules.yaml"))

    def test_non_mapping_root(self, tmp_path: Path):
        f = tmp_path / "rules.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(TypeError):
            RulesLoader().load(f)

    def test_unknown_top_level_key(self):
        with pytest.raises(ValidationError):
            RulesLoader().load_from_string("rulez: {}\n")

    def test_empty_rules(self):
        assert RulesLoader().load_from_string("rules: {}\n").rules == {}


class TestBuildRules:
    def test_builds_in_order(self):
        rules = build_rules(RulesLoader().load_from_string(RULES_YAML))
        assert len(rules) == 2
        assert all(isinstance(r, StaleSeriesRule) for r in rules)
        assert all(isinstance(r, Rule) for r in rules)
        assert rules[0].threshold_ns < rules[1].threshold_ns
        assert rules[1].formatter.with_timestamp is True

    def test_unknown_rule(self):
        rules_file = RulesFile(rules={"rewrite-all": [{}]})
        with pytest.raises(UnknownRuleError) as exc_info:
            build_rules(rules_file)
        assert exc_info.value.name == "rewrite-all"

    def test_invalid_entry(self):
        rules_file = RulesFile(rules={"old-serie": [{"out": "stdout"}]})
        with pytest.raises(ConfigError, match=r"old-serie\[0\]"):
            build_rules(rules_file)

    def test_build_error_propagates(self):
        rules_file = RulesFile(
            rules={"old-serie": [{"time": "2020-01-01T00:00:00Z", "format": "xml"}]}
        )
        with pytest.raises(UnsupportedFormatError):
            build_rules(rules_file)

    def test_unknown_rule_without_entries(self):
        with pytest.raises(UnknownRuleError):
            build_rules(RulesFile(rules={"rewrite-all": []}))

    def test_unquoted_time(self):
        rules_file = RulesLoader().load_from_string(
            "rules:\n  old-serie:\n    - time: 1970-01-01T00:00:01Z\n"
        )
        [rule] = build_rules(rules_file)
        assert rule.threshold_ns == 1_000_000_000

    def test_failure_closes_opened_outputs(self, tmp_path: Path, monkeypatch):
        opened = []
        real_open_output = rule_config.open_output

        def recording_open_output(out):
            stream = real_open_output(out)
            opened.append(stream)
            return stream

        monkeypatch.setattr(rule_config, "open_output", recording_open_output)
        rules_file = RulesFile(
            rules={
                "old-serie": [
                    {"time": "2020-01-01T00:00:00Z", "out": str(tmp_path / "a.txt")},
                    {"time": "2020-01-01T00:00:00Z", "format": "xml"},
                ]
            }
        )
        with pytest.raises(UnsupportedFormatError):
            build_rules(rules_file)
        assert len(opened) == 1
        assert opened[0].closed

    def test_failure_keeps_standard_streams_open(self):
        rules_file = RulesFile(
            rules={
                "old-serie": [
                    {"time": "2020-01-01T00:00:00Z", "out": "stdout"},
                    {"time": "2020-01-01T00:00:00Z", "out": "stderr"},
                    {"time": "not a time"},
                ]
            }
        )
        with pytest.raises(ConfigError):
            build_rules(rules_file)
        assert not sys.stdout.closed
        assert not sys.stderr.closed
