"""
Rules applied to TSM and WAL blocks during a storage scan.

Public API::

    from tsmrules.rules import (
        # Contract
        Rule,
        RuleConfig,
        RuleFlags,
        # Old series rule
        StaleSeriesRule,
        StaleSeriesRuleConfig,
        StaleSeriesReport,
        SeriesLastSeen,
        new_old_series_rule,
        # Formatters
        Formatter,
        TextFormatter,
        JSONFormatter,
        new_formatter,
        format_timestamp,
        # Registry
        RULE_CONFIGS,
        RulesFile,
        RulesLoader,
        build_rules,
        # Errors
        ConfigError,
        InvalidTimeError,
        OutputError,
        UnknownRuleError,
        UnsupportedFormatError,
    )
"""

from tsmrules.rules.base import Rule, RuleConfig, RuleFlags
from tsmrules.rules.config import StaleSeriesRuleConfig, parse_rfc3339
from tsmrules.rules.errors import (
    ConfigError,
    InvalidTimeError,
    OutputError,
    UnknownRuleError,
    UnsupportedFormatError,
)
from tsmrules.rules.formatters import (
    Formatter,
    JSONFormatter,
    TextFormatter,
    new_formatter,
)
from tsmrules.rules.old_series import (
    SeriesLastSeen,
    StaleSeriesReport,
    StaleSeriesRule,
    new_old_series_rule,
)
from tsmrules.rules.registry import RULE_CONFIGS, RulesFile, RulesLoader, build_rules
from tsmrules.rules.timestamps import format_timestamp

__all__ = [
    # Contract
    "Rule",
    "RuleConfig",
    "RuleFlags",
    # Old series rule
    "StaleSeriesRule",
    "StaleSeriesRuleConfig",
    "StaleSeriesReport",
    "SeriesLastSeen",
    "new_old_series_rule",
    "parse_rfc3339",
    # Formatters
    "Formatter",
    "TextFormatter",
    "JSONFormatter",
    "new_formatter",
    "format_timestamp",
    # Registry
    "RULE_CONFIGS",
    "RulesFile",
    "RulesLoader",
    "build_rules",
    # Errors
    "ConfigError",
    "InvalidTimeError",
    "OutputError",
    "UnknownRuleError",
    "UnsupportedFormatError",
]
