"""
tsmrules - rules applied to blocks of a time-series storage engine.

A traversal engine walks shards, TSM files and WAL segments and hands
every decoded key/value block to the configured rules.  This package
provides the rule contract and the rules themselves; the first one,
``StaleSeriesRule``, reports series whose newest point is older than a
threshold.

Example usage:
    from tsmrules import StaleSeriesRuleConfig

    rule = StaleSeriesRuleConfig(time="2020-01-01T00:00:00Z").build()
    rule.start()
    for key, values in blocks:
        rule.apply(key, values)
    rule.end()
"""

__version__ = "0.1.0"
__all__ = [
    "Rule",
    "StaleSeriesRule",
    "StaleSeriesRuleConfig",
    "__version__",
]


# Lazy imports to avoid loading pydantic and OTel at import time
def __getattr__(name: str):
    if name == "Rule":
        from tsmrules.rules.base import Rule
        return Rule
    if name == "StaleSeriesRule":
        from tsmrules.rules.old_series import StaleSeriesRule
        return StaleSeriesRule
    if name == "StaleSeriesRuleConfig":
        from tsmrules.rules.config import StaleSeriesRuleConfig
        return StaleSeriesRuleConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
