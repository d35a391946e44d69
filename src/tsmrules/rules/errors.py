"""
Construction errors raised while turning rule configuration into rules.

Every failure to build a rule is a ``ConfigError``.  Subclasses carry
the offending value so callers (the CLI, tests) can report it without
parsing the message.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when a rule cannot be built from its configuration."""


class InvalidTimeError(ConfigError):
    """Raised when a threshold time is not a valid RFC 3339 timestamp."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid RFC 3339 time: {value!r}")


class UnsupportedFormatError(ConfigError):
    """Raised when an output format name has no registered formatter."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown format {name}")


class OutputError(ConfigError):
    """Raised when the output destination cannot be created."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot create output file {path}: {reason}")


class UnknownRuleError(ConfigError):
    """Raised when a rules file names a rule that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown rule '{name}'")
