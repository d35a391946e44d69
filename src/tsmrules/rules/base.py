"""
The rule contract programmed against by the storage traversal engine.

The engine builds each rule once, then drives it through a fixed
lifecycle::

    start()
      start_shard(info)
        start_tsm(path) ... apply(key, values)* ... end_tsm()
        start_wal(path) ... apply(key, values)* ... end_wal()
      end_shard()
    end()

Every hook is part of the contract, but most rules only care about a
few of them; the rest are empty.  Rules are independent classes that
satisfy ``Rule`` structurally rather than subclasses of a common base.

``apply`` returns ``(None, None)`` to keep a block unchanged.  Only a
rule advertising a write flag may return a replacement key and values.
"""

from __future__ import annotations

import logging
from enum import IntFlag
from typing import Optional, Protocol, Sequence, runtime_checkable

from tsmrules.storage.types import ShardInfo, Value


class RuleFlags(IntFlag):
    """Capabilities a rule requests from the traversal engine."""

    TSM_READ_ONLY = 1 << 0
    TSM_WRITE = 1 << 1
    WAL_READ_ONLY = 1 << 2
    WAL_WRITE = 1 << 3


ApplyResult = tuple[Optional[bytes], Optional[list[Value]]]


@runtime_checkable
class Rule(Protocol):
    """Protocol implemented by every rule the engine can drive."""

    def flags(self) -> RuleFlags:
        """Return the capabilities this rule needs."""
        ...

    def check_mode(self, enabled: bool) -> None:
        """Enable or disable dry-run checking."""
        ...

    def with_logger(self, logger: logging.Logger) -> None:
        """Replace the logger used by the rule."""
        ...

    def start(self) -> None:
        ...

    def end(self) -> None:
        ...

    def start_shard(self, info: ShardInfo) -> None:
        ...

    def end_shard(self) -> Optional[Exception]:
        """Return a non-None error to signal the shard should be aborted."""
        ...

    def start_tsm(self, path: str) -> None:
        ...

    def end_tsm(self) -> None:
        ...

    def start_wal(self, path: str) -> None:
        ...

    def end_wal(self) -> None:
        ...

    def apply(self, key: bytes, values: Sequence[Value]) -> ApplyResult:
        """Visit one decoded block.

        Returns ``(None, None)`` to leave the block untouched, or a new
        key and values to rewrite it.
        """
        ...


@runtime_checkable
class RuleConfig(Protocol):
    """Protocol implemented by the configuration model of each rule."""

    def sample(self) -> str:
        """Return an example configuration block for this rule."""
        ...

    def build(self) -> Rule:
        """Build the configured rule.

        Raises:
            ConfigError: If the configuration cannot produce a rule.
        """
        ...
