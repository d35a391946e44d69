"""
Value and shard descriptors handed to rules by the traversal engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Value:
    """A single timestamped sample decoded from a TSM or WAL block."""

    unix_nano: int
    value: Any = None


@dataclass(frozen=True)
class ShardInfo:
    """Identifies the shard a rule is currently visiting."""

    id: int
    path: str
    database: str = ""
    retention_policy: str = ""
