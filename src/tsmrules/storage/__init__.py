"""
Storage-side types shared between the traversal engine and rules.

Public API::

    from tsmrules.storage import (
        SERIES_FIELD_SEPARATOR,
        ShardInfo,
        Value,
        composite_key,
        series_and_field_from_composite_key,
    )
"""

from tsmrules.storage.keys import (
    SERIES_FIELD_SEPARATOR,
    composite_key,
    series_and_field_from_composite_key,
)
from tsmrules.storage.types import ShardInfo, Value

__all__ = [
    "SERIES_FIELD_SEPARATOR",
    "ShardInfo",
    "Value",
    "composite_key",
    "series_and_field_from_composite_key",
]
