"""
Read-only rule reporting series whose newest point is older than a threshold.

While the engine walks shards, ``apply`` records for every series the
largest timestamp seen in any block of any field.  Series are keyed by
the composite key with its field suffix stripped, so ``cpu#!~#usage``
and ``cpu#!~#idle`` accumulate into the same ``cpu`` entry.  When the
walk is over, ``end`` sorts the series, keeps those whose newest point
is at or before the threshold, and writes one line per series through
the configured formatter.

Accumulation is guarded by a lock: an engine that visits shards from
several threads may share one rule instance, or give each worker its
own instance and ``merge`` them before calling ``end``.

The rule never closes its output; the caller owns the destination.

Usage::

    import sys
    from datetime import datetime, timezone
    from tsmrules.rules.old_series import new_old_series_rule

    rule = new_old_series_rule(datetime(2020, 1, 1, tzinfo=timezone.utc), sys.stdout)
    rule.start()
    rule.apply(b"cpu,host=a#!~#usage", values)
    rule.end()
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence, TextIO, Union

from tsmrules.rules.base import ApplyResult, RuleFlags
from tsmrules.rules.formatters import Formatter, new_formatter
from tsmrules.rules.otel import emit_old_series_report
from tsmrules.rules.timestamps import to_unix_nano
from tsmrules.storage.keys import series_and_field_from_composite_key
from tsmrules.storage.types import ShardInfo, Value

logger = logging.getLogger(__name__)

_destination_locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()
_destination_locks_guard = threading.Lock()


def _destination_lock(out: TextIO) -> threading.Lock:
    """Return the lock serialising writes to ``out`` across rule instances."""
    with _destination_locks_guard:
        lock = _destination_locks.get(out)
        if lock is None:
            lock = _destination_locks[out] = threading.Lock()
        return lock


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeriesLastSeen:
    """A series and the newest timestamp observed for it.

    ``series`` is decoded with ``surrogateescape`` so series keys that
    are not valid UTF-8 stay distinct.
    """

    series: str
    last_seen: int  # nanoseconds


@dataclass
class StaleSeriesReport:
    """Outcome of an old series scan.

    ``stale`` holds the series at or before ``threshold_ns`` (inclusive),
    sorted by series key bytes; ``total`` counts every series observed.
    """

    threshold_ns: int
    total: int
    stale: list[SeriesLastSeen] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------


class StaleSeriesRule:
    """Collects the newest timestamp per series and reports the old ones.

    Args:
        threshold: Series whose newest point is at or before this
            instant are reported.  A datetime or nanoseconds since epoch.
        out: Destination for report lines; never closed by the rule.
        formatter: Renders one line per reported series.
    """

    def __init__(
        self,
        threshold: Union[datetime, int],
        out: TextIO,
        formatter: Formatter,
    ) -> None:
        if isinstance(threshold, datetime):
            threshold = to_unix_nano(threshold)
        self.threshold_ns: int = threshold
        self.out = out
        self.formatter = formatter
        self._series: dict[bytes, int] = {}
        self._lock = threading.Lock()
        self._logger = logger

    # -- lifecycle -----------------------------------------------------------

    def flags(self) -> RuleFlags:
        return RuleFlags.TSM_READ_ONLY

    def check_mode(self, enabled: bool) -> None:
        pass

    def with_logger(self, logger: logging.Logger) -> None:
        self._logger = logger

    def start(self) -> None:
        pass

    def end(self) -> None:
        """Write the report and log how many series were detected as old."""
        report = self.report()
        with _destination_lock(self.out):
            for entry in report.stale:
                self.formatter.format(self.out, entry.series, entry.last_seen)
        self._logger.info("Detected %d/%d series as old", len(report.stale), report.total)
        emit_old_series_report(report)

    def start_shard(self, info: ShardInfo) -> None:
        pass

    def end_shard(self) -> Optional[Exception]:
        return None

    def start_tsm(self, path: str) -> None:
        pass

    def end_tsm(self) -> None:
        pass

    def start_wal(self, path: str) -> None:
        pass

    def end_wal(self) -> None:
        pass

    # -- accumulation --------------------------------------------------------

    def apply(self, key: bytes, values: Sequence[Value]) -> ApplyResult:
        """Record the newest timestamp of a block; never rewrites it.

        Values within a block are in ascending time order, so the last
        one carries the block's newest timestamp.
        """
        if not values:
            return None, None
        series, _ = series_and_field_from_composite_key(key)
        newest = values[-1].unix_nano
        with self._lock:
            current = self._series.get(series)
            if current is None or newest > current:
                self._series[series] = newest
        return None, None

    def merge(self, other: StaleSeriesRule) -> None:
        """Fold another rule's observations into this one, keeping maxima."""
        with other._lock:
            incoming = dict(other._series)
        with self._lock:
            for series, ts in incoming.items():
                current = self._series.get(series)
                if current is None or ts > current:
                    self._series[series] = ts

    @property
    def last_seen(self) -> dict[str, int]:
        """Snapshot of the newest timestamp observed per series."""
        with self._lock:
            return {_decode(k): v for k, v in self._series.items()}

    def report(self) -> StaleSeriesReport:
        """Build the sorted, threshold-filtered report without writing it."""
        with self._lock:
            items = sorted(self._series.items())
        stale = [
            SeriesLastSeen(series=_decode(series), last_seen=ts)
            for series, ts in items
            if ts <= self.threshold_ns
        ]
        return StaleSeriesReport(
            threshold_ns=self.threshold_ns,
            total=len(items),
            stale=stale,
        )


def _decode(series: bytes) -> str:
    return series.decode("utf-8", errors="surrogateescape")


def new_old_series_rule(
    threshold: Union[datetime, int],
    out: TextIO,
    format_name: str = "text",
) -> StaleSeriesRule:
    """Create an old series rule reporting series names only.

    Raises:
        UnsupportedFormatError: If ``format_name`` is not a known format.
    """
    return StaleSeriesRule(threshold, out, new_formatter(format_name))
