"""
OTel span event emission for rule reports.

Events are attached to the current span only when it is recording, so
a process without a configured tracer provider pays nothing.

Usage::

    from tsmrules.rules.otel import emit_old_series_report

    emit_old_series_report(report)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace as otel_trace

if TYPE_CHECKING:
    from tsmrules.rules.old_series import StaleSeriesReport

logger = logging.getLogger(__name__)


def _add_span_event(name: str, attributes: dict[str, str | int | float | bool]) -> None:
    """Add an event to the current OTel span if it is recording."""
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)


def emit_old_series_report(report: StaleSeriesReport) -> None:
    """Emit a span event summarising an old series report.

    Event name: ``tsm.old_series.report``
    """
    attrs: dict[str, str | int | float | bool] = {
        "old_series.threshold_ns": report.threshold_ns,
        "old_series.total": report.total,
        "old_series.detected": len(report.stale),
    }
    logger.debug(
        "Old series report: %d/%d at or before %d",
        len(report.stale),
        report.total,
        report.threshold_ns,
    )
    _add_span_event("tsm.old_series.report", attrs)
