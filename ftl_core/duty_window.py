"""
Duty-Window Validator
=====================

Checks a candidate duty period against the two rules that depend on actual
report/release instants rather than on accumulated block time:

- Daily duty ceiling: the duty period containing the candidate must not
  exceed 13 h elapsed. Same-day logged duties that overlap or touch the
  candidate window are part of the same period and are merged by
  earliest start / latest end.
- Minimum rest: at least 10 h between the end of the most recent earlier
  duty and the start of the candidate's duty period. Exactly 10 h passes.
  A duty booked on another day that is still running when the candidate
  period starts leaves a negative rest and fails.

Both rules are evaluated independently of each other.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any, List, Optional, Tuple
import logging

from ftl_models.data_models import DutyLog, DutyWindowResult
from ftl_core.aggregator import coerce_logs
from ftl_core.errors import FTLInputError
from ftl_core.parameters import FTLConfig, DEFAULT_CONFIG
from ftl_core.time_utils import (
    hours_between,
    parse_date,
    parse_instant,
    require_instant,
    to_reference_date,
)

logger = logging.getLogger(__name__)

Span = Tuple[datetime, datetime]


def duty_span(log: DutyLog) -> Optional[Span]:
    """Report/release instants of a log, or None if either is unusable."""
    start = parse_instant(log.duty_start_utc)
    end = parse_instant(log.duty_end_utc)
    if start is None or end is None or end < start:
        return None
    return start, end


def merge_duty_period(candidate: Span, same_day: List[Span]) -> Tuple[Span, List[Span]]:
    """
    Grow the candidate window with every same-day span it overlaps or touches.

    Returns the merged window and the spans absorbed into it.
    """
    start, end = candidate
    pending = sorted(same_day)
    merged = []
    changed = True
    while changed:
        changed = False
        for span in list(pending):
            span_start, span_end = span
            if span_start <= end and span_end >= start:
                start = min(start, span_start)
                end = max(end, span_end)
                merged.append(span)
                pending.remove(span)
                changed = True
    return (start, end), merged


def last_duty_end_before(spans: List[Span], instant: datetime) -> Optional[datetime]:
    """Latest release among duties reported before `instant`, possibly after it."""
    ends = [end for start, end in spans if start < instant or end <= instant]
    return max(ends) if ends else None


def validate_duty_window(
    logs: Optional[Iterable],
    reference_date: Any,
    new_duty_start: Any = None,
    new_duty_end: Any = None,
    config: FTLConfig = None,
) -> DutyWindowResult:
    """
    Validate daily duty span and minimum rest for a candidate duty.

    Args:
        logs: Prior duty logs of the crew member
        reference_date: Calendar day of the candidate duty
        new_duty_start: Candidate report instant (rest check needs only this)
        new_duty_end: Candidate release instant (duty span needs both)

    Returns:
        DutyWindowResult; with no duty start nothing is checked.
    """
    config = config or DEFAULT_CONFIG
    limits = config.limits
    reference = to_reference_date(reference_date, config.tz)
    start = require_instant(new_duty_start, 'new_duty_start')
    end = require_instant(new_duty_end, 'new_duty_end')

    if start is not None and end is not None and end < start:
        raise FTLInputError(f"Duty end {end.isoformat()} precedes duty start {start.isoformat()}")

    result = DutyWindowResult()
    if start is None:
        return result

    history = coerce_logs(logs)
    spans = []
    same_day = []
    for log in history:
        span = duty_span(log)
        if span is None:
            continue
        spans.append(span)
        if parse_date(log.date) == reference:
            same_day.append(span)

    (period_start, period_end), merged = merge_duty_period((start, end or start), same_day)

    # Daily duty ceiling
    if end is not None:
        duty_hours = hours_between(period_start, period_end)
        result.duty_start = period_start
        result.duty_end = period_end
        result.duty_hours = duty_hours
        if period_end - period_start > timedelta(hours=limits.max_duty_hours_per_day):
            result.duty_compliant = False
            result.duty_reason = (
                f"Duty journalier dépassé : {duty_hours:.1f}h / "
                f"{limits.max_duty_hours_per_day:g}h max"
            )

    # Minimum rest before the duty period
    earlier = [span for span in spans if span not in merged]
    last_end = last_duty_end_before(earlier, period_start)
    if last_end is not None:
        rest_hours = hours_between(last_end, period_start)
        result.rest_hours = rest_hours
        if period_start - last_end < timedelta(hours=limits.min_rest_hours):
            result.rest_compliant = False
            result.rest_reason = (
                f"Repos insuffisant : {rest_hours:.1f}h "
                f"(min {limits.min_rest_hours:g}h requis)"
            )

    if not result.compliant:
        logger.debug(f"Duty window {start.isoformat()}: {result.duty_reason or ''} {result.rest_reason or ''}")
    return result
