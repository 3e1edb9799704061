"""
Time-Window Aggregator
======================

Rolls duty history into cumulative flight hours over trailing windows of
1, 7 and 28 calendar days anchored at a reference date.

A log counts toward a window of N days iff its date lies in
[reference - (N - 1), reference]. Each window is checked on its own, so a
log 10 days old counts toward the 28-day total only.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from ftl_models.data_models import DutyLog, FTLCounters
from ftl_core.errors import FTLInputError
from ftl_core.parameters import FTLConfig, DEFAULT_CONFIG
from ftl_core.time_utils import parse_date, to_reference_date, window_start

logger = logging.getLogger(__name__)

# Trailing window lengths in days: today, 7-day, 28-day
WINDOWS = (1, 7, 28)


def coerce_logs(logs: Optional[Iterable]) -> List[DutyLog]:
    """Accept DutyLog instances or storage mappings; None means no history."""
    if logs is None:
        return []
    if isinstance(logs, (str, bytes, Mapping)) or not isinstance(logs, Iterable):
        raise FTLInputError(f"Expected a sequence of duty logs, got {type(logs).__name__}")

    coerced = []
    for entry in logs:
        if isinstance(entry, DutyLog):
            coerced.append(entry)
        elif isinstance(entry, Mapping):
            coerced.append(DutyLog.from_dict(entry))
        else:
            raise FTLInputError(f"Duty log must be a DutyLog or mapping, got {type(entry).__name__}")
    return coerced


def filter_logs_for_crew(logs: Optional[Iterable], crew_id: str) -> List[DutyLog]:
    return [log for log in coerce_logs(logs) if log.crew_id == crew_id]


def log_minutes(log: DutyLog) -> float:
    """Flight minutes of a log, unreadable or negative values counting as zero."""
    try:
        minutes = float(log.flight_minutes or 0)
    except (TypeError, ValueError):
        logger.debug(f"[{log.flight_id}] Unreadable flight_minutes {log.flight_minutes!r}")
        return 0.0
    return max(0.0, minutes)


def validate_candidate_minutes(minutes: Any) -> float:
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise FTLInputError(f"Candidate flight minutes must be a number, got {minutes!r}")
    if minutes < 0:
        raise FTLInputError(f"Candidate flight minutes cannot be negative: {minutes}")
    return float(minutes)


def in_window(log_date: Optional[date], reference: date, window_days: int) -> bool:
    if log_date is None:
        return False
    return window_start(reference, window_days) <= log_date <= reference


def logs_in_window(logs: Optional[Iterable], reference_date: Any, window_days: int,
                   config: FTLConfig = None) -> List[DutyLog]:
    """Logs dated within the trailing window; undated logs are dropped."""
    config = config or DEFAULT_CONFIG
    reference = to_reference_date(reference_date, config.tz)
    return [
        log for log in coerce_logs(logs)
        if in_window(parse_date(log.date), reference, window_days)
    ]


def sum_flight_minutes_by_window(logs: List[DutyLog], reference: date) -> Dict[int, float]:
    """Fold every log into the window buckets it belongs to."""
    buckets = {days: 0.0 for days in WINDOWS}
    for log in logs:
        log_date = parse_date(log.date)
        if log_date is None:
            logger.debug(f"[{log.flight_id}] Skipping log without a readable date")
            continue
        age_days = (reference - log_date).days
        if age_days < 0 or age_days >= max(WINDOWS):
            continue
        minutes = log_minutes(log)
        for days in WINDOWS:
            if age_days < days:
                buckets[days] += minutes
    return buckets


def aggregate_flight_hours(
    logs: Optional[Iterable],
    reference_date: Any,
    candidate_minutes: float = 0,
    candidate_date: Any = None,
    config: FTLConfig = None,
) -> FTLCounters:
    """
    Cumulative flight hours today / 7 days / 28 days including the candidate.

    Args:
        logs: History of one crew member (the caller filters by crew)
        reference_date: Day the windows end on (date, datetime or ISO string)
        candidate_minutes: Block time of the flight being evaluated
        candidate_date: Day of the candidate flight, the reference day when omitted

    Returns:
        FTLCounters in hours. `duty_hours_today` sums the spans of the
        reference day's logs and excludes the candidate.
    """
    config = config or DEFAULT_CONFIG
    reference = to_reference_date(reference_date, config.tz)
    candidate_minutes = validate_candidate_minutes(candidate_minutes)
    history = coerce_logs(logs)

    buckets = sum_flight_minutes_by_window(history, reference)

    if candidate_minutes:
        day = reference if candidate_date is None else to_reference_date(candidate_date, config.tz)
        for days in WINDOWS:
            if in_window(day, reference, days):
                buckets[days] += candidate_minutes

    duty_hours_today = sum(
        log.duty_hours for log in history if parse_date(log.date) == reference
    )

    return FTLCounters(
        flight_hours_today=buckets[1] / 60,
        flight_hours_7d=buckets[7] / 60,
        flight_hours_28d=buckets[28] / 60,
        duty_hours_today=duty_hours_today,
    )
