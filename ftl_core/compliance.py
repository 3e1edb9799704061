"""
FTL Compliance Evaluation
=========================

Validates a candidate flight against DGAC / OPS 1 Subpart Q flight time
limitations for a small-aircraft operator:

    Max flight time : 8 h per calendar day
    Max duty time   : 13 h per duty period
    Min rest        : 10 h between duty periods
    Max flight time : 60 h over 7 rolling days
    Max flight time : 190 h over 28 rolling days

Ceilings are inclusive: a limit is violated only when strictly exceeded.

References: EU-OPS 1.1100 - 1.1110
"""

from collections.abc import Iterable
from typing import Any, List, Optional
import logging

from ftl_models.data_models import (
    ComplianceResult,
    DutyWindowResult,
    FTLCounters,
    FTLMargins,
    LimitCheck,
    RiskLevel,
)
from ftl_core.aggregator import aggregate_flight_hours
from ftl_core.duty_window import validate_duty_window
from ftl_core.parameters import FTLConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


class FTLComplianceEvaluator:
    """Combine rolling flight-hour totals and duty-window rules into one verdict"""

    def __init__(self, config: FTLConfig = None):
        self.config = config or DEFAULT_CONFIG

    def evaluate(
        self,
        logs: Optional[Iterable],
        reference_date: Any,
        candidate_flight_minutes: float = 0,
        candidate_duty_start: Any = None,
        candidate_duty_end: Any = None,
        candidate_date: Any = None,
    ) -> ComplianceResult:
        """
        Evaluate FTL compliance of a candidate flight.

        Args:
            logs: Duty history of the crew member
            reference_date: Day of the candidate flight (date, datetime or ISO string)
            candidate_flight_minutes: Block time of the candidate flight
            candidate_duty_start: Report instant of the candidate duty (optional)
            candidate_duty_end: Release instant of the candidate duty (optional)
            candidate_date: Day of the candidate flight when it differs from the
                reference day; its minutes then stay out of "today"

        Returns:
            ComplianceResult with counters and margins in hours. A
            non-compliant verdict is a normal result, not an exception.
        """
        limits = self.config.limits
        counters = aggregate_flight_hours(
            logs, reference_date, candidate_flight_minutes,
            candidate_date=candidate_date, config=self.config,
        )

        duty = None
        if candidate_duty_start is not None or candidate_duty_end is not None:
            duty = validate_duty_window(
                logs, reference_date, candidate_duty_start, candidate_duty_end,
                config=self.config,
            )
            if duty.duty_hours is not None:
                counters.duty_hours_today = duty.duty_hours

        ft_day = self._check('ft_day', 'FT journalier',
                             counters.flight_hours_today, limits.max_flight_hours_per_day)
        ft_7d = self._check('ft_7d', 'FT 7 jours',
                            counters.flight_hours_7d, limits.max_flight_hours_7_days)
        ft_28d = self._check('ft_28d', 'FT 28 jours',
                             counters.flight_hours_28d, limits.max_flight_hours_28_days)
        duty_day = None
        if duty is not None and duty.duty_hours is not None:
            duty_day = self._check('duty_day', 'Duty journalier',
                                   duty.duty_hours, limits.max_duty_hours_per_day,
                                   exceeded=not duty.duty_compliant)

        violations = self._violations(ft_day, duty_day, duty, ft_7d, ft_28d)
        checks = [c for c in (duty_day, ft_day, ft_7d, ft_28d) if c is not None]

        if violations:
            risk_level = RiskLevel.VIOLATION
        else:
            risk_level = max((c.risk for c in checks), key=lambda r: r.rank)

        result = ComplianceResult(
            compliant=not violations,
            risk_level=risk_level,
            reason=violations[0] if violations else None,
            counters=counters,
            margins=self._margins(counters, duty),
            checks=checks,
            violations=violations,
        )

        if violations:
            logger.info(f"FTL violation on {reference_date}: {' | '.join(violations)}")
        else:
            logger.debug(
                f"FTL {risk_level.value} on {reference_date}: "
                f"{counters.flight_hours_today:.2f}h today, "
                f"{counters.flight_hours_7d:.2f}h 7d, {counters.flight_hours_28d:.2f}h 28d"
            )
        return result

    def _check(self, check_id: str, label: str, used: float, limit: float,
               exceeded: Optional[bool] = None) -> LimitCheck:
        check = LimitCheck(id=check_id, label=label, used=used, limit=limit)
        if exceeded is None:
            exceeded = check.exceeded
        check.risk = RiskLevel.VIOLATION if exceeded else self.config.risk_thresholds.classify(
            min(check.ratio, 1.0)
        )
        return check

    def _violations(self, ft_day: LimitCheck, duty_day: Optional[LimitCheck],
                    duty: Optional[DutyWindowResult], ft_7d: LimitCheck,
                    ft_28d: LimitCheck) -> List[str]:
        """Violated rules in reporting priority order"""
        violations = []
        if ft_day.risk == RiskLevel.VIOLATION:
            violations.append(
                f"Temps de vol journalier dépassé : {ft_day.used:.1f}h / {ft_day.limit:g}h max"
            )
        if duty is not None and not duty.duty_compliant:
            violations.append(duty.duty_reason)
        if duty is not None and not duty.rest_compliant:
            violations.append(duty.rest_reason)
        if ft_7d.risk == RiskLevel.VIOLATION:
            violations.append(f"Limite 7j dépassée : {ft_7d.used:.1f}h / {ft_7d.limit:g}h max")
        if ft_28d.risk == RiskLevel.VIOLATION:
            violations.append(f"Limite 28j dépassée : {ft_28d.used:.1f}h / {ft_28d.limit:g}h max")
        return violations

    def _margins(self, counters: FTLCounters, duty: Optional[DutyWindowResult]) -> FTLMargins:
        limits = self.config.limits
        return FTLMargins(
            ft_today_remaining=limits.max_flight_hours_per_day - counters.flight_hours_today,
            duty_today_remaining=limits.max_duty_hours_per_day - counters.duty_hours_today,
            ft_7d_remaining=limits.max_flight_hours_7_days - counters.flight_hours_7d,
            ft_28d_remaining=limits.max_flight_hours_28_days - counters.flight_hours_28d,
            rest_hours=duty.rest_hours if duty is not None else None,
        )


def evaluate(
    logs: Optional[Iterable],
    reference_date: Any,
    candidate_flight_minutes: float = 0,
    candidate_duty_start: Any = None,
    candidate_duty_end: Any = None,
    candidate_date: Any = None,
    config: FTLConfig = None,
) -> ComplianceResult:
    """Functional entry point; see FTLComplianceEvaluator.evaluate"""
    return FTLComplianceEvaluator(config).evaluate(
        logs, reference_date, candidate_flight_minutes,
        candidate_duty_start, candidate_duty_end, candidate_date,
    )
