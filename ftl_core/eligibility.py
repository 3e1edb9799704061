"""
Crew Eligibility Validation
===========================

Decides whether a crew member may be assigned to a flight by running an
ordered list of independent checks. Each check yields at most one finding,
either a blocker (hard stop) or a warning (informational). Warnings never
affect validity.

Order: member present, qualifications present, member active, medical,
license, sim check, type rating, FTL.
"""

from collections.abc import Iterable
from datetime import timedelta
from typing import Any, List, NamedTuple, Optional
import logging

from ftl_models.data_models import (
    ComplianceResult,
    CrewMember,
    CurrencyStatus,
    EligibilityResult,
    FlightCandidate,
    Qualifications,
    RiskLevel,
)
from ftl_core.aggregator import coerce_logs
from ftl_core.compliance import FTLComplianceEvaluator
from ftl_core.errors import FTLInputError
from ftl_core.parameters import FTLConfig, DEFAULT_CONFIG
from ftl_core.qualifications import get_expiry_status, get_sim_check_status
from ftl_core.time_utils import parse_date, require_instant, to_reference_date

logger = logging.getLogger(__name__)


class Finding(NamedTuple):
    blocking: bool
    message: str


def blocker(message: str) -> Finding:
    return Finding(True, message)


def warning(message: str) -> Finding:
    return Finding(False, message)


def _fmt_date(value: Any) -> str:
    day = parse_date(value)
    return day.isoformat() if day else 'inconnue'


class CrewEligibilityValidator:
    """Combine currency checks with the FTL verdict for one assignment"""

    def __init__(self, config: FTLConfig = None):
        self.config = config or DEFAULT_CONFIG
        self.ftl_evaluator = FTLComplianceEvaluator(self.config)

    def validate(
        self,
        member: Optional[CrewMember],
        qualifications: Optional[Qualifications],
        prior_logs: Optional[Iterable],
        flight: Optional[FlightCandidate],
        reference_date: Any = None,
    ) -> EligibilityResult:
        """
        Validate a crew member for a flight.

        Args:
            member: Crew member, None when the record is missing
            qualifications: Currency record, None when missing
            prior_logs: Duty history; entries of other crew are ignored
            flight: Candidate flight; its departure day is the reference date
            reference_date: Explicit reference, required only without a flight

        Returns:
            EligibilityResult with ordered blockers and warnings
        """
        self._check_types(member, qualifications, flight)
        if reference_date is None:
            if flight is None or flight.departure_time is None:
                raise FTLInputError("A flight with a departure time or a reference date is required")
            reference_date = flight.departure_time
        reference = to_reference_date(reference_date, self.config.tz)

        findings: List[Optional[Finding]] = [
            self.check_member_present(member),
            self.check_qualifications_present(qualifications),
            self.check_active(member),
        ]
        if member is not None and qualifications is not None:
            findings += [
                self.check_medical(qualifications, reference),
                self.check_license(qualifications, reference),
                self.check_sim_check(qualifications, reference),
                self.check_type_rating(qualifications, flight),
            ]

        ftl = None
        if flight is not None:
            ftl = self.evaluate_ftl(member, prior_logs, flight, reference)
            findings.append(self.check_ftl(ftl))

        result = EligibilityResult(ftl=ftl)
        for finding in findings:
            if finding is None:
                continue
            (result.blockers if finding.blocking else result.warnings).append(finding.message)

        if result.blockers:
            member_id = member.id if member is not None else '?'
            logger.info(f"[{member_id}] Not eligible: {'; '.join(result.blockers)}")
        return result

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check_member_present(self, member: Optional[CrewMember]) -> Optional[Finding]:
        if member is None:
            return blocker("Membre introuvable")
        return None

    def check_qualifications_present(self, qualifications: Optional[Qualifications]) -> Optional[Finding]:
        if qualifications is None:
            return blocker("Qualifications manquantes")
        return None

    def check_active(self, member: Optional[CrewMember]) -> Optional[Finding]:
        if member is not None and not member.active:
            return blocker("Membre inactif")
        return None

    def check_medical(self, qualifications: Qualifications, reference) -> Optional[Finding]:
        status = get_expiry_status(qualifications.medical_expiry, reference, self.config)
        if status == CurrencyStatus.EXPIRED:
            return blocker(f"Visite médicale expirée ({_fmt_date(qualifications.medical_expiry)})")
        if status == CurrencyStatus.EXPIRING:
            return warning(f"Visite médicale expire bientôt ({_fmt_date(qualifications.medical_expiry)})")
        return None

    def check_license(self, qualifications: Qualifications, reference) -> Optional[Finding]:
        status = get_expiry_status(qualifications.license_expiry, reference, self.config)
        if status == CurrencyStatus.EXPIRED:
            return blocker(f"Licence expirée ({_fmt_date(qualifications.license_expiry)})")
        if status == CurrencyStatus.EXPIRING:
            return warning(f"Licence expire bientôt ({_fmt_date(qualifications.license_expiry)})")
        return None

    def check_sim_check(self, qualifications: Qualifications, reference) -> Optional[Finding]:
        status = get_sim_check_status(qualifications.last_sim_check, reference, self.config)
        if status == CurrencyStatus.EXPIRED:
            last = parse_date(qualifications.last_sim_check)
            return blocker(f"Sim check expiré (dernier : {last.isoformat() if last else 'jamais'})")
        if status == CurrencyStatus.EXPIRING:
            return warning(f"Sim check à renouveler bientôt ({_fmt_date(qualifications.last_sim_check)})")
        return None

    def check_type_rating(self, qualifications: Qualifications,
                          flight: Optional[FlightCandidate]) -> Optional[Finding]:
        if flight is None or not flight.aircraft_type:
            return None
        if not qualifications.has_type_rating(flight.aircraft_type):
            return blocker(f"Qualification type manquante : {flight.aircraft_type}")
        return None

    def check_ftl(self, ftl: ComplianceResult) -> Optional[Finding]:
        if not ftl.compliant:
            return blocker(f"FTL non conforme : {ftl.reason}")
        if ftl.risk_level == RiskLevel.CRITICAL:
            return warning(f"FTL critique : {self._describe(ftl, RiskLevel.CRITICAL)}")
        if ftl.risk_level == RiskLevel.WARNING:
            return warning(f"FTL proche limite : {self._describe(ftl, RiskLevel.WARNING)}")
        return None

    # ------------------------------------------------------------------
    # FTL
    # ------------------------------------------------------------------

    def evaluate_ftl(self, member: Optional[CrewMember], prior_logs: Optional[Iterable],
                     flight: FlightCandidate, reference) -> ComplianceResult:
        logs = coerce_logs(prior_logs)
        if member is not None:
            logs = [log for log in logs if log.crew_id == member.id]
        departure = require_instant(flight.departure_time, 'departure_time')
        require_instant(flight.arrival_time, 'arrival_time')
        duty_start, duty_end = self.duty_window(flight)
        return self.ftl_evaluator.evaluate(
            logs, reference, flight.flight_minutes, duty_start, duty_end,
            candidate_date=departure,
        )

    def duty_window(self, flight: FlightCandidate):
        """Explicit duty window of the flight, or report/release padding around it."""
        if flight.has_duty_window:
            return (require_instant(flight.duty_start, 'duty_start'),
                    require_instant(flight.duty_end, 'duty_end'))
        estimation = self.config.duty_estimation
        departure = require_instant(flight.departure_time, 'departure_time')
        arrival = require_instant(flight.arrival_time, 'arrival_time')
        duty_start = departure - timedelta(minutes=estimation.report_minutes_before_departure) \
            if departure is not None else None
        duty_end = arrival + timedelta(minutes=estimation.release_minutes_after_arrival) \
            if arrival is not None and duty_start is not None else None
        return duty_start, duty_end

    @staticmethod
    def _describe(ftl: ComplianceResult, risk: RiskLevel) -> str:
        return ', '.join(f"{c.label} {c.pct}%" for c in ftl.checks_at(risk))

    @staticmethod
    def _check_types(member, qualifications, flight):
        if member is not None and not isinstance(member, CrewMember):
            raise FTLInputError(f"member must be a CrewMember, got {type(member).__name__}")
        if qualifications is not None and not isinstance(qualifications, Qualifications):
            raise FTLInputError(
                f"qualifications must be Qualifications, got {type(qualifications).__name__}"
            )
        if flight is not None and not isinstance(flight, FlightCandidate):
            raise FTLInputError(f"flight must be a FlightCandidate, got {type(flight).__name__}")


def validate_crew_for_flight(
    member: Optional[CrewMember],
    qualifications: Optional[Qualifications],
    prior_logs: Optional[Iterable],
    flight: Optional[FlightCandidate],
    reference_date: Any = None,
    config: FTLConfig = None,
) -> EligibilityResult:
    """Functional entry point; see CrewEligibilityValidator.validate"""
    return CrewEligibilityValidator(config).validate(
        member, qualifications, prior_logs, flight, reference_date,
    )
