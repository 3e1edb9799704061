"""
Crew Currency
=============

Classifies medical certificates, licenses and simulator checks as valid,
expiring or expired at a reference date, and reduces them to the status
badge shown for a crew member.
"""

from typing import Any, Optional

from ftl_models.data_models import (
    ComplianceResult,
    CrewMember,
    CrewStatus,
    CurrencyStatus,
    Qualifications,
    RiskLevel,
)
from ftl_core.errors import FTLInputError
from ftl_core.parameters import FTLConfig, DEFAULT_CONFIG
from ftl_core.time_utils import days_between, parse_date, to_reference_date


def get_expiry_status(expiry_date: Any, reference_date: Any,
                      config: FTLConfig = None) -> CurrencyStatus:
    """
    Status of a document that expires on `expiry_date`.

    Missing or unreadable dates count as expired. Expiring on the reference
    day itself is still "expiring".
    """
    config = config or DEFAULT_CONFIG
    expiry = parse_date(expiry_date)
    if expiry is None:
        return CurrencyStatus.EXPIRED
    remaining = days_between(to_reference_date(reference_date, config.tz), expiry)
    if remaining < 0:
        return CurrencyStatus.EXPIRED
    if remaining <= config.currency_windows.expiry_warning_days:
        return CurrencyStatus.EXPIRING
    return CurrencyStatus.VALID


def get_sim_check_status(last_sim_check: Any, reference_date: Any,
                         config: FTLConfig = None) -> CurrencyStatus:
    """Status of the last simulator check, which is dated by when it was passed."""
    config = config or DEFAULT_CONFIG
    windows = config.currency_windows
    passed = parse_date(last_sim_check)
    if passed is None:
        return CurrencyStatus.EXPIRED
    elapsed = days_between(passed, to_reference_date(reference_date, config.tz))
    if elapsed >= windows.sim_check_expired_days:
        return CurrencyStatus.EXPIRED
    if elapsed > windows.sim_check_valid_days:
        return CurrencyStatus.EXPIRING
    return CurrencyStatus.VALID


def has_expired_currency(qualifications: Optional[Qualifications], reference_date: Any,
                         config: FTLConfig = None) -> bool:
    if qualifications is None:
        return True
    return CurrencyStatus.EXPIRED in (
        get_expiry_status(qualifications.medical_expiry, reference_date, config),
        get_expiry_status(qualifications.license_expiry, reference_date, config),
        get_sim_check_status(qualifications.last_sim_check, reference_date, config),
    )


def crew_member_status(
    member: Optional[CrewMember],
    qualifications: Optional[Qualifications],
    ftl_result: Optional[ComplianceResult] = None,
    *,
    reference_date: Any,
    config: FTLConfig = None,
) -> CrewStatus:
    """
    Badge status of a crew member.

    inactive  - member missing or not active
    critical  - medical, license or sim check expired at `reference_date`
    warning   - FTL risk critical (or already violated)
    ok        - otherwise

    `reference_date` is keyword-only so it cannot be mistaken for the FTL result.
    """
    if ftl_result is not None and not isinstance(ftl_result, ComplianceResult):
        raise FTLInputError(f"Expected ComplianceResult, got {type(ftl_result).__name__}")
    if member is None or not member.active:
        return CrewStatus.INACTIVE
    if has_expired_currency(qualifications, reference_date, config):
        return CrewStatus.CRITICAL
    if ftl_result is not None and ftl_result.risk_level in (RiskLevel.CRITICAL, RiskLevel.VIOLATION):
        return CrewStatus.WARNING
    return CrewStatus.OK
