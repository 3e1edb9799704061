"""
Configuration & Parameters for the FTL Engine
=============================================

All configuration dataclasses for flight-time limitation checks:
- FTLLimits: regulatory ceilings (DGAC / OPS 1 Subpart Q)
- RiskThresholds: usage ratios separating ok / warning / critical
- CurrencyWindows: renewal windows for medical, license and sim check
- DutyEstimation: report/release padding around a flight
- FTLConfig: master configuration container

References: EU-OPS 1 Subpart Q (OPS 1.1100 - 1.1135), DGAC arrêté du 25 mars 2008
"""

from dataclasses import dataclass, field
from typing import Optional

import pytz

from ftl_models.data_models import RiskLevel


@dataclass
class FTLLimits:
    """Regulatory ceilings, all in hours"""

    # Flight (block) time - OPS 1.1100
    max_flight_hours_per_day: float = 8.0
    max_flight_hours_7_days: float = 60.0
    max_flight_hours_28_days: float = 190.0

    # Duty time - OPS 1.1105
    max_duty_hours_per_day: float = 13.0

    # Rest - OPS 1.1110
    min_rest_hours: float = 10.0

    def __post_init__(self):
        assert self.max_flight_hours_per_day > 0, "Daily flight limit must be positive"
        assert self.max_duty_hours_per_day >= self.max_flight_hours_per_day, \
            "Duty limit cannot be below the flight limit"
        assert self.max_flight_hours_7_days > 0
        assert self.max_flight_hours_28_days >= self.max_flight_hours_7_days, \
            "28-day limit cannot be below the 7-day limit"
        assert self.min_rest_hours >= 0


@dataclass
class RiskThresholds:
    """
    Share of a ceiling at which a compliant assignment is flagged.

    A ratio at or above `warning` is a warning, at or above `critical` is
    critical. Ratios above 1.0 are violations and never reach `classify`
    through the evaluator.
    """

    warning: float = 0.80
    critical: float = 0.90

    def __post_init__(self):
        assert 0 < self.warning <= self.critical <= 1.0, \
            "Thresholds must satisfy 0 < warning <= critical <= 1"

    def classify(self, ratio: float) -> RiskLevel:
        if ratio > 1.0:
            return RiskLevel.VIOLATION
        if ratio >= self.critical:
            return RiskLevel.CRITICAL
        if ratio >= self.warning:
            return RiskLevel.WARNING
        return RiskLevel.OK


@dataclass
class CurrencyWindows:
    """Renewal windows, in days"""

    # Medical / license: warn when this close to expiry
    expiry_warning_days: int = 30

    # Sim check is dated by when it was passed (6-month validity)
    sim_check_valid_days: int = 150
    sim_check_expired_days: int = 180

    def __post_init__(self):
        assert self.expiry_warning_days >= 0
        assert 0 < self.sim_check_valid_days < self.sim_check_expired_days, \
            "Sim check valid window must end before expiry"


@dataclass
class DutyEstimation:
    """Duty padding used when a flight carries no explicit duty window"""

    report_minutes_before_departure: int = 60   # briefing
    release_minutes_after_arrival: int = 30     # post-flight

    def __post_init__(self):
        assert self.report_minutes_before_departure >= 0
        assert self.release_minutes_after_arrival >= 0


@dataclass
class FTLConfig:
    """Master configuration container"""
    limits: FTLLimits = field(default_factory=FTLLimits)
    risk_thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    currency_windows: CurrencyWindows = field(default_factory=CurrencyWindows)
    duty_estimation: DutyEstimation = field(default_factory=DutyEstimation)

    # Zone in which instants are turned into calendar days
    reference_timezone: str = 'UTC'

    def __post_init__(self):
        try:
            pytz.timezone(self.reference_timezone)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown reference timezone: {self.reference_timezone}")

    @property
    def tz(self):
        return pytz.timezone(self.reference_timezone)

    @classmethod
    def default_config(cls, reference_timezone: Optional[str] = None):
        return cls(reference_timezone=reference_timezone or 'UTC')

    @classmethod
    def conservative_config(cls, reference_timezone: Optional[str] = None):
        """
        Earlier flagging for safety-first planning.
        - Regulatory ceilings unchanged
        - Warning from 70 %, critical from 85 % of a ceiling
        - Currency renewal flagged 60 days ahead, sim check from 4 months
        - Longer report/release padding
        """
        return cls(
            risk_thresholds=RiskThresholds(warning=0.70, critical=0.85),
            currency_windows=CurrencyWindows(
                expiry_warning_days=60,
                sim_check_valid_days=120,
            ),
            duty_estimation=DutyEstimation(
                report_minutes_before_departure=75,
                release_minutes_after_arrival=45,
            ),
            reference_timezone=reference_timezone or 'UTC',
        )


DEFAULT_CONFIG = FTLConfig.default_config()
