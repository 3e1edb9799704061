"""
data_models.py - FTL Data Structures
====================================

Data models for duty history, candidate flights, crew currency and the
verdicts produced by the compliance engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union
from enum import Enum


DateLike = Union[str, date, datetime, None]


# ============================================================================
# ENUMS
# ============================================================================

class RiskLevel(Enum):
    """Proximity to a regulatory ceiling, in increasing severity"""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    VIOLATION = "violation"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.OK: 0,
    RiskLevel.WARNING: 1,
    RiskLevel.CRITICAL: 2,
    RiskLevel.VIOLATION: 3,
}


class CurrencyStatus(Enum):
    """Currency of a medical, license or sim check at a reference date"""
    VALID = "valid"
    EXPIRING = "expiring"   # still valid, renewal window open
    EXPIRED = "expired"


class CrewStatus(Enum):
    """Overall badge status of a crew member"""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    INACTIVE = "inactive"


# ============================================================================
# INPUT STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class DutyLog:
    """
    One completed duty period of one crew member.

    Logs are written by completed-flight logging and never modified; the
    engine only reads them.

    Attributes
    ----------
    crew_id : str
        Crew member the duty belongs to.
    flight_id : str
        Flight operated during the duty.
    date : str or date
        Calendar day the duty is booked on ('YYYY-MM-DD').
    duty_start_utc, duty_end_utc : datetime
        Report and release instants. Either may be missing on legacy records.
    flight_minutes : float
        Airborne time in minutes, never more than the duty span.
    """
    crew_id: str
    flight_id: str
    date: DateLike
    duty_start_utc: Optional[datetime] = None
    duty_end_utc: Optional[datetime] = None
    flight_minutes: float = 0

    @property
    def has_duty_window(self) -> bool:
        return self.duty_start_utc is not None and self.duty_end_utc is not None

    @property
    def duty_hours(self) -> float:
        """Elapsed duty span in hours (0 when the window is incomplete)"""
        if not self.has_duty_window:
            return 0.0
        return max(0.0, (self.duty_end_utc - self.duty_start_utc).total_seconds() / 3600)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DutyLog':
        """
        Build a log from a storage document.

        Instants may be datetimes, ISO strings or epoch milliseconds. Fields
        that cannot be read are left empty so the log simply stops
        contributing to the affected counters.
        """
        # Lazy import to avoid circular dependency with ftl_core
        from ftl_core.time_utils import parse_instant

        return cls(
            crew_id=data.get('crew_id'),
            flight_id=data.get('flight_id'),
            date=data.get('date'),
            duty_start_utc=parse_instant(data.get('duty_start_utc')),
            duty_end_utc=parse_instant(data.get('duty_end_utc')),
            flight_minutes=data.get('flight_minutes') or 0,
        )


@dataclass
class FlightCandidate:
    """Flight under evaluation for a crew assignment"""
    departure_time: datetime
    arrival_time: datetime
    aircraft_type: Optional[str] = None
    flight_id: Optional[str] = None

    # Explicit duty window; derived from departure/arrival when absent
    duty_start: Optional[datetime] = None
    duty_end: Optional[datetime] = None

    @property
    def flight_minutes(self) -> int:
        """Block time in whole minutes (0 when either block time is unreadable)"""
        from ftl_core.time_utils import parse_instant

        departure = parse_instant(self.departure_time)
        arrival = parse_instant(self.arrival_time)
        if departure is None or arrival is None:
            return 0
        return max(0, round((arrival - departure).total_seconds() / 60))

    @property
    def has_duty_window(self) -> bool:
        return self.duty_start is not None and self.duty_end is not None


@dataclass
class CrewMember:
    id: str
    active: bool = True
    role: Optional[str] = None   # e.g. "PIC", "FO"
    name: Optional[str] = None


@dataclass
class Qualifications:
    """Currency dates and type ratings of a crew member"""
    medical_expiry: DateLike = None
    license_expiry: DateLike = None
    last_sim_check: DateLike = None
    type_ratings: FrozenSet[str] = frozenset()

    def __post_init__(self):
        # Storage hands ratings back as lists
        if not isinstance(self.type_ratings, frozenset):
            self.type_ratings = frozenset(self.type_ratings or ())

    def has_type_rating(self, aircraft_type: str) -> bool:
        return aircraft_type in self.type_ratings


# ============================================================================
# RESULT STRUCTURES
# ============================================================================

@dataclass
class FTLCounters:
    """Cumulative flight/duty hours including the candidate flight"""
    flight_hours_today: float = 0.0
    flight_hours_7d: float = 0.0
    flight_hours_28d: float = 0.0
    duty_hours_today: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'duty_hours_today': round(self.duty_hours_today, 2),
            'flight_hours_today': round(self.flight_hours_today, 2),
            'flight_hours_7d': round(self.flight_hours_7d, 2),
            'flight_hours_28d': round(self.flight_hours_28d, 2),
        }


@dataclass
class FTLMargins:
    """Remaining hours before each ceiling (negative once exceeded)"""
    ft_today_remaining: float
    duty_today_remaining: float
    ft_7d_remaining: float
    ft_28d_remaining: float
    rest_hours: Optional[float] = None   # actual rest before the candidate duty

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            'duty_today_remaining': round(self.duty_today_remaining, 2),
            'ft_today_remaining': round(self.ft_today_remaining, 2),
            'ft_7d_remaining': round(self.ft_7d_remaining, 2),
            'ft_28d_remaining': round(self.ft_28d_remaining, 2),
            'rest_hours': None if self.rest_hours is None else round(self.rest_hours, 2),
        }


@dataclass
class LimitCheck:
    """Usage of one regulatory ceiling"""
    id: str
    label: str
    used: float
    limit: float
    risk: RiskLevel = RiskLevel.OK

    @property
    def ratio(self) -> float:
        return self.used / self.limit if self.limit else 0.0

    @property
    def remaining(self) -> float:
        return self.limit - self.used

    @property
    def pct(self) -> int:
        return min(100, round(self.ratio * 100))

    @property
    def exceeded(self) -> bool:
        return self.used > self.limit

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'used': round(self.used, 2),
            'limit': self.limit,
            'unit': 'h',
            'risk': self.risk.value,
            'pct': self.pct,
        }


@dataclass
class DutyWindowResult:
    """Outcome of the daily duty-span and minimum-rest rules"""
    duty_hours: Optional[float] = None      # None when no full window was given
    duty_start: Optional[datetime] = None
    duty_end: Optional[datetime] = None
    duty_compliant: bool = True
    duty_reason: Optional[str] = None
    rest_hours: Optional[float] = None      # None when no prior duty exists
    rest_compliant: bool = True
    rest_reason: Optional[str] = None

    @property
    def compliant(self) -> bool:
        return self.duty_compliant and self.rest_compliant


@dataclass
class ComplianceResult:
    """
    FTL verdict for a candidate flight.

    `reason` names the first violated rule in priority order; every violated
    rule is listed in `violations`.
    """
    compliant: bool
    risk_level: RiskLevel
    counters: FTLCounters
    margins: FTLMargins
    reason: Optional[str] = None
    checks: List[LimitCheck] = field(default_factory=list)
    violations: List[str] = field(default_factory=list)

    def checks_at(self, risk: RiskLevel) -> List[LimitCheck]:
        return [c for c in self.checks if c.risk == risk]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'compliant': self.compliant,
            'reason': self.reason or '',
            'risk_level': self.risk_level.value,
            'counters': self.counters.to_dict(),
            'margins': self.margins.to_dict(),
            'checks': [c.to_dict() for c in self.checks],
        }


@dataclass
class EligibilityResult:
    """Hard blockers and soft warnings for assigning a crew member"""
    blockers: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    ftl: Optional[ComplianceResult] = None

    @property
    def valid(self) -> bool:
        return not self.blockers

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'blockers': list(self.blockers),
            'warnings': list(self.warnings),
        }
