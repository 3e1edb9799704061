"""
FTL Data Models
===============

Input records and verdict structures shared by the compliance engine.
"""

from ftl_models.data_models import (
    RiskLevel,
    CurrencyStatus,
    CrewStatus,
    DutyLog,
    FlightCandidate,
    CrewMember,
    Qualifications,
    FTLCounters,
    FTLMargins,
    LimitCheck,
    DutyWindowResult,
    ComplianceResult,
    EligibilityResult,
)

__all__ = [
    # Enums
    'RiskLevel',
    'CurrencyStatus',
    'CrewStatus',
    # Inputs
    'DutyLog',
    'FlightCandidate',
    'CrewMember',
    'Qualifications',
    # Results
    'FTLCounters',
    'FTLMargins',
    'LimitCheck',
    'DutyWindowResult',
    'ComplianceResult',
    'EligibilityResult',
]
