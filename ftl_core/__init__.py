"""
FTL Compliance Engine
=====================

Main exports for flight time limitation checks and crew eligibility.
"""

from ftl_core.parameters import (
    FTLLimits,
    RiskThresholds,
    CurrencyWindows,
    DutyEstimation,
    FTLConfig,
    DEFAULT_CONFIG,
)
from ftl_core.errors import FTLInputError

from ftl_core.aggregator import (
    aggregate_flight_hours,
    filter_logs_for_crew,
    logs_in_window,
)
from ftl_core.duty_window import validate_duty_window
from ftl_core.compliance import FTLComplianceEvaluator, evaluate
from ftl_core.qualifications import (
    get_expiry_status,
    get_sim_check_status,
    crew_member_status,
)
from ftl_core.eligibility import CrewEligibilityValidator, validate_crew_for_flight

__all__ = [
    # Parameters
    'FTLLimits',
    'RiskThresholds',
    'CurrencyWindows',
    'DutyEstimation',
    'FTLConfig',
    'DEFAULT_CONFIG',
    # Errors
    'FTLInputError',
    # Time windows & duty
    'aggregate_flight_hours',
    'filter_logs_for_crew',
    'logs_in_window',
    'validate_duty_window',
    # Compliance
    'FTLComplianceEvaluator',
    'evaluate',
    # Currency & eligibility
    'get_expiry_status',
    'get_sim_check_status',
    'crew_member_status',
    'CrewEligibilityValidator',
    'validate_crew_for_flight',
]
