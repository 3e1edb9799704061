"""
Crew Eligibility Validator Tests
================================

Currency checks combined with the FTL verdict for one assignment. Each
check must be independent: breaking one input produces exactly one blocker.

Run: python -m pytest tests/test_eligibility.py -v
"""

from dataclasses import replace
from datetime import date, datetime, timedelta
import pytz
import pytest

from ftl_core import CrewEligibilityValidator, FTLInputError, validate_crew_for_flight
from ftl_models.data_models import (
    CrewMember,
    DutyLog,
    FlightCandidate,
    Qualifications,
)


# ============================================================================
# HELPERS
# ============================================================================

UTC = pytz.utc

VALID_MEMBER = CrewMember(id='crew-001', active=True, role='PIC', name='Dupont')
VALID_QUALS = Qualifications(
    medical_expiry='2027-01-01',
    license_expiry='2027-06-01',
    last_sim_check='2025-12-01',
    type_ratings=['C208'],
)
VALID_FLIGHT = FlightCandidate(
    flight_id='fl-001',
    departure_time=datetime(2026, 3, 15, 8, 0, tzinfo=UTC),
    arrival_time=datetime(2026, 3, 15, 8, 45, tzinfo=UTC),
    aircraft_type='C208',
)


def make_log(day, flight_minutes, crew_id='crew-001', duty_start_hour=7, duty_hours=4):
    start = datetime(day.year, day.month, day.day, duty_start_hour, tzinfo=UTC)
    return DutyLog(
        crew_id=crew_id,
        flight_id=f'flight-{day.isoformat()}-{duty_start_hour}',
        date=day.isoformat(),
        duty_start_utc=start,
        duty_end_utc=start + timedelta(hours=duty_hours),
        flight_minutes=flight_minutes,
    )


def has(items, keyword):
    return any(keyword in item for item in items)


# ============================================================================
# TESTS
# ============================================================================

class TestAllValid:

    def test_valid_without_blockers(self):
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], VALID_FLIGHT)
        assert result.valid
        assert result.blockers == []
        assert result.warnings == []

    def test_flight_minutes_from_block_times(self):
        assert VALID_FLIGHT.flight_minutes == 45

    def test_flight_minutes_from_iso_block_times(self):
        flight = FlightCandidate('2026-03-15T08:00:00Z', '2026-03-15T09:30:00Z')
        assert flight.flight_minutes == 90

    def test_eligibility_uses_flight_minutes(self):
        flight = replace(VALID_FLIGHT, arrival_time=datetime(2026, 3, 15, 9, 30, tzinfo=UTC))
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], flight)
        assert result.ftl.counters.flight_hours_today == pytest.approx(flight.flight_minutes / 60)

    def test_ftl_result_attached(self):
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], VALID_FLIGHT)
        assert result.ftl.compliant
        assert result.ftl.counters.flight_hours_today == pytest.approx(0.75)
        # 07:00 report to 09:15 release
        assert result.ftl.counters.duty_hours_today == pytest.approx(2.25)


class TestSingleBlockers:
    """Breaking one input yields exactly one blocker carrying its keyword."""

    @pytest.mark.parametrize('field, value, keyword', [
        ('medical_expiry', '2025-01-01', 'médicale'),
        ('license_expiry', '2020-01-01', 'Licence'),
        ('last_sim_check', '2024-01-01', 'Sim check'),
        ('medical_expiry', None, 'médicale'),
        ('type_ratings', frozenset({'BN2'}), 'C208'),
    ])
    def test_one_blocker(self, field, value, keyword):
        quals = replace(VALID_QUALS, **{field: value})
        result = validate_crew_for_flight(VALID_MEMBER, quals, [], VALID_FLIGHT)
        assert not result.valid
        assert len(result.blockers) == 1
        assert keyword in result.blockers[0]

    def test_inactive_member(self):
        member = replace(VALID_MEMBER, active=False)
        result = validate_crew_for_flight(member, VALID_QUALS, [], VALID_FLIGHT)
        assert not result.valid
        assert len(result.blockers) == 1
        assert 'inactif' in result.blockers[0]

    def test_ftl_violation(self):
        logs = [make_log(date(2026, 3, 15), 480)]
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, logs, VALID_FLIGHT)
        assert not result.valid
        assert len(result.blockers) == 1
        assert 'FTL' in result.blockers[0]
        assert 'journalier' in result.blockers[0]


class TestMissingRecords:

    def test_member_none(self):
        result = validate_crew_for_flight(None, VALID_QUALS, [], VALID_FLIGHT)
        assert not result.valid
        assert has(result.blockers, 'introuvable')

    def test_qualifications_none(self):
        result = validate_crew_for_flight(VALID_MEMBER, None, [], VALID_FLIGHT)
        assert not result.valid
        assert result.blockers == ['Qualifications manquantes']

    def test_ftl_still_runs_without_qualifications(self):
        logs = [make_log(date(2026, 3, 15), 480)]
        result = validate_crew_for_flight(VALID_MEMBER, None, logs, VALID_FLIGHT)
        assert has(result.blockers, 'Qualifications')
        assert has(result.blockers, 'FTL')

    def test_none_logs_are_empty_history(self):
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, None, VALID_FLIGHT)
        assert result.valid


class TestWarnings:

    def test_medical_expiring_is_warning(self):
        soon = date(2026, 3, 15) + timedelta(days=15)
        quals = replace(VALID_QUALS, medical_expiry=soon.isoformat())
        result = validate_crew_for_flight(VALID_MEMBER, quals, [], VALID_FLIGHT)
        assert result.valid
        assert has(result.warnings, 'médicale')

    def test_license_expiring_is_warning(self):
        quals = replace(VALID_QUALS, license_expiry='2026-04-01')
        result = validate_crew_for_flight(VALID_MEMBER, quals, [], VALID_FLIGHT)
        assert result.valid
        assert has(result.warnings, 'Licence')

    def test_sim_check_expiring_is_warning(self):
        last = date(2026, 3, 15) - timedelta(days=160)
        quals = replace(VALID_QUALS, last_sim_check=last)
        result = validate_crew_for_flight(VALID_MEMBER, quals, [], VALID_FLIGHT)
        assert result.valid
        assert has(result.warnings, 'Sim check')

    def test_ftl_near_limit_is_warning(self):
        # 375 + 45 = 420 min = 87.5% of the daily limit
        logs = [make_log(date(2026, 3, 15), 375, duty_start_hour=6, duty_hours=4)]
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, logs, VALID_FLIGHT)
        assert result.valid
        assert has(result.warnings, 'FTL proche limite')


class TestFTLInputs:

    def test_other_crew_logs_ignored(self):
        logs = [make_log(date(2026, 3, 15), 480, crew_id='crew-999')]
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, logs, VALID_FLIGHT)
        assert result.valid

    def test_explicit_duty_window_used(self):
        flight = replace(
            VALID_FLIGHT,
            duty_start=datetime(2026, 3, 15, 6, 0, tzinfo=UTC),
            duty_end=datetime(2026, 3, 15, 9, 0, tzinfo=UTC),
        )
        result = CrewEligibilityValidator().validate(VALID_MEMBER, VALID_QUALS, [], flight)
        assert result.ftl.counters.duty_hours_today == pytest.approx(3.0)

    def test_short_rest_blocks(self):
        prev = DutyLog(
            'crew-001', 'f0', '2026-03-14',
            datetime(2026, 3, 14, 20, 0, tzinfo=UTC),
            datetime(2026, 3, 15, 1, 0, tzinfo=UTC),
            120,
        )
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [prev], VALID_FLIGHT)
        assert not result.valid
        assert has(result.blockers, 'Repos')

    def test_reference_before_flight_day_keeps_minutes_out_of_today(self):
        flight = replace(
            VALID_FLIGHT,
            departure_time=datetime(2026, 3, 16, 8, 0, tzinfo=UTC),
            arrival_time=datetime(2026, 3, 16, 9, 0, tzinfo=UTC),
        )
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], flight,
                                          reference_date='2026-03-15')
        assert result.ftl.counters.flight_hours_today == 0

    def test_reference_after_flight_day_counts_in_7d(self):
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], VALID_FLIGHT,
                                          reference_date='2026-03-16')
        assert result.ftl.counters.flight_hours_today == 0
        assert result.ftl.counters.flight_hours_7d == pytest.approx(0.75)

    def test_unreadable_arrival_rejected(self):
        flight = replace(VALID_FLIGHT, arrival_time='not a time')
        with pytest.raises(FTLInputError):
            validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], flight)

    def test_wrong_flight_type_rejected(self):
        with pytest.raises(FTLInputError):
            validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], {'aircraft_type': 'C208'})

    def test_no_flight_no_reference_rejected(self):
        with pytest.raises(FTLInputError):
            validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], None)

    def test_no_flight_with_reference(self):
        result = validate_crew_for_flight(VALID_MEMBER, VALID_QUALS, [], None,
                                          reference_date='2026-03-15')
        assert result.valid
        assert result.ftl is None

    def test_to_dict(self):
        member = replace(VALID_MEMBER, active=False)
        data = validate_crew_for_flight(member, VALID_QUALS, [], VALID_FLIGHT).to_dict()
        assert data == {'valid': False, 'blockers': ['Membre inactif'], 'warnings': []}
