"""
Tests for the slot calculator.

Coverage:
- Time format validation and zero-padding
- End time derivation (including midnight wrap)
- Same-day slot construction
- Lead time boundary
- Half-open overlap test
"""

from datetime import date, datetime, timezone

import pytest

from realty_api.services import slot_service
from realty_api.services.booking_errors import (
    InsufficientLeadTimeError,
    InvalidTimeFormatError,
)


NOW = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)


class TestNormalizeTime:
    def test_zero_pads_single_digit_hour(self):
        assert slot_service.normalize_time("9:05") == "09:05"

    def test_keeps_valid_time(self):
        assert slot_service.normalize_time("23:59") == "23:59"

    @pytest.mark.parametrize("value", ["24:00", "9:5", "12:60", "noon", "", "12:00:00"])
    def test_rejects_invalid_time(self, value):
        with pytest.raises(InvalidTimeFormatError, match="Invalid time format"):
            slot_service.normalize_time(value)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidTimeFormatError):
            slot_service.normalize_time(None)


class TestDeriveEndTime:
    def test_adds_one_hour(self):
        assert slot_service.derive_end_time("10:00") == "11:00"
        assert slot_service.derive_end_time("09:30") == "10:30"

    def test_wraps_past_midnight(self):
        assert slot_service.derive_end_time("23:30") == "00:30"
        assert slot_service.derive_end_time("23:00") == "00:00"

    def test_minutes_round_trip(self):
        assert slot_service.to_minutes("01:15") == 75
        assert slot_service.from_minutes(75) == "01:15"
        assert slot_service.from_minutes(1440 + 30) == "00:30"


class TestBuildSlot:
    def test_builds_one_hour_slot(self):
        slot = slot_service.build_slot(date(2030, 1, 2), "9:00")
        assert slot == (date(2030, 1, 2), "09:00", "10:00")

    def test_latest_same_day_start(self):
        slot = slot_service.build_slot(date(2030, 1, 2), "22:59")
        assert slot.end_time == "23:59"

    @pytest.mark.parametrize("start", ["23:00", "23:30"])
    def test_rejects_slot_running_past_midnight(self, start):
        with pytest.raises(InvalidTimeFormatError, match="same day"):
            slot_service.build_slot(date(2030, 1, 2), start)


class TestLeadTime:
    def test_exactly_twelve_hours_is_rejected(self):
        with pytest.raises(InsufficientLeadTimeError, match="at least 12 hours"):
            slot_service.validate_lead_time(date(2030, 1, 1), "20:00", now=NOW)

    def test_one_minute_past_boundary_is_accepted(self):
        slot_service.validate_lead_time(date(2030, 1, 1), "20:01", now=NOW)

    def test_past_slot_is_rejected(self):
        with pytest.raises(InsufficientLeadTimeError):
            slot_service.validate_lead_time(date(2029, 12, 31), "10:00", now=NOW)

    def test_naive_now_is_treated_as_utc(self):
        naive = NOW.replace(tzinfo=None)
        with pytest.raises(InsufficientLeadTimeError):
            slot_service.validate_lead_time(date(2030, 1, 1), "19:59", now=naive)

    def test_booking_timezone_shifts_instant(self):
        instant = slot_service.slot_start_instant(
            date(2030, 1, 2), "10:00", tz_name="America/Bogota"
        )
        assert instant == datetime(2030, 1, 2, 15, 0, tzinfo=timezone.utc)

    def test_unknown_timezone_falls_back_to_utc(self):
        instant = slot_service.slot_start_instant(
            date(2030, 1, 2), "10:00", tz_name="Not/AZone"
        )
        assert instant == datetime(2030, 1, 2, 10, 0, tzinfo=timezone.utc)


class TestSlotsOverlap:
    def test_partial_overlap(self):
        assert slot_service.slots_overlap("10:00", "11:00", "10:30", "11:30")

    def test_containment(self):
        assert slot_service.slots_overlap("10:00", "11:00", "10:15", "10:45")

    def test_touching_endpoints_do_not_overlap(self):
        assert not slot_service.slots_overlap("10:00", "11:00", "11:00", "12:00")
        assert not slot_service.slots_overlap("10:00", "11:00", "09:00", "10:00")
