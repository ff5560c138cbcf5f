"""Tests for overlapping-appointment detection."""

from datetime import timedelta
from uuid import uuid4

import pytest

from realty_api.services import conflict_service
from realty_api.services.booking_errors import SlotConflictError


@pytest.fixture
def confirmed_ten(make_appointment):
    """A confirmed 10:00-11:00 appointment."""
    return make_appointment(status="confirmed")


def test_overlapping_slot_conflicts(db, test_property, confirmed_ten):
    conflicts = conflict_service.find_conflicts(
        db, test_property.id, confirmed_ten.date, "10:30", "11:30"
    )
    assert [c.id for c in conflicts] == [confirmed_ten.id]


def test_contained_slot_conflicts(db, test_property, confirmed_ten):
    conflicts = conflict_service.find_conflicts(
        db, test_property.id, confirmed_ten.date, "10:15", "10:45"
    )
    assert len(conflicts) == 1


def test_touching_slots_do_not_conflict(db, test_property, confirmed_ten):
    after = conflict_service.find_conflicts(
        db, test_property.id, confirmed_ten.date, "11:00", "12:00"
    )
    before = conflict_service.find_conflicts(
        db, test_property.id, confirmed_ten.date, "09:00", "10:00"
    )
    assert after == []
    assert before == []


@pytest.mark.parametrize("status", ["cancelled", "completed"])
def test_inactive_appointments_do_not_block(db, test_property, make_appointment, status):
    appt = make_appointment(status=status)
    conflicts = conflict_service.find_conflicts(
        db, test_property.id, appt.date, "10:00", "11:00"
    )
    assert conflicts == []


def test_pending_appointments_block(db, test_property, make_appointment):
    appt = make_appointment(status="pending")
    conflicts = conflict_service.find_conflicts(
        db, test_property.id, appt.date, "10:30", "11:30"
    )
    assert len(conflicts) == 1


def test_excludes_given_appointment(db, test_property, confirmed_ten):
    conflicts = conflict_service.find_conflicts(
        db,
        test_property.id,
        confirmed_ten.date,
        "10:30",
        "11:30",
        exclude_appointment_id=confirmed_ten.id,
    )
    assert conflicts == []


def test_other_day_does_not_conflict(db, test_property, confirmed_ten):
    conflicts = conflict_service.find_conflicts(
        db, test_property.id, confirmed_ten.date + timedelta(days=1), "10:00", "11:00"
    )
    assert conflicts == []


def test_other_property_does_not_conflict(db, test_property, confirmed_ten):
    conflicts = conflict_service.find_conflicts(
        db, uuid4(), confirmed_ten.date, "10:00", "11:00"
    )
    assert conflicts == []


def test_ensure_slot_available_raises_on_conflict(db, test_property, confirmed_ten):
    with pytest.raises(SlotConflictError, match="10:00 to 11:00"):
        conflict_service.ensure_slot_available(
            db, test_property.id, confirmed_ten.date, "10:30", "11:30"
        )


def test_ensure_slot_available_passes_for_free_slot(db, test_property, confirmed_ten):
    conflict_service.ensure_slot_available(
        db, test_property.id, confirmed_ten.date, "11:00", "12:00"
    )
