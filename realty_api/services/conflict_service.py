"""Conflict detection - overlapping active appointments on one property."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from realty_api.core.structured_logging import build_log_context
from realty_api.db.enums import ACTIVE_APPOINTMENT_STATUSES
from realty_api.db.models import Appointment
from realty_api.services import slot_service
from realty_api.services.booking_errors import SlotConflictError

logger = logging.getLogger(__name__)


def find_conflicts(
    db: Session,
    property_id: UUID,
    slot_date: date,
    start_time: str,
    end_time: str,
    exclude_appointment_id: UUID | None = None,
) -> list[Appointment]:
    """
    Get active appointments of a property that overlap [start_time, end_time).

    Only pending and confirmed appointments occupy a slot. The day's active
    appointments are loaded and tested with the half-open overlap rule.
    """
    query = db.query(Appointment).filter(
        Appointment.property_id == property_id,
        Appointment.date == slot_date,
        Appointment.status.in_([s.value for s in ACTIVE_APPOINTMENT_STATUSES]),
    )
    if exclude_appointment_id:
        query = query.filter(Appointment.id != exclude_appointment_id)
    return [
        appointment
        for appointment in query.order_by(Appointment.start_time).all()
        if slot_service.slots_overlap(
            appointment.start_time, appointment.end_time, start_time, end_time
        )
    ]


def ensure_slot_available(
    db: Session,
    property_id: UUID,
    slot_date: date,
    start_time: str,
    end_time: str,
    exclude_appointment_id: UUID | None = None,
) -> None:
    """Raise SlotConflictError if the slot overlaps an active appointment."""
    conflicts = find_conflicts(
        db,
        property_id,
        slot_date,
        start_time,
        end_time,
        exclude_appointment_id=exclude_appointment_id,
    )
    if conflicts:
        logger.info(
            "Slot %s %s-%s rejected, %d overlapping appointment(s)",
            slot_date.isoformat(), start_time, end_time, len(conflicts),
            extra=build_log_context(property_id=property_id),
        )
        first = conflicts[0]
        raise SlotConflictError(
            f"Property already has an appointment from {first.start_time} "
            f"to {first.end_time} on {slot_date.isoformat()}"
        )
