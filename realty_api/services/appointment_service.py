"""Appointment service - business logic for booking property viewings.

Handles:
- Booking creation with lead-time and conflict checks
- Role-scoped reads and listings
- Updates, reschedules and status transitions (cancel/confirm/complete)

Every public operation is one unit of work: existence checks, then the
conflict check, then the write. Any failure rolls the session back.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from realty_api.core.constants import DEFAULT_LIMIT, DEFAULT_PAGE
from realty_api.core.structured_logging import build_log_context
from realty_api.db.enums import AppointmentStatus, Role
from realty_api.db.models import Appointment
from realty_api.services import (
    appointment_state,
    conflict_service,
    property_service,
    slot_service,
    user_service,
)
from realty_api.services.booking_errors import (
    AgentNotFoundError,
    AppointmentNotFoundError,
    ForbiddenError,
    InvalidStatusTransitionError,
    PersistenceError,
    PropertyNotFoundError,
    SlotConflictError,
)

logger = logging.getLogger(__name__)

# Fields a client may still change on their own appointment
CLIENT_EDITABLE_FIELDS = frozenset({"status", "client_notes"})

UPDATABLE_FIELDS = frozenset({
    "date", "start_time", "status", "notes", "client_notes", "agent_notes", "agent_id",
})

SORTABLE_FIELDS = {
    "date": Appointment.date,
    "start_time": Appointment.start_time,
    "status": Appointment.status,
    "created_at": Appointment.created_at,
    "updated_at": Appointment.updated_at,
}


# =============================================================================
# Types
# =============================================================================

@dataclass(frozen=True)
class AppointmentFilters:
    """Pagination, sorting and field filters for appointment listings."""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = "date"
    sort_order: str = "asc"
    property_id: UUID | None = None
    client_id: UUID | None = None
    agent_id: UUID | None = None
    status: str | None = None
    date_from: date | None = None
    date_to: date | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# =============================================================================
# Persistence
# =============================================================================

def get_appointment_by_id(db: Session, appointment_id: UUID) -> Appointment | None:
    """Get appointment by ID."""
    return db.query(Appointment).filter(Appointment.id == appointment_id).first()


def get_appointment_with_details(db: Session, appointment_id: UUID) -> Appointment | None:
    """Get appointment with property, client and agent loaded."""
    return (
        db.query(Appointment)
        .options(
            joinedload(Appointment.property),
            joinedload(Appointment.client),
            joinedload(Appointment.agent),
        )
        .filter(Appointment.id == appointment_id)
        .first()
    )


def query_appointments(
    db: Session,
    filters: AppointmentFilters,
) -> tuple[list[Appointment], int]:
    """List appointments matching filters, with details, plus the total count."""
    query = db.query(Appointment)

    if filters.property_id:
        query = query.filter(Appointment.property_id == filters.property_id)
    if filters.client_id:
        query = query.filter(Appointment.client_id == filters.client_id)
    if filters.agent_id:
        query = query.filter(Appointment.agent_id == filters.agent_id)
    if filters.status:
        query = query.filter(Appointment.status == filters.status)
    if filters.date_from:
        query = query.filter(Appointment.date >= filters.date_from)
    if filters.date_to:
        query = query.filter(Appointment.date <= filters.date_to)

    total = query.count()

    column = SORTABLE_FIELDS.get(filters.sort_by, Appointment.date)
    direction = desc if filters.sort_order == "desc" else asc
    appointments = (
        query.options(
            joinedload(Appointment.property),
            joinedload(Appointment.client),
            joinedload(Appointment.agent),
        )
        .order_by(direction(column), direction(Appointment.start_time), Appointment.id)
        .offset(filters.offset)
        .limit(filters.limit)
        .all()
    )
    return appointments, total


def insert_appointment(db: Session, **values: Any) -> Appointment:
    """Insert and commit a new appointment."""
    appointment = Appointment(**values)
    db.add(appointment)
    _commit(db)
    db.refresh(appointment)
    return appointment


def apply_appointment_changes(
    db: Session,
    appointment_id: UUID,
    changes: dict[str, Any],
) -> Appointment:
    """
    Apply a partial update and commit.

    Raises:
        PersistenceError: the appointment no longer exists
    """
    try:
        updated = db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).update(changes, synchronize_session="fetch")
    except IntegrityError as e:
        db.rollback()
        raise _integrity_error(e) from e
    if not updated:
        db.rollback()
        raise PersistenceError("Failed to update appointment")
    _commit(db)
    appointment = get_appointment_by_id(db, appointment_id)
    db.refresh(appointment)
    return appointment


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise _integrity_error(e) from e


def _integrity_error(error: IntegrityError) -> Exception:
    """Translate the active-slot unique index into a conflict."""
    message = str(error.orig)
    if "uq_appointments_active_slot" in message or "appointments.start_time" in message:
        return SlotConflictError("Property already has an appointment in this time slot")
    return PersistenceError("Failed to save appointment")


# =============================================================================
# Permissions
# =============================================================================

def check_visibility(appointment: Appointment, actor_id: UUID, role: Role) -> None:
    """Admins and agents see every appointment, clients only their own."""
    if appointment_state.can_manage(role):
        return
    if appointment.client_id != actor_id:
        raise ForbiddenError("Insufficient permissions")


def _require_manager(role: Role, action: str) -> None:
    if not appointment_state.can_manage(role):
        raise ForbiddenError(f"Only agents and administrators can {action} appointments")


# =============================================================================
# Booking Operations
# =============================================================================

def create_appointment(
    db: Session,
    property_id: UUID,
    appointment_date: date,
    start_time: str,
    actor_id: UUID,
    role: Role,
    notes: str | None = None,
    now: datetime | None = None,
) -> Appointment:
    """
    Book a viewing (pending, no agent).

    Includes:
    - Property existence (row locked until commit)
    - Derived one-hour slot on the same day
    - 12 hour lead time
    - Conflict check against active appointments
    """
    try:
        prop = property_service.get_property(db, property_id, for_update=True)
        if not prop:
            raise PropertyNotFoundError()

        slot = slot_service.build_slot(appointment_date, start_time)
        slot_service.validate_lead_time(slot.date, slot.start_time, now=now)

        conflict_service.ensure_slot_available(
            db, property_id, slot.date, slot.start_time, slot.end_time
        )
    except Exception:
        db.rollback()
        raise

    appointment = insert_appointment(
        db,
        property_id=property_id,
        client_id=actor_id,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        status=AppointmentStatus.PENDING.value,
        notes=notes,
    )
    logger.info(
        "Appointment booked for %s %s-%s",
        slot.date.isoformat(), slot.start_time, slot.end_time,
        extra=build_log_context(
            user_id=actor_id,
            role=role.value,
            appointment_id=appointment.id,
            property_id=property_id,
        ),
    )
    return appointment


def get_appointment(
    db: Session,
    appointment_id: UUID,
    actor_id: UUID,
    role: Role,
) -> Appointment:
    """Get appointment with details, enforcing visibility."""
    appointment = get_appointment_with_details(db, appointment_id)
    if not appointment:
        raise AppointmentNotFoundError()
    check_visibility(appointment, actor_id, role)
    return appointment


def list_appointments(
    db: Session,
    filters: AppointmentFilters,
    actor_id: UUID,
    role: Role,
) -> tuple[list[Appointment], int]:
    """
    List appointments visible to the actor.

    Clients are always restricted to their own bookings, whatever
    client_id the request carried.
    """
    if role == Role.CLIENT:
        filters = replace(filters, client_id=actor_id)
    return query_appointments(db, filters)


def list_property_appointments(
    db: Session,
    property_id: UUID,
    filters: AppointmentFilters,
    actor_id: UUID,
    role: Role,
) -> tuple[list[Appointment], int]:
    """List appointments of one property visible to the actor."""
    if not property_service.get_property(db, property_id):
        raise PropertyNotFoundError()
    return list_appointments(
        db, replace(filters, property_id=property_id), actor_id, role
    )


def update_appointment(
    db: Session,
    appointment_id: UUID,
    changes: dict[str, Any],
    actor_id: UUID,
    role: Role,
    now: datetime | None = None,
) -> Appointment:
    """
    Update an appointment.

    - Clients may only cancel or edit client_notes; other fields are dropped
    - Completed/cancelled appointments are read-only
    - Status changes follow the role transition rules
    - Confirming assigns a valid agent
    - A new date/start_time re-derives the slot and revalidates lead time
      and conflicts (excluding this appointment)
    """
    try:
        appointment = get_appointment_by_id(db, appointment_id)
        if not appointment:
            raise AppointmentNotFoundError()
        check_visibility(appointment, actor_id, role)

        requested = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if role == Role.CLIENT:
            requested = {
                k: v for k, v in requested.items()
                if k in CLIENT_EDITABLE_FIELDS and v is not None
            }

        appointment_state.ensure_mutable(appointment.status)
        values = _resolve_changes(db, appointment, requested, role, now)
    except Exception:
        db.rollback()
        raise

    if not values:
        return appointment

    old_status = appointment.status
    appointment = apply_appointment_changes(db, appointment_id, values)
    if appointment.status != old_status:
        logger.info(
            "Appointment status %s -> %s",
            old_status, appointment.status,
            extra=build_log_context(
                user_id=actor_id,
                role=role.value,
                appointment_id=appointment.id,
                property_id=appointment.property_id,
            ),
        )
    return appointment


def _resolve_changes(
    db: Session,
    appointment: Appointment,
    requested: dict[str, Any],
    role: Role,
    now: datetime | None,
) -> dict[str, Any]:
    """Validate requested changes and return the column values to write."""
    values: dict[str, Any] = {}

    target = requested.get("status")
    agent_id = requested.get("agent_id")
    if target is not None:
        target = appointment_state.check_transition(appointment.status, target, role)
        values["status"] = target.value

    if agent_id is not None:
        if target != AppointmentStatus.CONFIRMED:
            raise InvalidStatusTransitionError(
                "An agent can only be assigned when confirming the appointment"
            )
        if not user_service.get_active_agent(db, agent_id):
            raise AgentNotFoundError()
        values["agent_id"] = agent_id
    elif target == AppointmentStatus.CONFIRMED:
        raise AgentNotFoundError("Agent ID is required to confirm an appointment")

    for field in ("notes", "client_notes", "agent_notes"):
        if field in requested:
            values[field] = requested[field]

    # Closing an appointment frees its slot; schedule fields sent with it are ignored
    if target is not None and appointment_state.is_terminal(target):
        return values

    new_date = requested.get("date") or appointment.date
    new_start = requested.get("start_time") or appointment.start_time
    rescheduled = (
        new_date != appointment.date
        or slot_service.normalize_time(new_start) != appointment.start_time
    )
    if rescheduled:
        slot = slot_service.build_slot(new_date, new_start)
        slot_service.validate_lead_time(slot.date, slot.start_time, now=now)
        values.update(date=slot.date, start_time=slot.start_time, end_time=slot.end_time)

    # A reschedule or a confirmation must still find the slot free
    if rescheduled or target == AppointmentStatus.CONFIRMED:
        property_service.get_property(db, appointment.property_id, for_update=True)
        conflict_service.ensure_slot_available(
            db,
            appointment.property_id,
            values.get("date", appointment.date),
            values.get("start_time", appointment.start_time),
            values.get("end_time", appointment.end_time),
            exclude_appointment_id=appointment.id,
        )

    return values


def cancel_appointment(
    db: Session,
    appointment_id: UUID,
    actor_id: UUID,
    role: Role,
) -> Appointment:
    """Cancel an appointment (client on their own, or staff)."""
    return update_appointment(
        db,
        appointment_id,
        {"status": AppointmentStatus.CANCELLED},
        actor_id,
        role,
    )


def confirm_appointment(
    db: Session,
    appointment_id: UUID,
    agent_id: UUID,
    actor_id: UUID,
    role: Role,
) -> Appointment:
    """
    Confirm a pending appointment and assign its agent.

    Order of checks: caller role, appointment existence, then the agent
    (validated with the transition in update_appointment).
    """
    _require_manager(role, "confirm")
    if not get_appointment_by_id(db, appointment_id):
        raise AppointmentNotFoundError()
    return update_appointment(
        db,
        appointment_id,
        {"status": AppointmentStatus.CONFIRMED, "agent_id": agent_id},
        actor_id,
        role,
    )


def complete_appointment(
    db: Session,
    appointment_id: UUID,
    actor_id: UUID,
    role: Role,
) -> Appointment:
    """Mark a confirmed appointment as completed."""
    _require_manager(role, "complete")
    return update_appointment(
        db,
        appointment_id,
        {"status": AppointmentStatus.COMPLETED},
        actor_id,
        role,
    )
