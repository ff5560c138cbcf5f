"""Appointments router - API endpoints for property viewing appointments.

Authenticated endpoints for:
- Clients booking, reading and cancelling their own viewings
- Agents and administrators confirming, completing and managing all viewings
"""

import logging
from datetime import date
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from realty_api.core.deps import get_current_session, get_db, require_roles
from realty_api.core.structured_logging import build_log_context
from realty_api.db.enums import AppointmentStatus, Role
from realty_api.schemas.appointment import (
    AppointmentConfirm,
    AppointmentCreate,
    AppointmentDetailRead,
    AppointmentDetailResponse,
    AppointmentListResponse,
    AppointmentRead,
    AppointmentResponse,
    AppointmentUpdate,
)
from realty_api.schemas.auth import UserSession
from realty_api.services import appointment_service
from realty_api.services.appointment_service import AppointmentFilters
from realty_api.services.booking_errors import (
    BookingError,
    ForbiddenError,
    InsufficientLeadTimeError,
    InvalidStatusError,
    InvalidTimeFormatError,
    NotFoundError,
    PersistenceError,
    SlotConflictError,
)
from realty_api.utils.pagination import PaginationParams, build_pagination, get_pagination

logger = logging.getLogger(__name__)

router = APIRouter()

SortField = Literal["date", "start_time", "status", "created_at", "updated_at"]
SortOrder = Literal["asc", "desc"]


# =============================================================================
# Helper Functions
# =============================================================================

# Order matters: first matching kind wins
_ERROR_STATUS_CODES: list[tuple[type[BookingError], int]] = [
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (InsufficientLeadTimeError, 400),
    (InvalidTimeFormatError, 400),
    (InvalidStatusError, 400),
    (SlotConflictError, 409),
    (PersistenceError, 409),
]


def _to_http_exception(error: BookingError, session: UserSession, route: str) -> HTTPException:
    """Translate a booking error into an HTTP error response."""
    status_code = 400
    for kind, code in _ERROR_STATUS_CODES:
        if isinstance(error, kind):
            status_code = code
            break
    logger.info(
        "Appointment request rejected (%s): %s",
        type(error).__name__, error,
        extra=build_log_context(
            user_id=session.user_id,
            role=session.role.value,
            route=route,
        ),
    )
    return HTTPException(status_code=status_code, detail=str(error))


def _to_read(appointment) -> AppointmentRead:
    """Convert Appointment model to read schema."""
    return AppointmentRead.model_validate(appointment)


def _to_detail_read(appointment) -> AppointmentDetailRead:
    """Convert Appointment model (with relations loaded) to read schema."""
    return AppointmentDetailRead.model_validate(appointment)


def _build_filters(
    pagination: PaginationParams,
    sort_by: str,
    sort_order: str,
    property_id: UUID | None = None,
    client_id: UUID | None = None,
    agent_id: UUID | None = None,
    status: AppointmentStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> AppointmentFilters:
    return AppointmentFilters(
        page=pagination.page,
        limit=pagination.limit,
        sort_by=sort_by,
        sort_order=sort_order,
        property_id=property_id,
        client_id=client_id,
        agent_id=agent_id,
        status=status.value if status else None,
        date_from=date_from,
        date_to=date_to,
    )


# =============================================================================
# Listing
# =============================================================================

@router.get("", response_model=AppointmentListResponse)
def list_appointments(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination),
    sort_by: SortField = Query("date"),
    sort_order: SortOrder = Query("asc"),
    property_id: UUID | None = Query(None),
    client_id: UUID | None = Query(None),
    agent_id: UUID | None = Query(None),
    status: AppointmentStatus | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
):
    """
    List appointments visible to the caller.

    Clients only ever see their own appointments; a client_id filter they
    send is replaced with their own id.
    """
    filters = _build_filters(
        pagination, sort_by, sort_order,
        property_id=property_id,
        client_id=client_id,
        agent_id=agent_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )

    appointments, total = appointment_service.list_appointments(
        db=db,
        filters=filters,
        actor_id=session.user_id,
        role=session.role,
    )
    return AppointmentListResponse(
        message="Appointments retrieved successfully",
        data=[_to_detail_read(a) for a in appointments],
        pagination=build_pagination(total, pagination),
    )


@router.get("/property/{property_id}", response_model=AppointmentListResponse)
def list_property_appointments(
    property_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination),
    sort_by: SortField = Query("date"),
    sort_order: SortOrder = Query("asc"),
    status: AppointmentStatus | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
):
    """List appointments for one property."""
    filters = _build_filters(
        pagination, sort_by, sort_order,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    try:
        appointments, total = appointment_service.list_property_appointments(
            db=db,
            property_id=property_id,
            filters=filters,
            actor_id=session.user_id,
            role=session.role,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "list_property_appointments")

    return AppointmentListResponse(
        message="Property appointments retrieved successfully",
        data=[_to_detail_read(a) for a in appointments],
        pagination=build_pagination(total, pagination),
    )


# =============================================================================
# Booking
# =============================================================================

@router.post("", response_model=AppointmentResponse, status_code=201)
def create_appointment(
    data: AppointmentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Book a property viewing. The appointment starts as pending."""
    try:
        appointment = appointment_service.create_appointment(
            db=db,
            property_id=data.property_id,
            appointment_date=data.date,
            start_time=data.start_time,
            actor_id=session.user_id,
            role=session.role,
            notes=data.notes,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "create_appointment")

    return AppointmentResponse(
        message="Appointment created successfully",
        data=_to_read(appointment),
    )


@router.get("/{appointment_id}", response_model=AppointmentDetailResponse)
def get_appointment(
    appointment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get appointment with property, client and agent details."""
    try:
        appointment = appointment_service.get_appointment(
            db=db,
            appointment_id=appointment_id,
            actor_id=session.user_id,
            role=session.role,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "get_appointment")

    return AppointmentDetailResponse(
        message="Appointment retrieved successfully",
        data=_to_detail_read(appointment),
    )


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Update an appointment.

    Clients may cancel or edit their client_notes; staff may reschedule,
    change status, assign the agent on confirmation and edit notes.
    """
    try:
        appointment = appointment_service.update_appointment(
            db=db,
            appointment_id=appointment_id,
            changes=data.model_dump(exclude_unset=True),
            actor_id=session.user_id,
            role=session.role,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "update_appointment")

    return AppointmentResponse(
        message="Appointment updated successfully",
        data=_to_read(appointment),
    )


# =============================================================================
# Status Actions
# =============================================================================

@router.patch("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Cancel an appointment."""
    try:
        appointment = appointment_service.cancel_appointment(
            db=db,
            appointment_id=appointment_id,
            actor_id=session.user_id,
            role=session.role,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "cancel_appointment")

    return AppointmentResponse(
        message="Appointment cancelled successfully",
        data=_to_read(appointment),
    )


@router.patch("/{appointment_id}/confirm", response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: UUID,
    data: AppointmentConfirm,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Confirm a pending appointment and assign the agent (agents and admins)."""
    try:
        appointment = appointment_service.confirm_appointment(
            db=db,
            appointment_id=appointment_id,
            agent_id=data.agent_id,
            actor_id=session.user_id,
            role=session.role,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "confirm_appointment")

    return AppointmentResponse(
        message="Appointment confirmed successfully",
        data=_to_read(appointment),
    )


@router.patch("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: UUID,
    session: UserSession = Depends(require_roles([Role.ADMIN, Role.AGENT])),
    db: Session = Depends(get_db),
):
    """Mark a confirmed appointment as completed (agents and admins)."""
    try:
        appointment = appointment_service.complete_appointment(
            db=db,
            appointment_id=appointment_id,
            actor_id=session.user_id,
            role=session.role,
        )
    except BookingError as e:
        raise _to_http_exception(e, session, "complete_appointment")

    return AppointmentResponse(
        message="Appointment completed successfully",
        data=_to_read(appointment),
    )
