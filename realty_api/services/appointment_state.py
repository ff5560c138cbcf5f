"""Appointment status transitions and who may trigger them."""

from realty_api.db.enums import (
    AppointmentStatus,
    Role,
    ROLES_CAN_MANAGE_APPOINTMENTS,
    TERMINAL_APPOINTMENT_STATUSES,
)
from realty_api.services.booking_errors import (
    ForbiddenError,
    InvalidStatusError,
    InvalidStatusTransitionError,
)


ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

# Target statuses each role may request
ROLE_TARGETS: dict[Role, frozenset[AppointmentStatus]] = {
    Role.CLIENT: frozenset({AppointmentStatus.CANCELLED}),
    Role.AGENT: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    Role.ADMIN: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
}


def parse_status(value: str | AppointmentStatus) -> AppointmentStatus:
    """Coerce a raw value into an AppointmentStatus."""
    if isinstance(value, AppointmentStatus):
        return value
    if not AppointmentStatus.has_value(value):
        raise InvalidStatusError(f"Invalid appointment status '{value}'")
    return AppointmentStatus(value)


def is_terminal(status: str | AppointmentStatus) -> bool:
    return parse_status(status) in TERMINAL_APPOINTMENT_STATUSES


def can_manage(role: Role) -> bool:
    """Admins and agents manage any appointment."""
    return role in ROLES_CAN_MANAGE_APPOINTMENTS


def ensure_mutable(current: str | AppointmentStatus) -> None:
    """Reject any change to a completed or cancelled appointment."""
    status = parse_status(current)
    if status in TERMINAL_APPOINTMENT_STATUSES:
        raise InvalidStatusTransitionError(
            f"Appointment is {status.value} and can no longer be changed"
        )


def check_transition(
    current: str | AppointmentStatus,
    target: str | AppointmentStatus,
    role: Role,
) -> AppointmentStatus:
    """
    Validate a status change requested by an actor of the given role.

    Role is checked before the lifecycle so that a client asking for
    anything but cancellation is always told so.

    Returns:
        The target status as an enum

    Raises:
        ForbiddenError: role may not request the target status
        InvalidStatusTransitionError: target not reachable from current
    """
    current_status = parse_status(current)
    target_status = parse_status(target)

    if target_status not in ROLE_TARGETS.get(role, frozenset()):
        if role == Role.CLIENT:
            raise ForbiddenError("Clients can only cancel appointments")
        raise ForbiddenError(
            f"Role '{role.value}' cannot set appointments to {target_status.value}"
        )

    ensure_mutable(current_status)
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidStatusTransitionError(
            f"Cannot change appointment from {current_status.value} to {target_status.value}"
        )
    return target_status
