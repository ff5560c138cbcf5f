"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    Values are the literals already persisted for existing users and
    carried in issued tokens, so they must not change.
    """
    ADMIN = "Administrador"
    AGENT = "Agente"
    CLIENT = "Cliente"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class AppointmentStatus(str, Enum):
    """
    Appointment lifecycle status.

    Flow: pending → confirmed → completed
              ↘ cancelled  ↙
    """
    PENDING = "pending"      # Requested by a client, no agent yet
    CONFIRMED = "confirmed"  # Accepted, agent assigned
    COMPLETED = "completed"  # Viewing took place
    CANCELLED = "cancelled"  # Withdrawn by client or staff

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


DEFAULT_APPOINTMENT_STATUS = AppointmentStatus.PENDING

# Statuses that occupy a property's time slot
ACTIVE_APPOINTMENT_STATUSES = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
})

TERMINAL_APPOINTMENT_STATUSES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
})

# Roles that may see every appointment and drive confirm/complete
ROLES_CAN_MANAGE_APPOINTMENTS = frozenset({Role.ADMIN, Role.AGENT})
