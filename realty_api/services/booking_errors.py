"""Error kinds raised by the appointment booking services."""


class BookingError(Exception):
    """Base exception for appointment booking errors."""

    pass


class NotFoundError(BookingError):
    """A referenced entity does not exist."""

    pass


class PropertyNotFoundError(NotFoundError):
    """Property not found."""

    def __init__(self, message: str = "Property not found"):
        super().__init__(message)


class AppointmentNotFoundError(NotFoundError):
    """Appointment not found."""

    def __init__(self, message: str = "Appointment not found"):
        super().__init__(message)


class AgentNotFoundError(NotFoundError):
    """Agent id does not resolve to a user holding the agent role."""

    def __init__(self, message: str = "Agent not found"):
        super().__init__(message)


class ForbiddenError(BookingError):
    """Role or ownership does not allow the action."""

    pass


class InsufficientLeadTimeError(BookingError):
    """Appointment starts too soon."""

    pass


class InvalidTimeFormatError(BookingError):
    """Time of day is not a valid same-day "HH:MM" slot."""

    pass


class InvalidStatusError(BookingError):
    """Unknown appointment status."""

    pass


class InvalidStatusTransitionError(InvalidStatusError):
    """Status change not allowed from the current status."""

    pass


class SlotConflictError(BookingError):
    """Another active appointment already occupies the slot."""

    pass


class PersistenceError(BookingError):
    """A write reported no effect."""

    pass
