"""Application constants."""

# Booking rules
BOOKING_LEAD_TIME_HOURS = 12  # Minimum notice before an appointment starts
APPOINTMENT_DURATION_MINUTES = 60  # Every viewing occupies a fixed one-hour slot
MINUTES_PER_DAY = 24 * 60

# "HH:MM" 24-hour clock, hour may be a single digit on input
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"

# Appointment list pagination
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
