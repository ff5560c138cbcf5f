"""Property management API: appointment booking and conflict engine."""
