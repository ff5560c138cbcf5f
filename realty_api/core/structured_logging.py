"""Structured logging helpers."""

from typing import Any


def build_log_context(
    *,
    user_id: str | None = None,
    role: str | None = None,
    appointment_id: str | None = None,
    property_id: str | None = None,
    route: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict without client-authored free text."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if role:
        context["role"] = str(role)
    if appointment_id:
        context["appointment_id"] = str(appointment_id)
    if property_id:
        context["property_id"] = str(property_id)
    if route:
        context["route"] = route
    return context
