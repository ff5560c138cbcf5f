"""Tests for appointment status transitions and role rules."""

import pytest

from realty_api.db.enums import AppointmentStatus, Role
from realty_api.services import appointment_state
from realty_api.services.booking_errors import (
    ForbiddenError,
    InvalidStatusError,
    InvalidStatusTransitionError,
)


class TestParseStatus:
    def test_accepts_known_value(self):
        assert appointment_state.parse_status("confirmed") == AppointmentStatus.CONFIRMED

    def test_rejects_unknown_value(self):
        with pytest.raises(InvalidStatusError, match="Invalid appointment status"):
            appointment_state.parse_status("archived")

    def test_terminal_statuses(self):
        assert appointment_state.is_terminal("completed")
        assert appointment_state.is_terminal(AppointmentStatus.CANCELLED)
        assert not appointment_state.is_terminal("pending")


class TestRoleRules:
    def test_client_can_cancel(self):
        result = appointment_state.check_transition("pending", "cancelled", Role.CLIENT)
        assert result == AppointmentStatus.CANCELLED

    @pytest.mark.parametrize("target", ["confirmed", "completed"])
    def test_client_cannot_confirm_or_complete(self, target):
        with pytest.raises(ForbiddenError, match="Clients can only cancel appointments"):
            appointment_state.check_transition("pending", target, Role.CLIENT)

    def test_role_checked_before_lifecycle(self):
        # A client asking to confirm a cancelled appointment is told about the role
        with pytest.raises(ForbiddenError):
            appointment_state.check_transition("cancelled", "confirmed", Role.CLIENT)

    @pytest.mark.parametrize("role", [Role.AGENT, Role.ADMIN])
    def test_staff_can_confirm_pending(self, role):
        result = appointment_state.check_transition("pending", "confirmed", role)
        assert result == AppointmentStatus.CONFIRMED

    def test_nobody_can_request_pending(self):
        with pytest.raises(ForbiddenError):
            appointment_state.check_transition("confirmed", "pending", Role.ADMIN)

    def test_can_manage(self):
        assert appointment_state.can_manage(Role.ADMIN)
        assert appointment_state.can_manage(Role.AGENT)
        assert not appointment_state.can_manage(Role.CLIENT)


class TestLifecycle:
    def test_confirmed_can_complete(self):
        result = appointment_state.check_transition("confirmed", "completed", Role.AGENT)
        assert result == AppointmentStatus.COMPLETED

    def test_pending_cannot_complete(self):
        with pytest.raises(InvalidStatusTransitionError, match="from pending to completed"):
            appointment_state.check_transition("pending", "completed", Role.AGENT)

    def test_confirmed_cannot_be_confirmed_again(self):
        with pytest.raises(InvalidStatusTransitionError):
            appointment_state.check_transition("confirmed", "confirmed", Role.ADMIN)

    @pytest.mark.parametrize("current", ["completed", "cancelled"])
    @pytest.mark.parametrize("target", ["confirmed", "completed", "cancelled"])
    def test_terminal_statuses_are_final(self, current, target):
        with pytest.raises(InvalidStatusTransitionError, match="can no longer be changed"):
            appointment_state.check_transition(current, target, Role.ADMIN)

    def test_ensure_mutable_allows_active(self):
        appointment_state.ensure_mutable("pending")
        appointment_state.ensure_mutable(AppointmentStatus.CONFIRMED)
