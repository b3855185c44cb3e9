"""Booking and payment state machines, pricing."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.bookings.domain import state_machine as booking_fsm
from apps.bookings.domain.pricing import calculate_price
from apps.finances.domain import state_machine as payment_fsm
from shared.domain.errors import InvalidTransition, ValidationError


@pytest.mark.parametrize(
    "current, new",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("confirmed", "completed"),
        ("confirmed", "cancelled"),
    ],
)
def test_legal_booking_transitions(current: str, new: str) -> None:
    booking_fsm.ensure_transition(current, new)


@pytest.mark.parametrize("terminal", ["cancelled", "completed"])
@pytest.mark.parametrize("new", ["pending", "confirmed", "cancelled", "completed"])
def test_terminal_booking_states_never_change(terminal: str, new: str) -> None:
    with pytest.raises(InvalidTransition):
        booking_fsm.ensure_transition(terminal, new)


def test_pending_cannot_skip_to_completed() -> None:
    with pytest.raises(InvalidTransition):
        booking_fsm.ensure_transition("pending", "completed")


def test_unknown_booking_status_is_a_validation_error() -> None:
    with pytest.raises(ValidationError):
        booking_fsm.ensure_transition("pending", "archived")


def test_payment_transitions_and_cascade() -> None:
    payment_fsm.ensure_transition("pending", "completed")
    payment_fsm.ensure_transition("completed", "refunded")
    with pytest.raises(InvalidTransition):
        payment_fsm.ensure_transition("failed", "completed")
    with pytest.raises(InvalidTransition):
        payment_fsm.ensure_transition("pending", "refunded")

    assert payment_fsm.booking_status_for("completed") == "confirmed"
    assert payment_fsm.booking_status_for("failed") == "cancelled"
    assert payment_fsm.booking_status_for("refunded") == "cancelled"
    assert payment_fsm.booking_status_for("pending") is None


def test_hourly_price() -> None:
    assert calculate_price(Decimal("6"), Decimal("15.00")) == Decimal("90.00")


def test_day_rate_applies_to_full_blocks() -> None:
    assert calculate_price(Decimal("10"), Decimal("15.00"), Decimal("100.00")) == Decimal("130.00")


def test_price_of_fractional_hours() -> None:
    assert calculate_price(Decimal("2.50"), Decimal("49.60")) == Decimal("124.00")
