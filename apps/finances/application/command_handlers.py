"""
Payment Command Handlers

Settlement use cases. Payment writes and the booking status they imply
always happen in the same DjangoUnitOfWork: either both are committed or
neither is.

Commands:
- CreatePaymentCommand: pay for a PENDING booking
- UpdatePaymentStatusCommand: settle, fail or refund a payment
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional
import logging

from django.conf import settings
from django.utils import timezone

from shared.application.policy import AccessPolicy, Action, access_policy
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import Conflict, NotFound, ValidationError
from shared.domain.result import as_result
from shared.domain.value_objects import Money
from apps.bookings.application.command_handlers import transition_booking
from apps.bookings.models import Booking
from apps.bookings.repositories import DjangoBookingRepository
from apps.finances.domain import state_machine
from apps.finances.domain.events import PaymentCompleted, PaymentFailed, PaymentRefunded
from apps.finances.models import Payment
from apps.finances.repositories import DjangoPaymentRepository

logger = logging.getLogger(__name__)

_PAYMENT_EVENTS = {
    state_machine.COMPLETED: PaymentCompleted,
    state_machine.FAILED: PaymentFailed,
    state_machine.REFUNDED: PaymentRefunded,
}


# ===== Commands =====

@dataclass
class CreatePaymentCommand:
    requester: Any
    booking_id: int
    amount: Any
    method: str
    transaction_id: str = ''
    notes: str = ''


@dataclass
class UpdatePaymentStatusCommand:
    requester: Any
    payment_id: int
    status: str
    transaction_id: Optional[str] = None
    notes: str = ''


def _payment_event(payment: Payment, booking: Booking):
    event_class = _PAYMENT_EVENTS[payment.status]
    return event_class(
        aggregate_id=payment.pk,
        payment_id=payment.pk,
        booking_id=booking.pk,
        user_id=booking.user_id,
        amount=payment.amount,
    )


# ===== Command Handlers =====

class CreatePaymentHandler:
    """
    Handler for CreatePayment command

    1. Parse amount and method, check ownership (no transaction yet)
    2. Start transaction, lock the Booking row
    3. Reject if an active (pending/completed) payment exists or the
       booking is not PENDING
    4. Amount must equal the booking total exactly (Decimal equality)
    5. Insert the payment. With a synchronous gateway it is COMPLETED
       at once and the booking moves to CONFIRMED in the same transaction
    """

    def __init__(
        self,
        payment_repo: Optional[DjangoPaymentRepository] = None,
        booking_repo: Optional[DjangoBookingRepository] = None,
        policy: AccessPolicy = access_policy,
        synchronous_gateway: Optional[bool] = None,
    ):
        self.payment_repo = payment_repo or DjangoPaymentRepository()
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.policy = policy
        if synchronous_gateway is None:
            synchronous_gateway = getattr(settings, 'PAYMENTS_SYNCHRONOUS_GATEWAY', True)
        self.synchronous_gateway = synchronous_gateway

    @as_result
    def handle(self, command: CreatePaymentCommand) -> Payment:
        if command.method not in Payment.Method.values:
            raise ValidationError(
                f"Unknown payment method '{command.method}'",
                details={'method': command.method, 'allowed': list(Payment.Method.values)},
            )
        try:
            amount = Money.parse(command.amount).amount
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e), details={'reason': 'invalid_amount'})

        booking = self.booking_repo.get(command.booking_id)
        if booking is None:
            raise NotFound(f"Booking {command.booking_id} not found")

        self.policy.require(command.requester, Action.PAY, booking, "You can only pay for your own bookings")

        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get(command.booking_id, lock=True)
            if booking is None:
                raise NotFound(f"Booking {command.booking_id} not found")

            if self.payment_repo.has_active(booking.pk):
                raise Conflict(
                    "Booking already has an active payment",
                    details={'reason': 'duplicate_payment'},
                )
            if booking.status != Booking.Status.PENDING:
                raise Conflict(
                    f"Only pending bookings can be paid, booking is {booking.status}",
                    details={'reason': 'booking_not_pending', 'status': booking.status},
                )
            if amount != Decimal(booking.total_price):
                raise ValidationError(
                    "Payment amount must equal the booking total",
                    details={
                        'reason': 'invalid_amount',
                        'expected': str(booking.total_price),
                        'received': str(amount),
                    },
                )

            completed = self.synchronous_gateway
            payment = self.payment_repo.add(
                booking=booking,
                amount=amount,
                method=command.method,
                status=Payment.Status.COMPLETED if completed else Payment.Status.PENDING,
                transaction_id=command.transaction_id,
                payment_date=timezone.now() if completed else None,
                notes=command.notes,
            )
            self.payment_repo.record(payment, 'created', {'method': command.method, 'amount': str(amount)})

            if completed:
                transition_booking(
                    booking,
                    Booking.Status.CONFIRMED,
                    uow,
                    self.booking_repo,
                    payment_id=payment.pk,
                )
                uow.add_event(_payment_event(payment, booking))

        logger.info(
            f"Payment {payment.pk} created for booking {booking.pk}: "
            f"{amount} via {command.method} ({payment.status})"
        )
        return payment


class UpdatePaymentStatusHandler:
    """
    Settle a payment and cascade the outcome into its booking

    completed -> booking confirmed
    failed, refunded -> booking cancelled

    A booking already in the target status is left alone. An illegal
    booking transition raises and rolls back the payment write too.
    """

    def __init__(
        self,
        payment_repo: Optional[DjangoPaymentRepository] = None,
        booking_repo: Optional[DjangoBookingRepository] = None,
        policy: AccessPolicy = access_policy,
    ):
        self.payment_repo = payment_repo or DjangoPaymentRepository()
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.policy = policy

    @as_result
    def handle(self, command: UpdatePaymentStatusCommand) -> Payment:
        if command.status not in state_machine.STATUSES:
            raise ValidationError(
                f"Unknown payment status '{command.status}'",
                details={'status': command.status, 'allowed': list(state_machine.STATUSES)},
            )

        payment = self.payment_repo.get(command.payment_id)
        if payment is None:
            raise NotFound(f"Payment {command.payment_id} not found")

        self.policy.require(command.requester, Action.UPDATE_STATUS, payment)

        with DjangoUnitOfWork() as uow:
            payment = self.payment_repo.get(command.payment_id, lock=True)
            if payment is None:
                raise NotFound(f"Payment {command.payment_id} not found")
            previous = payment.status
            state_machine.ensure_transition(previous, command.status)

            payment.status = command.status
            update_fields = ['status', 'updated_at']
            if command.status == state_machine.COMPLETED:
                payment.payment_date = timezone.now()
                update_fields.append('payment_date')
            if command.transaction_id:
                payment.transaction_id = command.transaction_id
                update_fields.append('transaction_id')
            if command.notes:
                payment.notes = command.notes
                update_fields.append('notes')
            self.payment_repo.save(payment, update_fields=update_fields)
            self.payment_repo.record(
                payment,
                'status_changed',
                {'from': previous, 'to': command.status, 'by': command.requester.pk},
            )

            booking = self.booking_repo.get(payment.booking_id, lock=True)
            if booking is None:
                raise NotFound(f"Booking {payment.booking_id} not found")
            target = state_machine.booking_status_for(command.status)
            if booking.status != target:
                transition_booking(
                    booking,
                    target,
                    uow,
                    self.booking_repo,
                    reason=f"payment {command.status}",
                    payment_id=payment.pk,
                )
            uow.add_event(_payment_event(payment, booking))

        logger.info(
            f"Payment {payment.pk} status {previous} -> {payment.status}, "
            f"booking {booking.pk} is {booking.status}"
        )
        return payment
