"""ORM repositories for payments."""

from __future__ import annotations

from typing import Optional

from django.db.models import Q  # type: ignore

from shared.infrastructure.locking import lock_queryset_if_possible

from .models import Payment, PaymentTransaction


class DjangoPaymentRepository:

    def get(self, payment_id, lock: bool = False) -> Optional[Payment]:
        qs = Payment.objects.select_related("booking__space__location", "booking__user").filter(pk=payment_id)
        if lock:
            qs = lock_queryset_if_possible(qs)
        return qs.first()

    def has_active(self, booking_id) -> bool:
        return Payment.objects.filter(booking_id=booking_id, status__in=Payment.ACTIVE_STATUSES).exists()

    def visible_to(self, user):
        """Payments reachable through bookings the user may see."""
        qs = Payment.objects.select_related("booking__space__location", "booking__user")
        if not user or not user.is_authenticated:
            return qs.none()
        if user.is_admin_role():
            return qs
        if user.is_manager():
            return qs.filter(Q(booking__space__location__manager=user) | Q(booking__user=user))
        return qs.filter(booking__user=user)

    def add(self, **fields) -> Payment:
        return Payment.objects.create(**fields)

    def save(self, payment: Payment, update_fields=None) -> None:
        payment.save(update_fields=update_fields)

    def record(self, payment: Payment, event: str, payload: Optional[dict] = None) -> PaymentTransaction:
        return PaymentTransaction.objects.create(
            payment=payment,
            event=event,
            payload=payload or {},
            status=payment.status,
        )
