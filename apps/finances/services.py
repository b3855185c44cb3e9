"""Read-side services for payments: reporting, eligibility and amounts due."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any

from django.db.models import Count, Sum  # type: ignore
from django.db.models.functions import TruncMonth  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking

from .models import Payment
from .repositories import DjangoPaymentRepository


def payment_statistics(user, months: int = 12) -> dict[str, Any]:
    """Aggregate payments visible to ``user``.

    Returns total completed revenue, counts per status, count and
    amount per method, and completed revenue per month for the last
    ``months`` months.
    """
    qs = DjangoPaymentRepository().visible_to(user)
    completed = qs.filter(status=Payment.Status.COMPLETED)

    by_status = {value: 0 for value in Payment.Status.values}
    for row in qs.values("status").annotate(count=Count("id")):
        by_status[row["status"]] = row["count"]

    by_method = [
        {
            "method": row["method"],
            "count": row["count"],
            "amount": str(row["amount"] or Decimal("0.00")),
        }
        for row in qs.values("method").annotate(count=Count("id"), amount=Sum("amount")).order_by("method")
    ]

    since = timezone.now() - timedelta(days=31 * months)
    monthly = [
        {
            "month": row["month"].strftime("%Y-%m"),
            "revenue": str(row["revenue"] or Decimal("0.00")),
            "count": row["count"],
        }
        for row in completed.filter(payment_date__gte=since)
        .annotate(month=TruncMonth("payment_date"))
        .values("month")
        .annotate(revenue=Sum("amount"), count=Count("id"))
        .order_by("month")
    ]

    total = completed.aggregate(total=Sum("amount"))["total"] or Decimal("0.00")
    return {
        "total_revenue": str(total),
        "total_payments": qs.count(),
        "by_status": by_status,
        "by_method": by_method,
        "monthly_revenue": monthly,
    }


def payment_eligibility(booking: Booking) -> dict[str, Any]:
    """Whether CreatePayment would accept a payment for ``booking`` now.

    ``reason`` mirrors the conflict CreatePayment would raise.
    """
    latest = booking.payments.order_by("-created_at").first()
    reason = None
    if DjangoPaymentRepository().has_active(booking.pk):
        reason = "duplicate_payment"
    elif booking.status != Booking.Status.PENDING:
        reason = "booking_not_pending"
    return {
        "booking_id": booking.pk,
        "booking_status": booking.status,
        "can_pay": reason is None,
        "reason": reason,
        "amount_due": str(booking.total_price),
        "existing_payment": {"id": latest.pk, "status": latest.status} if latest else None,
    }


def unpaid_bookings(user):
    """Pending bookings of ``user`` without a pending or completed payment."""
    return (
        Booking.objects.select_related("space__location", "user")
        .filter(user=user, status=Booking.Status.PENDING)
        .exclude(payments__status__in=Payment.ACTIVE_STATUSES)
        .order_by("date", "start_time")
    )


def payment_summary(user) -> dict[str, Any]:
    unpaid = unpaid_bookings(user).aggregate(count=Count("id"), amount=Sum("total_price"))
    payments = Payment.objects.filter(booking__user=user)
    paid = payments.filter(status=Payment.Status.COMPLETED).aggregate(count=Count("id"), amount=Sum("amount"))
    awaiting = payments.filter(status=Payment.Status.PENDING).aggregate(count=Count("id"), amount=Sum("amount"))
    return {
        "user_id": user.pk,
        "unpaid_bookings": unpaid["count"],
        "amount_due": str(unpaid["amount"] or Decimal("0.00")),
        "pending_payments": awaiting["count"],
        "amount_pending": str(awaiting["amount"] or Decimal("0.00")),
        "completed_payments": paid["count"],
        "amount_paid": str(paid["amount"] or Decimal("0.00")),
    }
