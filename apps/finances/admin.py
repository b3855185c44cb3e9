"""Admin registration for payments. Payments cannot be deleted."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment, PaymentTransaction


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    readonly_fields = ("event", "payload", "status", "created_at")
    can_delete = False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "amount", "method", "status", "payment_date", "created_at")
    list_filter = ("status", "method")
    search_fields = ("transaction_id", "booking__user__email")
    readonly_fields = ("booking", "amount", "method", "status", "payment_date", "created_at", "updated_at")
    inlines = [PaymentTransactionInline]

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
