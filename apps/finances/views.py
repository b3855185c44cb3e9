"""API views for payments.

Payments are created by booking owners. Status changes (gateway
callbacks relayed by staff) are limited to the manager of the space
and admins. Payments are never deleted.
"""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.policy import Action, access_policy, is_admin
from shared.domain.errors import Forbidden, NotFound

from apps.bookings.repositories import DjangoBookingRepository
from apps.bookings.serializers import BookingSerializer
from apps.users.models import User

from .application.command_handlers import (
    CreatePaymentCommand,
    CreatePaymentHandler,
    UpdatePaymentStatusCommand,
    UpdatePaymentStatusHandler,
)
from .repositories import DjangoPaymentRepository
from .serializers import PaymentCreateSerializer, PaymentSerializer, PaymentStatusSerializer
from .services import payment_eligibility, payment_statistics, payment_summary, unpaid_bookings


class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "method"]
    lookup_value_regex = r"\d+"
    repository_class = DjangoPaymentRepository

    def get_queryset(self):  # type: ignore
        return self.repository_class().visible_to(self.request.user).prefetch_related("transactions")

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return PaymentCreateSerializer
        if self.action == "set_status":
            return PaymentStatusSerializer
        return PaymentSerializer

    def get_object(self):  # type: ignore
        payment = self.repository_class().get(self.kwargs["pk"])
        if payment is None:
            raise NotFound(f"Payment {self.kwargs['pk']} not found")
        access_policy.require(self.request.user, Action.VIEW, payment)
        return payment

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = CreatePaymentHandler().handle(
            CreatePaymentCommand(requester=request.user, **serializer.validated_data)
        ).unwrap()
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = UpdatePaymentStatusHandler().handle(
            UpdatePaymentStatusCommand(requester=request.user, payment_id=pk, **serializer.validated_data)
        ).unwrap()
        return Response(PaymentSerializer(payment).data)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        user = request.user
        if not (is_admin(user) or user.is_manager()):
            raise Forbidden("Only managers and admins can view payment statistics")
        return Response(payment_statistics(user))

    @action(detail=False, methods=["get"], url_path=r"check-booking/(?P<booking_id>\d+)")
    def check_booking(self, request, booking_id=None):  # type: ignore
        booking = DjangoBookingRepository().get(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        access_policy.require(request.user, Action.VIEW, booking)
        return Response(payment_eligibility(booking))

    def _target_user(self, request) -> User:
        """The requester, or ``?user_id=`` for managers and admins."""
        user_id = request.query_params.get("user_id")
        if not user_id or str(user_id) == str(request.user.pk):
            return request.user
        if not (is_admin(request.user) or request.user.is_manager()):
            raise Forbidden("You can only view your own payments")
        user = User.objects.filter(pk=user_id).first() if str(user_id).isdigit() else None
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user

    @action(detail=False, methods=["get"])
    def unpaid(self, request):  # type: ignore
        bookings = unpaid_bookings(self._target_user(request))
        return Response(BookingSerializer(bookings, many=True).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):  # type: ignore
        return Response(payment_summary(self._target_user(request)))
