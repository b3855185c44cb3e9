"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.policy import Action, access_policy
from shared.domain.errors import NotFound

from .application.command_handlers import (
    CreateBookingCommand,
    CreateBookingHandler,
    DeleteBookingCommand,
    DeleteBookingHandler,
    TransitionBookingStatusCommand,
    TransitionBookingStatusHandler,
)
from .filters import BookingFilterSet
from .models import Booking
from .repositories import DjangoBookingRepository
from . import services
from .serializers import (
    BookingCreateSerializer,
    BookingIntervalSerializer,
    BookingQuoteSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    ScheduleEntrySerializer,
    ScheduleQuerySerializer,
    SlotsQuerySerializer,
)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Create, read, change status and delete bookings.

    Listing is scoped by role. A single booking outside that scope
    answers 403 rather than 404.
    """

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilterSet
    repository_class = DjangoBookingRepository
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        return self.repository_class().visible_to(self.request.user)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "set_status":
            return BookingStatusSerializer
        return BookingSerializer

    def get_object(self):  # type: ignore
        booking = self.repository_class().get(self.kwargs["pk"])
        if booking is None:
            raise NotFound(f"Booking {self.kwargs['pk']} not found")
        access_policy.require(self.request.user, Action.VIEW, booking)
        return booking

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = CreateBookingHandler().handle(
            CreateBookingCommand(requester=request.user, **serializer.validated_data)
        )
        booking = result.unwrap()
        data = BookingSerializer(booking, context=self.get_serializer_context()).data
        return Response(data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        DeleteBookingHandler().handle(
            DeleteBookingCommand(requester=request.user, booking_id=kwargs["pk"])
        ).unwrap()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = TransitionBookingStatusHandler().handle(
            TransitionBookingStatusCommand(requester=request.user, booking_id=pk, **serializer.validated_data)
        ).unwrap()
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    # ===== pre-booking queries =====

    @action(detail=False, methods=["post"])
    def quote(self, request):  # type: ignore
        serializer = BookingQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        space = services.get_space(data["space_id"])
        return Response(services.quote(space, data["start_time"], data["end_time"]))

    @action(detail=False, methods=["post"], url_path="check-availability")
    def check_availability(self, request):  # type: ignore
        serializer = BookingIntervalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        space = services.get_space(data["space_id"])
        return Response(services.check_availability(space, data["date"], data["start_time"], data["end_time"]))

    @action(detail=False, methods=["post"])
    def overlapping(self, request):  # type: ignore
        serializer = BookingIntervalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        space = services.get_space(data["space_id"])
        access_policy.require(request.user, Action.MANAGE, space, "Only the location manager can inspect bookings")
        bookings = services.find_overlapping(space, data["date"], data["start_time"], data["end_time"])
        return Response({
            "space_id": space.pk,
            "conflicts_found": bool(bookings),
            "overlapping_bookings": BookingSerializer(bookings, many=True).data,
        })

    @action(detail=False, methods=["get"])
    def slots(self, request):  # type: ignore
        query = SlotsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        space = services.get_space(query.validated_data["space_id"])
        return Response(services.available_slots(space, query.validated_data["date"]))

    @action(detail=False, methods=["get"])
    def schedule(self, request):  # type: ignore
        query = ScheduleQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        space = services.get_space(data["space_id"])
        schedule = services.space_schedule(space, data.get("start_date"), data.get("end_date"))
        return Response({
            "space_id": schedule["space_id"],
            "start_date": schedule["start_date"].isoformat(),
            "end_date": schedule["end_date"].isoformat(),
            "bookings": ScheduleEntrySerializer(schedule["bookings"], many=True).data,
        })
