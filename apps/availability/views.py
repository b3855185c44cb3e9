"""API views for availability blocks.

Listing is public and needs space_id, start_date and end_date. Writes
are limited to the manager of the space's location and admins.
"""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.errors import NotFound

from .repositories import DjangoAvailabilityRepository
from .serializers import (
    AvailabilityBlockSerializer,
    AvailabilityBlockUpdateSerializer,
    AvailabilityBlockWriteSerializer,
    AvailabilityQuerySerializer,
    GenerateScheduleSerializer,
    SetPeriodSerializer,
)
from .services import AvailabilityService


class AvailabilityViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    lookup_value_regex = r"\d+"

    def get_service(self) -> AvailabilityService:
        return AvailabilityService()

    def list(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        blocks = self.get_service().list_blocks(
            query.validated_data["space_id"],
            query.validated_data["start_date"],
            query.validated_data["end_date"],
        ).unwrap()
        return Response(AvailabilityBlockSerializer(blocks, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        block = DjangoAvailabilityRepository().get(pk)
        if block is None:
            raise NotFound(f"Availability block {pk} not found")
        return Response(AvailabilityBlockSerializer(block).data)

    def create(self, request):  # type: ignore
        serializer = AvailabilityBlockWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        block = self.get_service().create_block(
            request.user,
            data["space_id"],
            data["date"],
            data["start_time"],
            data["end_time"],
            is_available=data["is_available"],
            notes=data["notes"],
        ).unwrap()
        return Response(AvailabilityBlockSerializer(block).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):  # type: ignore
        serializer = AvailabilityBlockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        block = self.get_service().update_block(request.user, pk, **serializer.validated_data).unwrap()
        return Response(AvailabilityBlockSerializer(block).data)

    def partial_update(self, request, pk=None):  # type: ignore
        return self.update(request, pk)

    def destroy(self, request, pk=None):  # type: ignore
        self.get_service().delete_block(request.user, pk).unwrap()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"])
    def generate(self, request):  # type: ignore
        serializer = GenerateScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        blocks = self.get_service().generate_schedule(request.user, **serializer.validated_data).unwrap()
        return Response(AvailabilityBlockSerializer(blocks, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="set-period")
    def set_period(self, request):  # type: ignore
        serializer = SetPeriodSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = self.get_service().set_period_availability(request.user, **serializer.validated_data).unwrap()
        return Response({"updated": updated})
