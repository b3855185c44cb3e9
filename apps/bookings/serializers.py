"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Input for CreateBooking. Business rules live in the command handler."""

    space_id = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    user_id = serializers.IntegerField(required=False, min_value=1)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Read model of a booking."""

    user_id = serializers.ReadOnlyField(source="user.id")
    space_id = serializers.ReadOnlyField(source="space.id")
    space_name = serializers.ReadOnlyField(source="space.name")
    location_id = serializers.ReadOnlyField(source="space.location_id")

    class Meta:
        model = Booking
        fields = [
            "id",
            "user_id",
            "space_id",
            "space_name",
            "location_id",
            "date",
            "start_time",
            "end_time",
            "total_hours",
            "total_price",
            "status",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingQuoteSerializer(serializers.Serializer):
    space_id = serializers.IntegerField(min_value=1)
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()


class BookingIntervalSerializer(BookingQuoteSerializer):
    """A prospective booking: space, date and times."""

    date = serializers.DateField()


class SlotsQuerySerializer(serializers.Serializer):
    space_id = serializers.IntegerField(min_value=1)
    date = serializers.DateField()


class ScheduleQuerySerializer(serializers.Serializer):
    space_id = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class ScheduleEntrySerializer(serializers.ModelSerializer):
    """Public view of an occupied interval, without the booker."""

    class Meta:
        model = Booking
        fields = ["id", "date", "start_time", "end_time", "status"]
        read_only_fields = fields
