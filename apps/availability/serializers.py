"""Serializers for availability blocks."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AvailabilityBlock


class AvailabilityBlockSerializer(serializers.ModelSerializer):
    space_id = serializers.ReadOnlyField(source="space.id")

    class Meta:
        model = AvailabilityBlock
        fields = [
            "id",
            "space_id",
            "date",
            "start_time",
            "end_time",
            "is_available",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AvailabilityQuerySerializer(serializers.Serializer):
    """Required query parameters of the public listing."""

    space_id = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()


class AvailabilityBlockWriteSerializer(serializers.Serializer):
    space_id = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    is_available = serializers.BooleanField(default=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AvailabilityBlockUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    is_available = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class GenerateScheduleSerializer(serializers.Serializer):
    space_id = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    exclude_weekdays = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6),
        required=False,
        default=list,
    )


class SetPeriodSerializer(serializers.Serializer):
    space_id = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    is_available = serializers.BooleanField()
