"""API tests for availability blocks."""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.models import AvailabilityBlock
from apps.bookings.models import Booking
from apps.spaces.models import Location, Space
from apps.users.models import User


class AvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="ManagerPass123",
            role=User.RoleChoices.MANAGER,
        )
        self.other_manager = User.objects.create_user(
            email="elsewhere@example.com",
            password="ManagerPass123",
            role=User.RoleChoices.MANAGER,
        )
        self.user = User.objects.create_user(email="user@example.com", password="UserPass123")
        location = Location.objects.create(name="Riverside", manager=self.manager)
        self.space = Space.objects.create(location=location, name="Hall", price_per_hour=Decimal("30.00"))
        self.day = timezone.localdate() + timedelta(days=5)
        self.list_url = reverse("availability-list")
        self.client.force_authenticate(self.manager)

    def _block_payload(self, **extra) -> dict:
        return {
            "space_id": self.space.id,
            "date": str(self.day),
            "start_time": "09:00",
            "end_time": "17:00",
            **extra,
        }

    def test_listing_requires_all_query_parameters(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.get(self.list_url, {"space_id": self.space.id})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["kind"], "validation_error")

    def test_listing_is_public_and_ordered(self) -> None:
        AvailabilityBlock.objects.create(space=self.space, date=self.day, start_time=time(13, 0), end_time=time(15, 0))
        AvailabilityBlock.objects.create(space=self.space, date=self.day, start_time=time(8, 0), end_time=time(12, 0))
        self.client.force_authenticate(None)

        response = self.client.get(
            self.list_url,
            {"space_id": self.space.id, "start_date": str(self.day), "end_date": str(self.day)},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([b["start_time"] for b in response.data], ["08:00:00", "13:00:00"])

    def test_listing_unknown_space_is_not_found(self) -> None:
        response = self.client.get(
            self.list_url, {"space_id": 999, "start_date": str(self.day), "end_date": str(self.day)}
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_manager_creates_block(self) -> None:
        response = self.client.post(self.list_url, self._block_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["is_available"])

    def test_duplicate_block_is_a_conflict(self) -> None:
        self.assertEqual(self.client.post(self.list_url, self._block_payload(), format="json").status_code, 201)
        response = self.client.post(self.list_url, self._block_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"]["details"]["reason"], "duplicate")

    def test_block_must_end_after_it_starts(self) -> None:
        response = self.client.post(self.list_url, self._block_payload(end_time="08:00"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_manager_and_user_cannot_manage(self) -> None:
        self.client.force_authenticate(self.other_manager)
        self.assertEqual(
            self.client.post(self.list_url, self._block_payload(), format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.client.force_authenticate(self.user)
        self.assertEqual(
            self.client.post(self.list_url, self._block_payload(), format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )

    def test_update_block(self) -> None:
        block = AvailabilityBlock.objects.create(
            space=self.space, date=self.day, start_time=time(9, 0), end_time=time(17, 0)
        )
        response = self.client.patch(
            reverse("availability-detail", args=[block.id]), {"is_available": False}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        block.refresh_from_db()
        self.assertFalse(block.is_available)

    def test_delete_refused_while_active_booking_overlaps(self) -> None:
        block = AvailabilityBlock.objects.create(
            space=self.space, date=self.day, start_time=time(9, 0), end_time=time(17, 0)
        )
        Booking.objects.create(
            user=self.user,
            space=self.space,
            date=self.day,
            start_time=time(10, 0),
            end_time=time(11, 0),
            status=Booking.Status.CONFIRMED,
        )
        url = reverse("availability-detail", args=[block.id])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

        Booking.objects.update(status=Booking.Status.CANCELLED)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

    def test_generate_schedule_skips_weekdays_and_existing_blocks(self) -> None:
        start = self.day
        end = start + timedelta(days=6)
        excluded = [start.weekday()]
        AvailabilityBlock.objects.create(
            space=self.space, date=start + timedelta(days=1), start_time=time(9, 0), end_time=time(17, 0)
        )

        response = self.client.post(
            reverse("availability-generate"),
            {
                "space_id": self.space.id,
                "start_date": str(start),
                "end_date": str(end),
                "start_time": "09:00",
                "end_time": "17:00",
                "exclude_weekdays": excluded,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(response.data), 5)
        self.assertEqual(AvailabilityBlock.objects.filter(space=self.space).count(), 6)

    def test_set_period_closes_blocks(self) -> None:
        for offset in range(3):
            AvailabilityBlock.objects.create(
                space=self.space,
                date=self.day + timedelta(days=offset),
                start_time=time(9, 0),
                end_time=time(17, 0),
            )

        response = self.client.post(
            reverse("availability-set-period"),
            {
                "space_id": self.space.id,
                "start_date": str(self.day),
                "end_date": str(self.day + timedelta(days=1)),
                "is_available": False,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["updated"], 2)
        self.assertEqual(AvailabilityBlock.objects.filter(is_available=True).count(), 1)

    def _confirmed_booking(self, start: time, end: time) -> Booking:
        return Booking.objects.create(
            user=self.user,
            space=self.space,
            date=self.day,
            start_time=start,
            end_time=end,
            status=Booking.Status.CONFIRMED,
        )

    def test_closing_block_refused_while_active_booking_overlaps(self) -> None:
        block = AvailabilityBlock.objects.create(
            space=self.space, date=self.day, start_time=time(9, 0), end_time=time(17, 0)
        )
        booking = self._confirmed_booking(time(10, 0), time(11, 0))
        url = reverse("availability-detail", args=[block.id])

        response = self.client.patch(url, {"is_available": False}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"]["details"]["booking_ids"], [booking.id])
        block.refresh_from_db()
        self.assertTrue(block.is_available)

    def test_moving_block_away_from_booking_is_refused(self) -> None:
        block = AvailabilityBlock.objects.create(
            space=self.space, date=self.day, start_time=time(9, 0), end_time=time(17, 0)
        )
        self._confirmed_booking(time(10, 0), time(11, 0))
        url = reverse("availability-detail", args=[block.id])

        response = self.client.patch(url, {"start_time": "12:00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

        # still covers the booking
        response = self.client.patch(url, {"end_time": "12:00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_set_period_close_refused_while_active_booking_overlaps(self) -> None:
        AvailabilityBlock.objects.create(space=self.space, date=self.day, start_time=time(9, 0), end_time=time(17, 0))
        self._confirmed_booking(time(9, 0), time(10, 0))
        payload = {
            "space_id": self.space.id,
            "start_date": str(self.day),
            "end_date": str(self.day),
            "is_available": False,
        }

        response = self.client.post(reverse("availability-set-period"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(AvailabilityBlock.objects.filter(is_available=True).count(), 1)

        Booking.objects.update(status=Booking.Status.CANCELLED)
        response = self.client.post(reverse("availability-set-period"), payload, format="json")
        self.assertEqual(response.data["updated"], 1)
