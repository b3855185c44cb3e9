"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal
from unittest import mock

from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.models import AvailabilityBlock
from apps.bookings.models import Booking
from apps.bookings.repositories import DjangoBookingRepository
from apps.bookings.tasks import complete_finished_bookings
from apps.finances.models import Payment
from apps.spaces.models import Location, Space
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, status changes and deletion of bookings."""

    def setUp(self) -> None:
        self.user = User.objects.create_user(email="user@example.com", password="UserPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="ManagerPass123",
            role=User.RoleChoices.MANAGER,
        )
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.location = Location.objects.create(name="Downtown", city="Springfield", manager=self.manager)
        self.space = Space.objects.create(
            location=self.location,
            name="Room A",
            capacity=6,
            price_per_hour=Decimal("40.00"),
        )
        self.day = timezone.localdate() + timedelta(days=7)
        AvailabilityBlock.objects.create(
            space=self.space,
            date=self.day,
            start_time=time(8, 0),
            end_time=time(20, 0),
            is_available=True,
        )
        self.client.force_authenticate(self.user)
        self.list_url = reverse("booking-list")

    def _payload(self, start: str, end: str, **extra) -> dict:
        return {
            "space_id": self.space.id,
            "date": str(self.day),
            "start_time": start,
            "end_time": end,
            **extra,
        }

    def _book(self, start: str = "09:00", end: str = "12:00"):
        return self.client.post(self.list_url, self._payload(start, end), format="json")

    def _status_url(self, booking_id: int) -> str:
        return reverse("booking-set-status", args=[booking_id])

    # ===== create =====

    def test_user_can_create_booking_and_read_it_back(self) -> None:
        response = self._book()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Booking.Status.PENDING)
        self.assertEqual(Decimal(response.data["total_hours"]), Decimal("3.00"))
        self.assertEqual(Decimal(response.data["total_price"]), Decimal("120.00"))

        detail = self.client.get(reverse("booking-detail", args=[response.data["id"]]))
        self.assertEqual(detail.status_code, status.HTTP_200_OK, detail.data)
        self.assertEqual(detail.data["date"], str(self.day))
        self.assertEqual(detail.data["start_time"], "09:00:00")
        self.assertEqual(detail.data["end_time"], "12:00:00")
        self.assertEqual(detail.data["user_id"], self.user.id)

    def test_overlapping_booking_is_rejected(self) -> None:
        self.assertEqual(self._book("09:00", "12:00").status_code, status.HTTP_201_CREATED)

        self.client.force_authenticate(self.other)
        response = self._book("11:00", "13:00")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"]["kind"], "conflict")
        self.assertEqual(response.data["error"]["details"]["reason"], "overlap")
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        self.assertEqual(self._book("09:00", "12:00").status_code, status.HTTP_201_CREATED)
        response = self._book("12:00", "13:00")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_cancelled_booking_frees_the_slot(self) -> None:
        first = self._book()
        Booking.objects.filter(pk=first.data["id"]).update(status=Booking.Status.CANCELLED)

        response = self._book("10:00", "11:00")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_booking_without_availability_is_rejected(self) -> None:
        payload = self._payload("09:00", "10:00", date=str(self.day + timedelta(days=1)))
        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"]["details"]["reason"], "unavailable")

    def test_closed_block_does_not_count_as_availability(self) -> None:
        AvailabilityBlock.objects.filter(space=self.space).update(is_available=False)
        response = self._book()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_past_date_is_rejected(self) -> None:
        payload = self._payload("09:00", "10:00", date=str(timezone.localdate() - timedelta(days=1)))
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["error"]["kind"], "validation_error")

    def test_equal_start_and_end_is_rejected(self) -> None:
        response = self._book("09:00", "09:00")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_unknown_space_is_not_found(self) -> None:
        payload = self._payload("09:00", "10:00", space_id=999)
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_user_cannot_book_for_someone_else(self) -> None:
        response = self.client.post(
            self.list_url, self._payload("09:00", "10:00", user_id=self.other.id), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_manager_can_book_on_behalf_of_user(self) -> None:
        self.client.force_authenticate(self.manager)
        response = self.client.post(
            self.list_url, self._payload("09:00", "10:00", user_id=self.user.id), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["user_id"], self.user.id)

    def test_anonymous_cannot_book(self) -> None:
        self.client.force_authenticate(None)
        response = self._book()
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # ===== status =====

    def test_owner_cannot_confirm_own_booking(self) -> None:
        booking_id = self._book().data["id"]
        response = self.client.put(self._status_url(booking_id), {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_owner_can_cancel_pending_booking(self) -> None:
        booking_id = self._book().data["id"]
        response = self.client.put(self._status_url(booking_id), {"status": "cancelled"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CANCELLED)

    def test_terminal_states_cannot_change(self) -> None:
        booking_id = self._book().data["id"]
        self.client.force_authenticate(self.manager)
        url = self._status_url(booking_id)

        self.assertEqual(self.client.put(url, {"status": "confirmed"}, format="json").status_code, 200)
        self.assertEqual(self.client.put(url, {"status": "completed"}, format="json").status_code, 200)

        response = self.client.put(url, {"status": "cancelled"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["error"]["kind"], "invalid_transition")
        self.assertEqual(Booking.objects.get(pk=booking_id).status, Booking.Status.COMPLETED)

    def test_unknown_status_is_a_validation_error(self) -> None:
        booking_id = self._book().data["id"]
        self.client.force_authenticate(self.manager)
        response = self.client.patch(self._status_url(booking_id), {"status": "archived"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["kind"], "validation_error")

    # ===== delete =====

    def test_owner_can_delete_pending_booking(self) -> None:
        booking_id = self._book().data["id"]
        response = self.client.delete(reverse("booking-detail", args=[booking_id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Booking.objects.filter(pk=booking_id).exists())

    def test_confirmed_booking_cannot_be_deleted(self) -> None:
        booking_id = self._book().data["id"]
        Booking.objects.filter(pk=booking_id).update(status=Booking.Status.CONFIRMED)

        response = self.client.delete(reverse("booking-detail", args=[booking_id]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_booking_with_payment_cannot_be_deleted(self) -> None:
        booking_id = self._book().data["id"]
        booking = Booking.objects.get(pk=booking_id)
        Payment.objects.create(booking=booking, amount=booking.total_price, method="cash", status="failed")
        Booking.objects.filter(pk=booking_id).update(status=Booking.Status.CANCELLED)

        response = self.client.delete(reverse("booking-detail", args=[booking_id]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_manager_cannot_delete_and_stranger_is_forbidden(self) -> None:
        booking_id = self._book().data["id"]
        url = reverse("booking-detail", args=[booking_id])

        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

    def test_missing_booking_is_not_found(self) -> None:
        response = self.client.delete(reverse("booking-detail", args=[424242]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    # ===== visibility =====

    def test_listing_is_scoped_by_role(self) -> None:
        self._book()

        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.get(self.list_url).data["count"], 0)
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get(self.list_url).data["count"], 1)
        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(self.list_url).data["count"], 1)

    def test_stranger_cannot_read_booking(self) -> None:
        booking_id = self._book().data["id"]
        self.client.force_authenticate(self.other)
        response = self.client.get(reverse("booking-detail", args=[booking_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["kind"], "forbidden")

    # ===== deadline and races =====

    @override_settings(TRANSACTION_DEADLINE_SECONDS=1e-9)
    def test_create_past_deadline_times_out_and_writes_nothing(self) -> None:
        response = self._book()

        self.assertEqual(response.status_code, status.HTTP_504_GATEWAY_TIMEOUT, response.data)
        self.assertEqual(response.data["error"]["kind"], "timeout")
        self.assertEqual(Booking.objects.count(), 0)

    def test_booking_deleted_before_lock_is_not_found(self) -> None:
        booking_id = self._book().data["id"]
        original_get = DjangoBookingRepository.get

        def gone_once_locked(repo, pk, lock=False):
            return None if lock else original_get(repo, pk)

        with mock.patch.object(DjangoBookingRepository, "get", autospec=True, side_effect=gone_once_locked):
            cancel = self.client.put(self._status_url(booking_id), {"status": "cancelled"}, format="json")
            delete = self.client.delete(reverse("booking-detail", args=[booking_id]))

        self.assertEqual(cancel.status_code, status.HTTP_404_NOT_FOUND, cancel.data)
        self.assertEqual(delete.status_code, status.HTTP_404_NOT_FOUND, delete.data)
        self.assertEqual(Booking.objects.get(pk=booking_id).status, Booking.Status.PENDING)

    # ===== scheduled completion =====

    def test_only_past_confirmed_bookings_are_completed(self) -> None:
        past = Booking.objects.create(
            user=self.user,
            space=self.space,
            date=timezone.localdate() - timedelta(days=1),
            start_time=time(9, 0),
            end_time=time(10, 0),
            status=Booking.Status.CONFIRMED,
        )
        upcoming = Booking.objects.create(
            user=self.user,
            space=self.space,
            date=self.day,
            start_time=time(9, 0),
            end_time=time(10, 0),
            status=Booking.Status.CONFIRMED,
        )

        self.assertEqual(complete_finished_bookings(), {"completed": 1, "failed": 0})

        past.refresh_from_db()
        upcoming.refresh_from_db()
        self.assertEqual(past.status, Booking.Status.COMPLETED)
        self.assertEqual(upcoming.status, Booking.Status.CONFIRMED)

    # ===== pre-booking queries =====

    def test_quote_uses_booking_pricing(self) -> None:
        response = self.client.post(
            reverse("booking-quote"),
            {"space_id": self.space.id, "start_time": "09:00", "end_time": "12:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_hours"], "3.00")
        self.assertEqual(response.data["total_price"], "120.00")
        self.assertFalse(Booking.objects.exists())

    def test_quote_rejects_empty_interval(self) -> None:
        response = self.client.post(
            reverse("booking-quote"),
            {"space_id": self.space.id, "start_time": "09:00", "end_time": "09:00"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_check_availability_reports_the_create_outcome(self) -> None:
        url = reverse("booking-check-availability")

        response = self.client.post(url, self._payload("11:00", "13:00"), format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["available"])
        self.assertEqual(response.data["quote"]["total_price"], "80.00")

        booking_id = self._book("09:00", "12:00").data["id"]
        response = self.client.post(url, self._payload("11:00", "13:00"), format="json")
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["reason"], "overlap")
        self.assertEqual(response.data["conflicting_booking_ids"], [booking_id])

        payload = self._payload("11:00", "13:00", date=str(self.day + timedelta(days=1)))
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.data["reason"], "unavailable")

    def test_slots_mark_booked_hours(self) -> None:
        self._book("09:00", "12:00")

        response = self.client.get(reverse("booking-slots"), {"space_id": self.space.id, "date": str(self.day)})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_slots"], 12)
        self.assertEqual(
            [slot["start_time"] for slot in response.data["occupied_slots"]],
            ["09:00:00", "10:00:00", "11:00:00"],
        )
        self.assertEqual(len(response.data["available_slots"]), 9)

    def test_schedule_lists_active_bookings_without_booker(self) -> None:
        booking_id = self._book().data["id"]
        cancelled_id = self._book("14:00", "15:00").data["id"]
        Booking.objects.filter(pk=cancelled_id).update(status=Booking.Status.CANCELLED)

        self.client.force_authenticate(self.other)
        response = self.client.get(
            reverse("booking-schedule"),
            {"space_id": self.space.id, "start_date": str(self.day), "end_date": str(self.day)},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([b["id"] for b in response.data["bookings"]], [booking_id])
        self.assertNotIn("user_id", response.data["bookings"][0])

    def test_overlapping_is_for_the_space_manager(self) -> None:
        self._book("09:00", "12:00")
        url = reverse("booking-overlapping")
        payload = self._payload("10:00", "11:00")

        self.assertEqual(self.client.post(url, payload, format="json").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.manager)
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["conflicts_found"])
        self.assertEqual(response.data["overlapping_bookings"][0]["user_id"], self.user.id)
