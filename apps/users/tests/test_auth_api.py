"""API tests for authentication and user endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification
from apps.users.models import User


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self) -> None:
        payload = {
            "email": "newcomer@example.com",
            "phone": "+15550001111",
            "first_name": "New",
            "last_name": "Comer",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse("auth:register"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertEqual(response.data["user"]["email"], payload["email"])
        self.assertEqual(response.data["user"]["role"], User.RoleChoices.USER)
        user = User.objects.get(email=payload["email"])
        self.assertTrue(
            Notification.objects.filter(user=user, channel=Notification.Channel.USER_REGISTRATION).exists()
        )

    def test_register_rejects_mismatched_passwords(self) -> None:
        payload = {
            "email": "typo@example.com",
            "password": "StrongPass123",
            "password_confirm": "StrongPass124",
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["kind"], "validation_error")
        self.assertIn("password_confirm", response.data["error"]["details"])

    def test_token_pair_for_valid_credentials(self) -> None:
        User.objects.create_user(email="login@example.com", password="CorrectPassword1")

        response = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "login@example.com", "password": "CorrectPassword1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("refresh", response.data)

        refreshed = self.client.post(
            reverse("auth:token_refresh"), {"refresh": response.data["refresh"]}, format="json"
        )
        self.assertEqual(refreshed.status_code, status.HTTP_200_OK)

    def test_wrong_password_is_unauthorized(self) -> None:
        User.objects.create_user(email="login@example.com", password="CorrectPassword1")
        response = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "login@example.com", "password": "wrong"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["error"]["kind"], "unauthorized")

    def test_me_reads_and_updates_push_token(self) -> None:
        user = User.objects.create_user(email="me@example.com", password="MyPassword1")
        self.client.force_authenticate(user)

        response = self.client.patch(reverse("auth:me"), {"fcm_token": "device-1", "role": "admin"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        user.refresh_from_db()
        self.assertEqual(user.fcm_token, "device-1")
        self.assertEqual(user.role, User.RoleChoices.USER)

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("auth:me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserAdminAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", role=User.RoleChoices.ADMIN
        )
        self.user = User.objects.create_user(email="user@example.com", password="UserPass123")

    def test_admin_promotes_user_to_manager(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse("user-set-role", args=[self.user.id]), {"role": "manager"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_manager())

    def test_unknown_role_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse("user-set-role", args=[self.user.id]), {"role": "owner"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_plain_user_cannot_list_users(self) -> None:
        self.client.force_authenticate(self.user)
        response = self.client.get(reverse("user-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
