"""API tests for authentication endpoints."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self) -> None:
        payload = {
            "email": "guest@example.com",
            "phone": "+639171234567",
            "first_name": "Guest",
            "last_name": "User",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("tokens", response.data)
        self.assertEqual(response.data["user"]["email"], payload["email"])
        self.assertEqual(response.data["user"]["role"], User.RoleChoices.CUSTOMER)
        self.assertFalse(response.data["user"]["is_resort_staff"])

    def test_register_rejects_duplicate_email(self) -> None:
        User.objects.create_user(email="taken@example.com", password="StrongPass123")
        payload = {
            "email": "taken@example.com",
            "phone": "+639170000001",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_login_limited_attempts(self) -> None:
        user = User.objects.create_user(
            email="lock@example.com",
            phone="+639177777777",
            password="CorrectPassword1",
        )

        url = reverse("auth:login")
        wrong_payload = {"login": user.email, "password": "wrong"}
        for _ in range(5):
            response = self.client.post(url, wrong_payload, format="json")

        user.refresh_from_db()
        self.assertTrue(user.is_locked)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        # After lock expires user can login again
        user.locked_until = timezone.now() - timedelta(minutes=1)
        user.save(update_fields=["locked_until"])
        response = self.client.post(url, {"login": user.email, "password": "CorrectPassword1"})
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])

    def test_login_by_phone_and_access_me(self) -> None:
        User.objects.create_user(
            email="phone@example.com",
            phone="+639175550000",
            password="CorrectPassword1",
        )
        response = self.client.post(
            reverse("auth:login"),
            {"login": "+63917 555-0000", "password": "CorrectPassword1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        access = response.data["tokens"]["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        me = self.client.get(reverse("auth:me"))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["email"], "phone@example.com")

    def test_staff_roles(self) -> None:
        manager = User.objects.create_user(
            email="manager@example.com", password="x" * 10, role=User.RoleChoices.MANAGER
        )
        customer = User.objects.create_user(email="customer@example.com", password="x" * 10)
        admin = User.objects.create_superuser(email="root@example.com", password="x" * 10)

        self.assertTrue(manager.is_resort_staff())
        self.assertTrue(admin.is_resort_staff())
        self.assertFalse(customer.is_resort_staff())
