"""API tests for blocked ranges and the availability check endpoint."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.models import BlockedRange
from apps.reservations.tests.factories import local_datetime, make_reservation, make_service, make_user
from apps.users.models import User


class BlockedRangeAPITests(APITestCase):
    def setUp(self) -> None:
        self.manager = make_user(User.RoleChoices.MANAGER)
        self.customer = make_user()
        self.room = make_service("deluxe-room")
        today = timezone.localdate()
        self.past = BlockedRange.objects.create(
            start_date=today - timedelta(days=10),
            end_date=today - timedelta(days=5),
            reason="Old maintenance",
        )
        self.upcoming = BlockedRange.objects.create(
            start_date=today + timedelta(days=3),
            end_date=today + timedelta(days=4),
            reason="Maintenance",
        )

    def test_public_list_contains_only_active_ranges(self) -> None:
        response = self.client.get(reverse("blocked-range-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in response.data], [self.upcoming.pk])

    def test_all_ranges_are_staff_only(self) -> None:
        response = self.client.get(reverse("blocked-range-all"))
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

        self.client.force_authenticate(self.manager)
        response = self.client.get(reverse("blocked-range-all"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_staff_creates_range_for_selected_services(self) -> None:
        self.client.force_authenticate(self.manager)
        start = timezone.localdate() + timedelta(days=7)
        payload = {
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=1)).isoformat(),
            "services": ["deluxe-room"],
            "reason": "  Deep cleaning ",
        }
        response = self.client.post(reverse("blocked-range-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["reason"], "Deep cleaning")
        self.assertEqual(response.data["services"], ["deluxe-room"])
        self.assertFalse(response.data["applies_to_all_services"])
        self.assertEqual(response.data["blocked_by"], self.manager.email)

    def test_range_without_services_applies_to_all(self) -> None:
        self.client.force_authenticate(self.manager)
        start = timezone.localdate() + timedelta(days=7)
        payload = {"start_date": start.isoformat(), "end_date": start.isoformat(), "reason": "Holiday"}
        response = self.client.post(reverse("blocked-range-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["applies_to_all_services"])

    def test_invalid_ranges_are_rejected(self) -> None:
        self.client.force_authenticate(self.manager)
        today = timezone.localdate()
        cases = [
            {"start_date": today - timedelta(days=1), "end_date": today, "reason": "Past"},
            {"start_date": today + timedelta(days=5), "end_date": today + timedelta(days=4), "reason": "Backwards"},
            {"start_date": today, "end_date": today, "reason": "   "},
        ]
        for payload in cases:
            body = {key: str(value) for key, value in payload.items()}
            response = self.client.post(reverse("blocked-range-list"), body, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, body)
        self.assertEqual(BlockedRange.objects.count(), 2)

    def test_customer_cannot_create_or_delete(self) -> None:
        self.client.force_authenticate(self.customer)
        start = timezone.localdate() + timedelta(days=7)
        payload = {"start_date": start.isoformat(), "end_date": start.isoformat(), "reason": "Nope"}
        response = self.client.post(reverse("blocked-range-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(reverse("blocked-range-detail", args=[self.upcoming.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_deletes_range(self) -> None:
        self.client.force_authenticate(self.manager)
        response = self.client.delete(reverse("blocked-range-detail", args=[self.upcoming.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(BlockedRange.objects.filter(pk=self.upcoming.pk).exists())


class AvailabilityCheckAPITests(APITestCase):
    def setUp(self) -> None:
        self.room = make_service("deluxe-room")

    def _check(self, check_in, check_out):
        payload = {
            "service": "deluxe-room",
            "check_in": check_in.isoformat(),
            "check_out": check_out.isoformat(),
        }
        return self.client.post(reverse("availability-check"), payload, format="json")

    def test_free_window(self) -> None:
        response = self._check(local_datetime(10, 14), local_datetime(11, 12))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"available": True, "conflict_reason": None})

    def test_maintenance_block(self) -> None:
        BlockedRange.objects.create(
            start_date=local_datetime(10).date(),
            end_date=local_datetime(12).date(),
            reason="Maintenance",
        )
        response = self._check(local_datetime(11, 8), local_datetime(11, 18))
        self.assertEqual(response.data, {"available": False, "conflict_reason": "Maintenance"})

    def test_booked_window(self) -> None:
        make_reservation(self.room, local_datetime(10, 14), local_datetime(11, 12))
        response = self._check(local_datetime(11, 8), local_datetime(11, 20))
        self.assertEqual(response.data, {"available": False, "conflict_reason": "already booked"})

    def test_window_from_pricing_option(self) -> None:
        make_reservation(self.room, local_datetime(10, 14), local_datetime(11, 12))
        payload = {"service": "deluxe-room", "check_in": local_datetime(11, 10).isoformat(), "option": "22h"}
        response = self.client.post(reverse("availability-check"), payload, format="json")
        self.assertEqual(response.data["available"], False)

    def test_reversed_window_is_bad_request(self) -> None:
        response = self._check(local_datetime(11, 12), local_datetime(10, 14))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_service_is_bad_request(self) -> None:
        payload = {
            "service": "missing",
            "check_in": local_datetime(10).isoformat(),
            "check_out": local_datetime(11).isoformat(),
        }
        response = self.client.post(reverse("availability-check"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
