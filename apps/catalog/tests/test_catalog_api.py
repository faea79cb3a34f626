"""API tests for the service catalog."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import PricingOption, Service
from apps.users.models import User


class ServiceAPITests(APITestCase):
    def setUp(self) -> None:
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="Password123",
            role=User.RoleChoices.MANAGER,
        )
        self.customer = User.objects.create_user(email="guest@example.com", password="Password123")
        self.room = Service.objects.create(
            code="family-room",
            name="Family Room",
            category=Service.Category.ROOMS,
            max_guests=6,
            pricing_model=Service.PricingModel.DURATION,
        )
        PricingOption.objects.create(
            service=self.room, code="12h", label="12 hours", price=Decimal("2500"), hours=12
        )
        Service.objects.create(
            code="old-hall",
            name="Old Hall",
            max_guests=50,
            pricing_model=Service.PricingModel.DURATION,
            is_active=False,
        )

    def test_public_list_hides_inactive_services(self) -> None:
        response = self.client.get(reverse("service-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [item["code"] for item in response.data]
        self.assertEqual(codes, ["family-room"])

    def test_staff_creates_time_slot_service(self) -> None:
        self.client.force_authenticate(self.manager)
        payload = {
            "code": "event-hall",
            "name": "Event Hall",
            "category": Service.Category.VENUES,
            "max_guests": 120,
            "pricing_model": Service.PricingModel.TIME_SLOT,
            "inclusions": ["Tables", "Chairs"],
            "pricing_options": [
                {
                    "code": "day",
                    "label": "Day event",
                    "price": "15000.00",
                    "time_slot": "day",
                    "guest_min": 1,
                    "guest_max": 120,
                }
            ],
        }
        response = self.client.post(reverse("service-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(response.data["pricing_options"]), 1)

    def test_option_shape_must_match_pricing_model(self) -> None:
        self.client.force_authenticate(self.manager)
        payload = {
            "code": "cottage",
            "name": "Cottage",
            "max_guests": 8,
            "pricing_model": Service.PricingModel.DURATION,
            "pricing_options": [
                {"code": "day", "label": "Day", "price": "800.00", "time_slot": "day"},
            ],
        }
        response = self.client.post(reverse("service-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("pricing_options", response.data)

    def test_customer_cannot_create_service(self) -> None:
        self.client.force_authenticate(self.customer)
        response = self.client.post(reverse("service-list"), {"code": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_quote_returns_computed_checkout(self) -> None:
        url = reverse("service-quote", kwargs={"code": self.room.code})
        response = self.client.post(
            url,
            {"option": "12h", "check_in": "2030-05-01T08:00:00+08:00", "guests": 2},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["base_price"], Decimal("2500.00"))
        self.assertEqual(response.data["downpayment"], Decimal("1250.00"))
        self.assertEqual(response.data["check_out"].hour, 20)

    def test_quote_unknown_option_returns_404(self) -> None:
        url = reverse("service-quote", kwargs={"code": self.room.code})
        response = self.client.post(
            url, {"option": "nope", "check_in": "2030-05-01T08:00:00+08:00"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
