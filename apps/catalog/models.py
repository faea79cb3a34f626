"""Catalog models for the resort.

A service is a bookable amenity (room, venue, pool, cottage). Its pricing
shape is declared explicitly through ``pricing_model``: duration-based
services sell fixed blocks of hours, time-slot services sell fixed day or
night windows with a guest range per slot.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Service(models.Model):
    class Category(models.TextChoices):
        ROOMS = "rooms", _("Rooms")
        VENUES = "venues", _("Venues")
        POOLS = "pools", _("Pools")
        COTTAGES = "cottages", _("Cottages")
        OTHER = "other", _("Other")

    class PricingModel(models.TextChoices):
        DURATION = "duration", _("Duration based")
        TIME_SLOT = "time_slot", _("Time slot based")

    code = models.SlugField(max_length=64, unique=True)
    name = models.CharField(max_length=150)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    description = models.TextField(blank=True)
    max_guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    pricing_model = models.CharField(max_length=20, choices=PricingModel.choices)
    inclusions = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Service")
        verbose_name_plural = _("Services")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @property
    def is_time_slot_based(self) -> bool:
        return self.pricing_model == self.PricingModel.TIME_SLOT


class PricingOption(models.Model):
    """A sellable duration or time slot of a service."""

    class TimeSlot(models.TextChoices):
        DAY = "day", _("Day (07:00-17:00)")
        NIGHT = "night", _("Night (19:00-05:00)")

    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="pricing_options")
    code = models.SlugField(max_length=64)
    label = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    hours = models.PositiveIntegerField(null=True, blank=True)
    time_slot = models.CharField(max_length=10, choices=TimeSlot.choices, blank=True)
    guest_min = models.PositiveIntegerField(null=True, blank=True)
    guest_max = models.PositiveIntegerField(null=True, blank=True)
    sort_order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Pricing option")
        verbose_name_plural = _("Pricing options")
        ordering = ["sort_order", "id"]
        constraints = [
            models.UniqueConstraint(fields=["service", "code"], name="unique_pricing_option_code"),
        ]

    def __str__(self) -> str:
        return f"{self.service.name}: {self.label}"

    def clean(self) -> None:
        from .pricing import option_shape_errors

        errors = option_shape_errors(
            self.service.pricing_model,
            hours=self.hours,
            time_slot=self.time_slot,
            guest_min=self.guest_min,
            guest_max=self.guest_max,
        )
        if errors:
            raise ValidationError(errors)
