"""Blocked date ranges restricting bookings."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class BlockedRangeQuerySet(models.QuerySet):
    def active(self):
        """Ranges that have not ended yet."""
        return self.filter(end_date__gte=timezone.localdate())

    def for_service(self, service_id):
        return self.filter(
            models.Q(applies_to_all_services=True) | models.Q(services__pk=service_id)
        ).distinct()


class BlockedRange(models.Model):
    """
    Staff-declared period during which services cannot be booked.

    Both dates are inclusive. A range without services applies to all of
    them. Ranges are created and hard-deleted, never edited.
    """

    start_date = models.DateField()
    end_date = models.DateField()
    services = models.ManyToManyField(
        "catalog.Service",
        blank=True,
        related_name="blocked_ranges",
    )
    applies_to_all_services = models.BooleanField(default=True)
    reason = models.CharField(max_length=255)
    blocked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="blocked_ranges",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = BlockedRangeQuerySet.as_manager()

    class Meta:
        verbose_name = _("Blocked range")
        verbose_name_plural = _("Blocked ranges")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="blocked_range_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="blocked_range_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.start_date}..{self.end_date}: {self.reason}"
