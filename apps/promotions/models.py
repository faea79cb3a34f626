from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PromoCodeQuerySet(models.QuerySet):
    def active(self):
        """Enabled, not expired and still under the usage limit."""
        return self.filter(
            is_active=True,
            expiration_date__gte=timezone.localdate(),
            times_used__lt=models.F("usage_limit"),
        )


class PromoCode(models.Model):
    code = models.CharField(max_length=32, unique=True)
    description = models.CharField(max_length=255, blank=True)
    discount_percentage = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01")), MaxValueValidator(Decimal("1.00"))],
        help_text=_("Fraction of the subtotal, e.g. 0.10 for 10%."),
    )
    expiration_date = models.DateField()
    min_purchase_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    usage_limit = models.PositiveIntegerField(default=50)
    times_used = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PromoCodeQuerySet.as_manager()

    class Meta:
        verbose_name = _("Promo code")
        verbose_name_plural = _("Promo codes")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(discount_percentage__gte=Decimal("0.01"))
                & models.Q(discount_percentage__lte=Decimal("1.00")),
                name="promo_code_discount_range",
            ),
        ]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):  # type: ignore
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_expired(self) -> bool:
        return self.expiration_date < timezone.localdate()

    @property
    def is_exhausted(self) -> bool:
        return self.times_used >= self.usage_limit
