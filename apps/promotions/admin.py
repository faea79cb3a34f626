from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import PromoCode


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_percentage", "expiration_date", "times_used", "usage_limit", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code",)
    readonly_fields = ("times_used", "created_at")
