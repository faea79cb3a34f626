from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import PricingOption, Service


class PricingOptionInline(admin.TabularInline):
    model = PricingOption
    extra = 0


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "category", "pricing_model", "max_guests", "is_active")
    list_filter = ("category", "pricing_model", "is_active")
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")
    inlines = [PricingOptionInline]
