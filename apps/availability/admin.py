from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import BlockedRange


@admin.register(BlockedRange)
class BlockedRangeAdmin(admin.ModelAdmin):
    list_display = ("start_date", "end_date", "applies_to_all_services", "reason", "blocked_by", "created_at")
    list_filter = ("applies_to_all_services",)
    search_fields = ("reason",)
    filter_horizontal = ("services",)
    readonly_fields = ("created_at",)
