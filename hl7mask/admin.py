# hl7mask/admin.py
from django.contrib import admin

from .models import HL7MaskLog


@admin.register(HL7MaskLog)
class HL7MaskLogAdmin(admin.ModelAdmin):
    date_hierarchy = "created_at"
    list_display = (
        "created_at",
        "message_type",
        "source_system",
        "segment_count",
        "masked_segment_count",
        "masked_field_count",
    )
    list_filter = ("message_type", "source_system", "created_at")
    search_fields = ("source_system", "message_type")
    readonly_fields = ("created_at",)
    list_per_page = 50
