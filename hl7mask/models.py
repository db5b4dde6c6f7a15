from django.db import models


class HL7MaskLog(models.Model):
    """Audit row per masking request. Counts only, no message content."""

    created_at = models.DateTimeField(auto_now_add=True)
    source_system = models.CharField(max_length=50, blank=True)
    message_type = models.CharField(max_length=20, blank=True)
    segment_count = models.IntegerField(default=0)
    masked_segment_count = models.IntegerField(default=0)
    masked_field_count = models.IntegerField(default=0)
    input_length = models.IntegerField(default=0)

    def __str__(self):
        return f"{self.created_at} {self.message_type} {self.masked_field_count} field(s) masked"
