from django.apps import AppConfig


class Hl7MaskConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hl7mask"
    verbose_name = "HL7 masking"
