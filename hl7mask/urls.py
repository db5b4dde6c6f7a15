# hl7mask/urls.py
from django.urls import path

from hl7mask.views import HL7MaskView

urlpatterns = [
    path("api/mask/", HL7MaskView.as_view(), name="hl7-mask"),
]
