from rest_framework import serializers


class HL7MaskRequestSerializer(serializers.Serializer):
    # whitespace is part of the message, keep it as sent
    hl7_message = serializers.CharField(allow_blank=True, trim_whitespace=False)
    source_system = serializers.CharField(required=False, allow_blank=True, max_length=50, default="")
