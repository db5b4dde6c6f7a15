import logging

import jwt
from django.conf import settings
from rest_framework import status
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView

from .hl7_utils import mask_hl7_message
from .models import HL7MaskLog
from .serializers import HL7MaskRequestSerializer

logger = logging.getLogger(__name__)

JWT_ALG = "HS256"


def validate_bearer_jwt(request):
    """
    Extract and validate a Bearer JWT from the Authorization header.

    Expected:
      Authorization: Bearer <token>

    Returns (claims, None) on success, (None, reason) otherwise.
    """

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None, "Missing or invalid Authorization header"

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        return None, "Empty JWT token"

    try:
        claims = jwt.decode(
            token,
            settings.HL7MASK_JWT_SECRET,
            algorithms=[JWT_ALG],
            audience=settings.HL7MASK_JWT_AUDIENCE,
            options={"require": ["exp", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        return None, "JWT has expired"
    except jwt.InvalidTokenError as e:
        return None, f"Invalid JWT: {e}"

    if claims.get("iss") != settings.HL7MASK_JWT_ISSUER:
        return None, "Invalid JWT issuer"

    return claims, None


class HL7MaskView(APIView):
    renderer_classes = [JSONRenderer]

    def post(self, request, *args, **kwargs):
        """
        Accepts either:
        1) JSON:  {"hl7_message": "<HL7 text>", "source_system": "..."}
        2) Plain text: raw HL7 message in the body
        """
        claims = None
        if settings.HL7MASK_REQUIRE_JWT:
            claims, error = validate_bearer_jwt(request)
            if error:
                logger.warning("Rejected mask request: %s", error)
                return Response({"error": error}, status=status.HTTP_401_UNAUTHORIZED)

        if request.content_type and "application/json" in request.content_type:
            ser = HL7MaskRequestSerializer(data=request.data)
            if not ser.is_valid():
                return Response({"error": "Invalid request", "details": ser.errors}, status=status.HTTP_400_BAD_REQUEST)
            hl7_message = ser.validated_data["hl7_message"]
            source_system = ser.validated_data.get("source_system", "")
        else:
            # Non-JSON: treat the whole body as HL7 text
            hl7_message = request.body.decode("utf-8", errors="replace")
            source_system = ""

        if not source_system and claims:
            source_system = str(claims.get("sub", ""))[:50]

        result = mask_hl7_message(hl7_message)
        if "error" in result:
            return Response(result, status=status.HTTP_400_BAD_REQUEST)

        log = HL7MaskLog.objects.create(
            source_system=source_system,
            message_type=result["message_type"][:20],
            segment_count=result["segment_count"],
            masked_segment_count=result["masked_segment_count"],
            masked_field_count=result["masked_field_count"],
            input_length=len(hl7_message),
        )

        return Response({**result, "log_id": log.id}, status=status.HTTP_200_OK)
