from datetime import datetime, timedelta, timezone

import jwt
import pytest
from rest_framework.test import APIClient

from hl7mask.models import HL7MaskLog

SAMPLE = "MSH|^~\\&|MIRTH|SENDING|RECV|FAC|202512181200||ADT^A01|MSG00001|P|2.3\rPID|1||12345^^^MRN~999^^^SSN||DOE^JOHN||19800101|M\r"

URL = "/api/mask/"


@pytest.fixture
def jwt_settings(settings):
    settings.HL7MASK_JWT_SECRET = "test-secret"
    settings.HL7MASK_JWT_AUDIENCE = "hl7-mask"
    settings.HL7MASK_JWT_ISSUER = "django-hl7-mask"
    settings.HL7MASK_REQUIRE_JWT = True
    return settings


def make_token(sub="mirth", iss="django-hl7-mask", expires_in=300, secret="test-secret"):
    claims = {
        "sub": sub,
        "iss": iss,
        "aud": "hl7-mask",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth(token):
    return {"HTTP_AUTHORIZATION": f"Bearer {token}"}


@pytest.mark.django_db
def test_mask_json_request(jwt_settings):
    client = APIClient()
    resp = client.post(URL, {"hl7_message": SAMPLE}, format="json", **auth(make_token()))

    assert resp.status_code == 200
    body = resp.json()
    assert body["message_type"] == "ADT^A01"
    assert "PID|1||12345^^^MRN~***^^^***||***^****||********|*\r" in body["masked_hl7"]

    log = HL7MaskLog.objects.get(pk=body["log_id"])
    assert log.source_system == "mirth"
    assert log.masked_field_count == 4
    assert log.input_length == len(SAMPLE)


@pytest.mark.django_db
def test_mask_plain_text_request(jwt_settings):
    client = APIClient()
    resp = client.post(URL, data=SAMPLE, content_type="text/plain", **auth(make_token()))

    assert resp.status_code == 200
    assert "DOE^JOHN" not in resp.json()["masked_hl7"]
    assert HL7MaskLog.objects.count() == 1


@pytest.mark.django_db
def test_source_system_from_payload(jwt_settings):
    client = APIClient()
    resp = client.post(URL, {"hl7_message": SAMPLE, "source_system": "EPIC"}, format="json", **auth(make_token()))

    assert resp.status_code == 200
    assert HL7MaskLog.objects.get().source_system == "EPIC"


@pytest.mark.django_db
def test_null_message_rejected(jwt_settings):
    client = APIClient()
    resp = client.post(URL, {"hl7_message": None}, format="json", **auth(make_token()))

    assert resp.status_code == 400
    assert "error" in resp.json()
    assert HL7MaskLog.objects.count() == 0


@pytest.mark.django_db
def test_missing_token_rejected(jwt_settings):
    resp = APIClient().post(URL, {"hl7_message": SAMPLE}, format="json")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Missing or invalid Authorization header"


@pytest.mark.django_db
def test_expired_token_rejected(jwt_settings):
    resp = APIClient().post(URL, {"hl7_message": SAMPLE}, format="json", **auth(make_token(expires_in=-60)))
    assert resp.status_code == 401
    assert resp.json()["error"] == "JWT has expired"


@pytest.mark.django_db
def test_wrong_issuer_and_secret_rejected(jwt_settings):
    client = APIClient()
    resp = client.post(URL, {"hl7_message": SAMPLE}, format="json", **auth(make_token(iss="someone-else")))
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid JWT issuer"

    resp = client.post(URL, {"hl7_message": SAMPLE}, format="json", **auth(make_token(secret="wrong")))
    assert resp.status_code == 401
    assert resp.json()["error"].startswith("Invalid JWT")


@pytest.mark.django_db
def test_jwt_can_be_disabled(settings):
    settings.HL7MASK_REQUIRE_JWT = False
    resp = APIClient().post(URL, {"hl7_message": ""}, format="json")

    assert resp.status_code == 200
    assert resp.json()["masked_hl7"] == ""
    assert resp.json()["segment_count"] == 0


@pytest.mark.django_db
def test_invalid_utf8_bytes_are_replaced_not_dropped(settings):
    settings.HL7MASK_REQUIRE_JWT = False
    resp = APIClient().post(URL, data=b"PID|1||1||DOE\xff", content_type="text/plain")

    assert resp.status_code == 200
    assert resp.json()["masked_hl7"] == "PID|1||1||****\r"
    assert HL7MaskLog.objects.get().input_length == len("PID|1||1||DOE\ufffd")
