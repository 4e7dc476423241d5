import hashlib
import json
from datetime import datetime, timedelta, timezone

import pytest

from iep.services.backup_service import backup_health, manifest_checksum
from iep.services.webhook_service import build_delivery, sign_payload, verify_signature

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
SECRET = "whsec_test"


@pytest.mark.parametrize(
    "hours_ago, expected",
    [(None, "critical"), (2, "healthy"), (24, "healthy"), (25, "warning"), (48, "warning"), (49, "critical")],
)
def test_backup_health(hours_ago, expected):
    last = None if hours_ago is None else NOW - timedelta(hours=hours_ago)
    assert backup_health(last, NOW) == expected


def test_manifest_checksum_is_key_order_independent():
    first = manifest_checksum({"tables": {"students": 5, "grades": 12}, "tenant": "ataturk"})
    second = manifest_checksum({"tenant": "ataturk", "tables": {"grades": 12, "students": 5}})

    assert first == second
    checksum, size = first
    body = json.dumps({"tables": {"grades": 12, "students": 5}, "tenant": "ataturk"}, sort_keys=True).encode()
    assert checksum == hashlib.sha256(body).hexdigest()
    assert size == len(body)


def test_sign_and_verify():
    signature = sign_payload('{"event":"student.created"}', SECRET)

    assert signature.startswith("sha256=")
    assert len(signature) == len("sha256=") + 64
    assert verify_signature('{"event":"student.created"}', SECRET, signature)
    assert not verify_signature('{"event":"student.deleted"}', SECRET, signature)
    assert not verify_signature('{"event":"student.created"}', "other", signature)


def test_build_delivery_headers_match_body():
    body, headers = build_delivery("grade.created", {"score": 95}, SECRET, delivery_id="evt-1")

    envelope = json.loads(body)
    assert envelope["event"] == "grade.created"
    assert envelope["data"] == {"score": 95}
    assert envelope["webhook_id"] == "evt-1"
    assert "test" not in envelope

    assert headers["X-IEP-Event"] == "grade.created"
    assert headers["X-IEP-Delivery"] == "evt-1"
    assert headers["Content-Type"] == "application/json"
    assert verify_signature(body, SECRET, headers["X-IEP-Signature"])
    assert "X-IEP-Test" not in headers


def test_build_test_delivery():
    body, headers = build_delivery("webhook.test", {}, SECRET, test=True)

    assert json.loads(body)["test"] is True
    assert headers["X-IEP-Test"] == "true"
    assert "X-IEP-Delivery" not in headers
