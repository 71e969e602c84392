"""Gateway signature verification."""

import hashlib
import hmac
import json

import pytest

from inhalestays.gateways.razorpay import RazorpayGateway, compute_signature, signatures_match

KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"


@pytest.fixture
def gateway():
    return RazorpayGateway(
        key_id="rzp_test_key",
        key_secret=KEY_SECRET,
        webhook_secret=WEBHOOK_SECRET,
    )


def _mutate(value: str, index: int) -> str:
    replacement = "0" if value[index] != "0" else "1"
    return value[:index] + replacement + value[index + 1:]


def test_compute_signature_is_hex_hmac_sha256():
    expected = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
    assert compute_signature("secret", "order_1|pay_1") == expected
    assert compute_signature("secret", b"order_1|pay_1") == expected


def test_valid_payment_signature(gateway):
    signature = compute_signature(KEY_SECRET, "order_ABC|pay_XYZ")
    assert gateway.verify_payment_signature("order_ABC", "pay_XYZ", signature)


def test_every_single_character_mutation_of_signature_is_rejected(gateway):
    signature = compute_signature(KEY_SECRET, "order_ABC|pay_XYZ")
    for index in range(len(signature)):
        assert not gateway.verify_payment_signature(
            "order_ABC", "pay_XYZ", _mutate(signature, index)
        )


def test_mutated_order_or_payment_id_is_rejected(gateway):
    signature = compute_signature(KEY_SECRET, "order_ABC|pay_XYZ")
    for index in range(len("order_ABC")):
        assert not gateway.verify_payment_signature(
            _mutate("order_ABC", index), "pay_XYZ", signature
        )
    assert not gateway.verify_payment_signature("order_ABC", "pay_XYZ1", signature)


def test_signature_with_wrong_secret_is_rejected(gateway):
    signature = compute_signature("another_secret", "order_ABC|pay_XYZ")
    assert not gateway.verify_payment_signature("order_ABC", "pay_XYZ", signature)


def test_empty_signature_is_rejected(gateway):
    assert not signatures_match("abc", "")
    assert not signatures_match("abc", None)
    assert not gateway.verify_payment_signature("order_ABC", "pay_XYZ", "")


def test_unconfigured_gateway_rejects_everything(monkeypatch):
    unconfigured = RazorpayGateway(key_id="rzp", key_secret="", webhook_secret="")
    monkeypatch.setattr(unconfigured, "key_secret", None)
    monkeypatch.setattr(unconfigured, "webhook_secret", None)
    assert not unconfigured.is_configured
    assert not unconfigured.verify_payment_signature("o", "p", compute_signature("", "o|p"))
    assert unconfigured.verify_webhook(b"{}", compute_signature("", b"{}")) is None


def test_webhook_signature_over_raw_body(gateway):
    body = json.dumps({"event": "payment.captured"}).encode()
    signature = compute_signature(WEBHOOK_SECRET, body)
    assert gateway.verify_webhook(body, signature) == {"event": "payment.captured"}

    # Re-serialized body no longer matches
    assert gateway.verify_webhook(body + b" ", signature) is None
    assert gateway.verify_webhook(body, _mutate(signature, 0)) is None


def test_webhook_with_non_json_body_is_rejected(gateway):
    body = b"not json"
    assert gateway.verify_webhook(body, compute_signature(WEBHOOK_SECRET, body)) is None
