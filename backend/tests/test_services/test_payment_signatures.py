"""Unit tests for payment amount conversion and signature checks."""

import hashlib
import hmac
from decimal import Decimal

import pytest

from travelworld.services.payments import compute_signature, to_minor_units, verify_signature


class TestMinorUnits:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [(Decimal("1"), 100), (Decimal("499.50"), 49950), (Decimal("0.01"), 1)],
    )
    def test_rupees_to_paise(self, amount, expected):
        assert to_minor_units(amount) == expected


class TestSignature:
    def test_matches_hmac_sha256(self):
        expected = hmac.new(b"secret", b"order_9|pay_9", hashlib.sha256).hexdigest()
        assert compute_signature("order_9", "pay_9", "secret") == expected

    def test_verify(self):
        signature = compute_signature("order_9", "pay_9", "secret")
        assert verify_signature("order_9", "pay_9", signature, secret="secret") is True
        assert verify_signature("order_9", "pay_8", signature, secret="secret") is False
        assert verify_signature("order_9", "pay_9", signature, secret="other") is False

    def test_missing_secret_never_verifies(self):
        signature = compute_signature("order_9", "pay_9", "")
        assert verify_signature("order_9", "pay_9", signature, secret="") is False

    def test_non_ascii_signature_is_a_mismatch(self):
        assert verify_signature("order_9", "pay_9", "é", secret="secret") is False
