import hmac
from unittest.mock import patch

from django.test import SimpleTestCase

from . import plans
from .signatures import compute_payment_signature, verify_payment_signature

SECRET = "rzp-test-secret"


class VerifyPaymentSignatureTests(SimpleTestCase):
    def setUp(self):
        self.order_id = "order_Nx8Y2kQp1"
        self.payment_id = "pay_Nx8Z9aBcD"
        self.signature = compute_payment_signature(self.order_id, self.payment_id, SECRET)

    def test_known_vector(self):
        # hmac_sha256("key", "order_1|pay_1")
        expected = hmac.new(b"key", b"order_1|pay_1", "sha256").hexdigest()
        self.assertEqual(compute_payment_signature("order_1", "pay_1", "key"), expected)
        self.assertEqual(expected, expected.lower())

    def test_correct_signature_accepted(self):
        self.assertTrue(verify_payment_signature(self.order_id, self.payment_id, self.signature, SECRET))

    def test_any_single_bit_flip_rejected(self):
        for pos in range(len(self.signature)):
            for bit in range(7):
                c = self.signature[pos]
                flipped = self.signature[:pos] + chr(ord(c) ^ (1 << bit)) + self.signature[pos + 1:]
                with self.subTest(pos=pos, bit=bit):
                    self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, flipped, SECRET))

    def test_wrong_secret_or_swapped_ids_rejected(self):
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, self.signature, "other"))
        self.assertFalse(verify_payment_signature(self.payment_id, self.order_id, self.signature, SECRET))

    def test_uppercase_hex_rejected(self):
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, self.signature.upper(), SECRET))

    def test_malformed_input_returns_false(self):
        self.assertFalse(verify_payment_signature(None, self.payment_id, self.signature, SECRET))
        self.assertFalse(verify_payment_signature(self.order_id, None, self.signature, SECRET))
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, None, SECRET))
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, 123, SECRET))
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, self.signature, ""))
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, "", SECRET))
        self.assertFalse(verify_payment_signature(self.order_id, self.payment_id, "é" * 64, SECRET))

    def test_comparison_is_constant_time(self):
        with patch("memberships.signatures.hmac.compare_digest", wraps=hmac.compare_digest) as compare:
            verify_payment_signature(self.order_id, self.payment_id, "0" * 64, SECRET)
        compare.assert_called_once_with(self.signature, "0" * 64)


class PlanCatalogTests(SimpleTestCase):
    def test_known_plans(self):
        self.assertEqual(plans.duration_days("basic"), 30)
        self.assertEqual(plans.duration_days("premium"), 90)
        self.assertEqual(plans.duration_days("enterprise"), 180)

    def test_unknown_plans_get_default(self):
        for plan_id in ("", "gold", "BASIC", None, "enterprise "):
            with self.subTest(plan_id=plan_id):
                self.assertEqual(plans.duration_days(plan_id), plans.DEFAULT_DURATION_DAYS)
        self.assertEqual(plans.DEFAULT_DURATION_DAYS, 30)

    def test_get_plan(self):
        self.assertEqual(plans.get_plan("premium").name, "Premium")
        self.assertIsNone(plans.get_plan("gold"))
