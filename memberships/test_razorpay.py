from unittest.mock import Mock

import requests
from django.test import SimpleTestCase, override_settings

from .exceptions import GatewayError, GatewayTimeout
from .integrations.razorpay import RazorpayClient, RazorpayConfig


class FakeResponse:
    def __init__(self, status_code, data=None, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text

    def json(self):
        if self._data is None:
            raise ValueError("no json")
        return self._data


class RazorpayClientTests(SimpleTestCase):
    def setUp(self):
        self.config = RazorpayConfig(key_id="rzp_test_key", key_secret="shh", base_url="https://api.example.test/v1", timeout=7)
        self.session = Mock()
        self.client = RazorpayClient(self.config, session=self.session)

    def _create(self):
        return self.client.create_order(
            amount_minor=49900, currency="INR", receipt="receipt_1", notes={"planId": "basic"}
        )

    def test_posts_order_with_basic_auth_and_timeout(self):
        self.session.post.return_value = FakeResponse(200, {"id": "order_ABC", "amount": 49900, "currency": "INR"})

        data = self._create()

        self.assertEqual(data["id"], "order_ABC")
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://api.example.test/v1/orders")
        self.assertEqual(kwargs["json"], {
            "amount": 49900, "currency": "INR", "receipt": "receipt_1", "notes": {"planId": "basic"},
        })
        self.assertEqual((kwargs["auth"].username, kwargs["auth"].password), ("rzp_test_key", "shh"))
        self.assertEqual(kwargs["timeout"], 7)

    def test_timeout_raises_gateway_timeout(self):
        self.session.post.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(GatewayTimeout):
            self._create()

    def test_connection_error_raises_gateway_error(self):
        self.session.post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(GatewayError) as cm:
            self._create()
        self.assertNotIsInstance(cm.exception, GatewayTimeout)

    def test_error_status_raises_gateway_error(self):
        self.session.post.return_value = FakeResponse(401, {"error": {"code": "BAD_REQUEST_ERROR"}})
        with self.assertRaises(GatewayError) as cm:
            self._create()
        self.assertIn("RAZORPAY_KEY_ID", str(cm.exception))
        self.assertNotIn("shh", str(cm.exception))

    def test_non_json_response(self):
        self.session.post.return_value = FakeResponse(502, text="<html>bad gateway</html>")
        with self.assertRaises(GatewayError):
            self._create()

    def test_missing_credentials(self):
        client = RazorpayClient(RazorpayConfig(key_id="", key_secret=""), session=self.session)
        with self.assertRaises(GatewayError):
            client.create_order(amount_minor=100, currency="INR", receipt="r", notes={})
        self.session.post.assert_not_called()


class RazorpayConfigTests(SimpleTestCase):
    @override_settings(RAZORPAY_KEY_ID="rzp_live", RAZORPAY_KEY_SECRET="top-secret",
                       RAZORPAY_BASE_URL="https://api.razorpay.com/v1/", RAZORPAY_TIMEOUT="9")
    def test_from_settings(self):
        config = RazorpayConfig.from_settings()
        self.assertEqual(config.key_id, "rzp_live")
        self.assertEqual(config.base_url, "https://api.razorpay.com/v1")
        self.assertEqual(config.timeout, 9.0)
        self.assertEqual(config.currency, "INR")

    def test_repr_hides_secret(self):
        config = RazorpayConfig(key_id="rzp_live", key_secret="top-secret")
        self.assertNotIn("top-secret", repr(config))

    def test_is_immutable(self):
        config = RazorpayConfig(key_id="rzp_live", key_secret="top-secret")
        with self.assertRaises(AttributeError):
            config.key_secret = "other"
