import json
import logging
from dataclasses import dataclass, field

import requests
from django.conf import settings
from requests import RequestException
from requests.auth import HTTPBasicAuth

from memberships.exceptions import GatewayError, GatewayTimeout

logger = logging.getLogger(__name__)

COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


@dataclass(frozen=True)
class RazorpayConfig:
    key_id: str
    key_secret: str = field(repr=False)
    base_url: str = "https://api.razorpay.com/v1"
    timeout: float = 15.0
    currency: str = "INR"

    @classmethod
    def from_settings(cls) -> "RazorpayConfig":
        return cls(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            base_url=settings.RAZORPAY_BASE_URL.rstrip("/"),
            timeout=float(settings.RAZORPAY_TIMEOUT),
            currency=getattr(settings, "MEMBERSHIP_CURRENCY", "INR"),
        )


class RazorpayClient:
    """Thin client for the Razorpay Orders API."""

    def __init__(self, config: RazorpayConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    def _auth(self) -> HTTPBasicAuth:
        if not (self.config.key_id and self.config.key_secret):
            raise GatewayError("Missing RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET")
        return HTTPBasicAuth(self.config.key_id, self.config.key_secret)

    def create_order(self, *, amount_minor: int, currency: str, receipt: str, notes: dict) -> dict:
        """POST /orders and return ``{"id", "amount", "currency", ...}``."""
        payload = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        url = f"{self.config.base_url}/orders"
        try:
            resp = self.session.post(
                url, json=payload, headers=COMMON_HEADERS, auth=self._auth(), timeout=self.config.timeout
            )
        except requests.Timeout as e:
            raise GatewayTimeout(f"Gateway timed out after {self.config.timeout}s") from e
        except RequestException as e:
            raise GatewayError(f"Gateway request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text}

        if resp.status_code == 200 and data.get("id"):
            return data
        if resp.status_code == 401:
            hint = "Check RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET."
        elif resp.status_code == 400:
            hint = "Bad request: amount/currency/receipt."
        elif resp.status_code >= 500:
            hint = f"Gateway error {resp.status_code}."
        else:
            hint = f"HTTP {resp.status_code}"
        raise GatewayError(f"Create order failed: {hint} Response: {json.dumps(data)[:800]}")
