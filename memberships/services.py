"""Membership order lifecycle.

``MembershipPayments`` creates a Razorpay order plus a pending local
order, and later turns a verified checkout callback into a completed
order and an active membership.  Collaborators are injected so the
coordinator itself holds no state between requests.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils import timezone

from .exceptions import (
    AlreadyCompleted,
    GatewayError,
    GatewayTimeout,
    InvalidRequest,
    OrderCreationFailed,
    OrderMismatch,
    OrderNotFound,
    PartialVerification,
    PaymentTimeout,
    SignatureMismatch,
    StoreError,
    StoreTimeout,
    VerificationFailed,
)
from .integrations.razorpay import RazorpayClient, RazorpayConfig
from .plans import duration_days
from .signatures import verify_payment_signature
from .store import OrderStore
from .utils import gen_receipt, to_decimal, to_minor_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderCreated:
    order_id: str
    gateway_order_id: str
    amount: int
    currency: str


def membership_expiry(plan_id, verified_at):
    return verified_at + timedelta(days=duration_days(plan_id))


class MembershipPayments:
    def __init__(self, *, gateway, store: OrderStore, config: RazorpayConfig, clock=timezone.now):
        self.gateway = gateway
        self.store = store
        self.config = config
        self.clock = clock

    def create_order(self, *, plan_id, plan_name, amount, user_id) -> OrderCreated:
        amount = to_decimal(amount)
        if amount is None or amount <= 0:
            raise InvalidRequest("amount must be > 0")
        if not user_id or not str(user_id).strip():
            raise InvalidRequest("userId is required")
        plan_id = plan_id or ""
        plan_name = plan_name or ""

        try:
            if not self.store.user_exists(user_id):
                raise InvalidRequest(f"Unknown user {user_id}")
        except StoreTimeout as e:
            raise PaymentTimeout(str(e)) from e
        except StoreError as e:
            raise OrderCreationFailed(str(e)) from e

        # Gateway first: a gateway order without a local row is the lesser failure
        currency = self.config.currency
        try:
            remote = self.gateway.create_order(
                amount_minor=to_minor_units(amount),
                currency=currency,
                receipt=gen_receipt(),
                notes={"planId": plan_id, "planName": plan_name, "userId": str(user_id)},
            )
        except GatewayTimeout as e:
            logger.error("Razorpay order creation timed out for user=%s plan=%s", user_id, plan_id)
            raise PaymentTimeout(str(e)) from e
        except GatewayError as e:
            logger.error("Razorpay order creation failed for user=%s plan=%s: %s", user_id, plan_id, e)
            raise OrderCreationFailed(str(e)) from e

        gateway_order_id = remote["id"]
        try:
            order = self.store.create_order(
                user_id=user_id,
                plan_id=plan_id,
                plan_name=plan_name,
                amount=amount,
                currency=remote.get("currency") or currency,
                receipt=remote.get("receipt") or "",
                gateway_order_id=gateway_order_id,
            )
        except StoreTimeout as e:
            logger.error("Store timed out persisting gateway order %s", gateway_order_id)
            raise PaymentTimeout(str(e)) from e
        except StoreError as e:
            logger.error("Gateway order %s has no local record: %s", gateway_order_id, e)
            raise OrderCreationFailed(str(e)) from e

        logger.info("Created membership order %s (gateway %s) for user=%s plan=%s",
                    order.pk, gateway_order_id, user_id, plan_id)
        return OrderCreated(
            order_id=str(order.pk),
            gateway_order_id=gateway_order_id,
            amount=remote.get("amount", to_minor_units(amount)),
            currency=remote.get("currency") or currency,
        )

    def verify_payment(self, *, gateway_payment_id, gateway_order_id, signature, order_id, user_id, plan_id):
        """Complete ``order_id`` and activate the owner's membership.

        Returns the new membership expiry.  The signature is checked before
        anything is read or written.
        """
        if not verify_payment_signature(gateway_order_id, gateway_payment_id, signature, self.config.key_secret):
            logger.warning("Signature mismatch for gateway order %s (payment %s, local order %s)",
                           gateway_order_id, gateway_payment_id, order_id)
            raise SignatureMismatch("Invalid signature")

        try:
            order = self.store.get_order(order_id)
        except StoreTimeout as e:
            raise PaymentTimeout(str(e)) from e
        except StoreError as e:
            raise VerificationFailed(str(e)) from e
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")

        # The persisted order decides who gets which plan
        if (order.gateway_order_id != gateway_order_id
                or str(order.user_id) != str(user_id)
                or order.plan_id != (plan_id or "")):
            logger.warning("Verification payload does not match order %s", order.pk)
            raise OrderMismatch(f"Payload does not match order {order.pk}")

        now = self.clock()
        expiry = membership_expiry(order.plan_id, now)

        try:
            completed = self.store.complete_order(
                order.pk, payment_id=gateway_payment_id, signature=signature, completed_at=now
            )
        except StoreTimeout as e:
            raise PaymentTimeout(str(e)) from e
        except StoreError as e:
            # nothing was written, the client can retry with the same payload
            raise VerificationFailed(str(e)) from e
        if not completed:
            logger.info("Duplicate verification for completed order %s", order.pk)
            raise AlreadyCompleted(f"Order {order.pk} already completed")

        try:
            self.store.activate_membership(order.user_id, plan_id=order.plan_id, expires_at=expiry)
        except StoreError as e:
            logger.error("Order %s completed but membership activation failed for user=%s: %s",
                         order.pk, order.user_id, e)
            raise PartialVerification(str(e), order_id=order.pk) from e

        logger.info("Membership %s active for user=%s until %s (order %s)",
                    order.plan_id, order.user_id, expiry.isoformat(), order.pk)
        return expiry


@lru_cache(maxsize=1)
def default_payments() -> MembershipPayments:
    """Coordinator wired from Django settings, built once per process."""
    config = RazorpayConfig.from_settings()
    return MembershipPayments(gateway=RazorpayClient(config), store=OrderStore(), config=config)


@receiver(setting_changed)
def _reset_default_payments(*, setting, **kwargs):
    if setting.startswith("RAZORPAY_") or setting == "MEMBERSHIP_CURRENCY":
        default_payments.cache_clear()
