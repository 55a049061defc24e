"""Razorpay checkout signature helpers."""

import hashlib
import hmac


def compute_payment_signature(gateway_order_id: str, payment_id: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 Razorpay signs for an order/payment pair.

    The signed message is ``"{order_id}|{payment_id}"`` keyed with the
    merchant's key secret.
    """
    msg = f"{gateway_order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), msg, hashlib.sha256).hexdigest()


def verify_payment_signature(gateway_order_id, payment_id, signature, secret) -> bool:
    """Check a client-submitted checkout signature.

    Malformed input (missing values, non-strings, empty secret) is reported
    as ``False``.  The comparison runs in constant time with respect to the
    position of the first differing character.
    """
    values = (gateway_order_id, payment_id, signature, secret)
    if not all(isinstance(v, str) for v in values) or not secret:
        return False
    expected = compute_payment_signature(gateway_order_id, payment_id, secret)
    try:
        return hmac.compare_digest(expected, signature)
    except TypeError:
        # non-ASCII str input
        return False
