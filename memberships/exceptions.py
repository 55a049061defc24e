"""Error kinds for the membership payment flow.

Every error raised by :mod:`memberships.services` derives from
:class:`MembershipPaymentError` and carries a stable ``code`` and
``http_status`` so the request boundary can map it without inspecting
the message.  Adapter-level errors (gateway, store) are separate and are
translated by the coordinator.
"""


class MembershipPaymentError(Exception):
    code = "payment_error"
    http_status = 500
    public_message = "Payment could not be processed"


class InvalidRequest(MembershipPaymentError):
    code = "invalid_request"
    http_status = 400
    public_message = "Invalid request"


class OrderCreationFailed(MembershipPaymentError):
    code = "order_creation_failed"
    http_status = 502
    public_message = "Failed to create order"


class SignatureMismatch(MembershipPaymentError):
    code = "signature_mismatch"
    http_status = 400
    public_message = "Invalid signature"


class OrderNotFound(MembershipPaymentError):
    code = "order_not_found"
    http_status = 404
    public_message = "Order not found"


class OrderMismatch(MembershipPaymentError):
    code = "order_mismatch"
    http_status = 400
    public_message = "Payment does not match the order"


class AlreadyCompleted(MembershipPaymentError):
    code = "already_completed"
    http_status = 409
    public_message = "Order already completed"


class PartialVerification(MembershipPaymentError):
    """The order was completed but the membership update failed."""

    code = "partial_verification"
    http_status = 500
    public_message = "Payment recorded but membership activation is pending. Please contact support."

    def __init__(self, message="", *, order_id=None):
        super().__init__(message)
        self.order_id = order_id


class VerificationFailed(MembershipPaymentError):
    """The store failed before anything was written; safe to retry."""

    code = "verification_failed"
    http_status = 503
    public_message = "Payment verification is temporarily unavailable. Please try again."


class PaymentTimeout(MembershipPaymentError):
    code = "timeout"
    http_status = 504
    public_message = "Payment service timed out. Please try again."


# Adapter errors

class GatewayError(Exception):
    pass


class GatewayTimeout(GatewayError):
    pass


class StoreError(Exception):
    pass


class StoreTimeout(StoreError):
    pass
