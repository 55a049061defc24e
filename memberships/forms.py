from decimal import Decimal

from django import forms


class CreateOrderForm(forms.Form):
    """Body of POST /memberships/create-order."""

    planId = forms.CharField(max_length=32)
    planName = forms.CharField(max_length=64, required=False)
    amount = forms.DecimalField(decimal_places=2, max_digits=10, min_value=Decimal("0.01"))
    userId = forms.CharField(max_length=64)


class VerifyPaymentForm(forms.Form):
    """Body of POST /memberships/verify-payment (Razorpay checkout handler fields)."""

    ALIASES = {
        "gatewayPaymentId": "razorpay_payment_id",
        "gatewayOrderId": "razorpay_order_id",
        "signature": "razorpay_signature",
    }

    razorpay_payment_id = forms.CharField(max_length=64)
    razorpay_order_id = forms.CharField(max_length=64)
    razorpay_signature = forms.CharField(max_length=128)
    orderId = forms.CharField(max_length=64)
    userId = forms.CharField(max_length=64)
    planId = forms.CharField(max_length=32)

    @classmethod
    def from_body(cls, body: dict) -> "VerifyPaymentForm":
        data = dict(body)
        for alias, name in cls.ALIASES.items():
            if not data.get(name) and data.get(alias):
                data[name] = data[alias]
        return cls(data=data)
