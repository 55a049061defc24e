from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.utils import timezone


def to_decimal(value):
    """Parse a user-supplied amount to 2 places; ``None`` when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            return None
        return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        return None


def to_minor_units(amount) -> int:
    # rupees -> paise
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def gen_receipt():
    # Razorpay caps receipts at 40 chars
    return f"receipt_{int(timezone.now().timestamp() * 1000)}"
