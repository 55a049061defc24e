import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .exceptions import InvalidRequest, MembershipPaymentError, PartialVerification
from .forms import CreateOrderForm, VerifyPaymentForm
from .plans import PLANS
from .services import default_payments
from .store import OrderStore

logger = logging.getLogger(__name__)


def _json_body(request):
    try:
        body = json.loads(request.body.decode("utf-8"))
    except Exception:
        return None
    return body if isinstance(body, dict) else None


def _error_response(exc: MembershipPaymentError) -> JsonResponse:
    return JsonResponse(
        {"success": False, "error": exc.code, "message": exc.public_message},
        status=exc.http_status,
    )


def _invalid(form) -> JsonResponse:
    exc = InvalidRequest()
    fields = ", ".join(sorted(form.errors.keys()))
    return JsonResponse(
        {"success": False, "error": exc.code, "message": f"Missing or invalid fields: {fields}"},
        status=exc.http_status,
    )


def _unexpected(what: str) -> JsonResponse:
    logger.exception("%s crashed", what)
    return JsonResponse(
        {"success": False, "error": "internal_error", "message": "Something went wrong"},
        status=500,
    )


@csrf_exempt
@require_POST
def create_order_view(request):
    body = _json_body(request)
    if body is None:
        return _error_response(InvalidRequest())
    form = CreateOrderForm(data=body)
    if not form.is_valid():
        return _invalid(form)
    data = form.cleaned_data

    try:
        created = default_payments().create_order(
            plan_id=data["planId"],
            plan_name=data["planName"],
            amount=data["amount"],
            user_id=data["userId"],
        )
    except MembershipPaymentError as e:
        logger.warning("Create order rejected (%s): %s", e.code, e)
        return _error_response(e)
    except Exception:
        return _unexpected("create_order_view")

    return JsonResponse({
        "success": True,
        "orderId": created.order_id,
        "gatewayOrderId": created.gateway_order_id,
        # name the existing checkout script reads
        "razorpayOrderId": created.gateway_order_id,
        "amount": created.amount,
        "currency": created.currency,
    })


@csrf_exempt
@require_POST
def verify_payment_view(request):
    body = _json_body(request)
    if body is None:
        return _error_response(InvalidRequest())
    form = VerifyPaymentForm.from_body(body)
    if not form.is_valid():
        return _invalid(form)
    data = form.cleaned_data

    try:
        expiry = default_payments().verify_payment(
            gateway_payment_id=data["razorpay_payment_id"],
            gateway_order_id=data["razorpay_order_id"],
            signature=data["razorpay_signature"],
            order_id=data["orderId"],
            user_id=data["userId"],
            plan_id=data["planId"],
        )
    except PartialVerification as e:
        logger.error("Partial verification for order %s needs reconciliation", e.order_id)
        return _error_response(e)
    except MembershipPaymentError as e:
        logger.warning("Payment verification rejected (%s): %s", e.code, e)
        return _error_response(e)
    except Exception:
        return _unexpected("verify_payment_view")

    return JsonResponse({"success": True, "expiryDate": expiry.isoformat()})


@require_GET
def plans_view(request):
    plans = [
        {
            "id": p.id,
            "name": p.name,
            "price": int(p.price),
            "durationDays": p.duration_days,
            "duration": p.duration_label,
        }
        for p in PLANS
    ]
    return JsonResponse({"plans": plans})


@require_GET
def membership_status_view(request):
    """Membership of the signed-in user."""
    if not request.user.is_authenticated:
        return JsonResponse(
            {"success": False, "error": "unauthorized", "message": "Login required"},
            status=401,
        )
    membership = OrderStore().get_membership(request.user.pk)
    if membership is None:
        return JsonResponse({"status": "inactive", "plan": "", "expiryDate": None, "isCurrent": False})
    return JsonResponse({
        "status": membership.status,
        "plan": membership.plan_id,
        "expiryDate": membership.expires_at.isoformat() if membership.expires_at else None,
        "isCurrent": membership.is_current,
    })
