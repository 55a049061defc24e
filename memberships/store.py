"""Persistence for membership orders and the user's membership facet.

Each method is a single-record write (or one conditional UPDATE of a
single row); nothing here spans the order and the membership in one
transaction.  Database failures surface as :class:`StoreError`, and lock
waits that hit the driver's timeout as :class:`StoreTimeout`.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, OperationalError
from django.utils import timezone

from .exceptions import StoreError, StoreTimeout
from .models import Membership, MembershipOrder

logger = logging.getLogger(__name__)


def _store_error(e: DatabaseError, message: str) -> StoreError:
    text = str(e).lower()
    if isinstance(e, OperationalError) and ("locked" in text or "timeout" in text):
        return StoreTimeout(f"{message}: {e}")
    return StoreError(f"{message}: {e}")


class OrderStore:
    def user_exists(self, user_id) -> bool:
        try:
            return get_user_model().objects.filter(pk=user_id).exists()
        except (ValueError, TypeError):
            return False
        except DatabaseError as e:
            raise _store_error(e, "User lookup failed") from e

    def create_order(self, *, user_id, plan_id, plan_name, amount, currency, receipt, gateway_order_id) -> MembershipOrder:
        try:
            return MembershipOrder.objects.create(
                user_id=user_id,
                plan_id=plan_id,
                plan_name=plan_name,
                amount=amount,
                currency=currency,
                receipt=receipt,
                gateway_order_id=gateway_order_id,
                status=MembershipOrder.STATUS_PENDING,
            )
        except DatabaseError as e:
            raise _store_error(e, f"Could not create order for {gateway_order_id}") from e

    def get_order(self, order_id):
        try:
            return MembershipOrder.objects.filter(pk=order_id).first()
        except (ValueError, TypeError):
            return None
        except DatabaseError as e:
            raise _store_error(e, "Order lookup failed") from e

    def complete_order(self, order_id, *, payment_id, signature, completed_at) -> bool:
        """Move a pending order to completed.

        A single conditional UPDATE, so of two concurrent verifications of
        the same order exactly one sees a changed row.  Returns ``False``
        when the order is no longer pending.
        """
        try:
            updated = MembershipOrder.objects.filter(
                pk=order_id, status=MembershipOrder.STATUS_PENDING,
            ).update(
                status=MembershipOrder.STATUS_COMPLETED,
                gateway_payment_id=payment_id,
                gateway_signature=signature,
                completed_at=completed_at,
                updated_at=timezone.now(),
            )
            if updated:
                return True
            if MembershipOrder.objects.filter(pk=order_id).exists():
                return False
        except DatabaseError as e:
            raise _store_error(e, f"Could not complete order {order_id}") from e
        raise StoreError(f"Order {order_id} vanished during completion")

    def activate_membership(self, user_id, *, plan_id, expires_at) -> Membership:
        try:
            membership, _ = Membership.objects.update_or_create(
                user_id=user_id,
                defaults={
                    "status": Membership.STATUS_ACTIVE,
                    "plan_id": plan_id,
                    "expires_at": expires_at,
                },
            )
            return membership
        except DatabaseError as e:
            raise _store_error(e, f"Could not activate membership for user {user_id}") from e

    def get_membership(self, user_id):
        try:
            return Membership.objects.filter(user_id=user_id).first()
        except (ValueError, TypeError):
            return None
        except DatabaseError as e:
            raise _store_error(e, "Membership lookup failed") from e

    def completed_orders(self):
        """Completed orders that carry a completion time, with their users."""
        return MembershipOrder.objects.filter(
            status=MembershipOrder.STATUS_COMPLETED, completed_at__isnull=False,
        ).select_related("user")
