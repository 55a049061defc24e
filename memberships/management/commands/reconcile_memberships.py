from django.core.management.base import BaseCommand

from memberships.exceptions import StoreError
from memberships.models import Membership
from memberships.services import membership_expiry
from memberships.store import OrderStore


def _needs_repair(membership, plan_id, expected_expiry) -> bool:
    if membership is None:
        return True
    if membership.status != Membership.STATUS_ACTIVE or membership.plan_id != plan_id:
        return True
    return membership.expires_at is None or membership.expires_at < expected_expiry


class Command(BaseCommand):
    help = "Re-apply membership activation for completed orders whose membership update was lost"

    def add_arguments(self, parser):
        parser.add_argument("--max", type=int, default=200, help="Max users to repair")
        parser.add_argument("--dry-run", action="store_true", help="Report without writing")

    def handle(self, *args, **opts):
        store = OrderStore()
        qs = store.completed_orders().order_by("-completed_at", "-pk")

        # Only the latest completed order per user defines the membership
        seen = set()
        checked = 0
        repaired = 0
        for order in qs.iterator():
            if order.user_id in seen:
                continue
            seen.add(order.user_id)
            checked += 1

            expected = membership_expiry(order.plan_id, order.completed_at)
            membership = store.get_membership(order.user_id)
            if not _needs_repair(membership, order.plan_id, expected):
                continue

            if repaired >= opts["max"]:
                self.stdout.write(self.style.WARNING("Reached --max, stopping."))
                break

            if opts["dry_run"]:
                self.stdout.write(f"Order {order.pk}: user {order.user_id} would get {order.plan_id} until {expected.isoformat()}")
                repaired += 1
                continue

            try:
                store.activate_membership(order.user_id, plan_id=order.plan_id, expires_at=expected)
            except StoreError as e:
                self.stdout.write(self.style.ERROR(f"Order {order.pk}: {e}"))
                continue
            repaired += 1
            self.stdout.write(self.style.SUCCESS(
                f"Order {order.pk}: user {order.user_id} -> {order.plan_id} until {expected.isoformat()}"
            ))

        self.stdout.write(self.style.SUCCESS(f"Checked {checked} users, repaired {repaired} memberships."))
