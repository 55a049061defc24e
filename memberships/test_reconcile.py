from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from .models import Membership, MembershipOrder

COMPLETED_AT = datetime(2024, 5, 1, 9, 0, tzinfo=dt_timezone.utc)


class ReconcileMembershipsTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="seller", password="pw")

    def _order(self, user=None, plan_id="premium", completed_at=COMPLETED_AT, status="completed", gw="order_R1"):
        return MembershipOrder.objects.create(
            user=user or self.user,
            plan_id=plan_id,
            amount=Decimal("2499"),
            gateway_order_id=gw,
            status=status,
            completed_at=completed_at if status == "completed" else None,
        )

    def _run(self, *args):
        out = StringIO()
        call_command("reconcile_memberships", *args, stdout=out)
        return out.getvalue()

    def test_restores_missing_membership(self):
        self._order()
        output = self._run()

        membership = Membership.objects.get(user=self.user)
        self.assertEqual(membership.status, Membership.STATUS_ACTIVE)
        self.assertEqual(membership.plan_id, "premium")
        self.assertEqual(membership.expires_at, COMPLETED_AT + timedelta(days=90))
        self.assertIn("repaired 1", output)

    def test_latest_completed_order_wins(self):
        self._order(plan_id="enterprise", completed_at=COMPLETED_AT - timedelta(days=200), gw="order_OLD")
        self._order(plan_id="basic", completed_at=COMPLETED_AT, gw="order_NEW")
        self._run()
        membership = Membership.objects.get(user=self.user)
        self.assertEqual((membership.plan_id, membership.expires_at), ("basic", COMPLETED_AT + timedelta(days=30)))

    def test_healthy_membership_untouched(self):
        self._order()
        Membership.objects.create(
            user=self.user, status=Membership.STATUS_ACTIVE, plan_id="premium",
            expires_at=COMPLETED_AT + timedelta(days=90),
        )
        before = Membership.objects.get(user=self.user).updated_at
        output = self._run()
        self.assertEqual(Membership.objects.get(user=self.user).updated_at, before)
        self.assertIn("repaired 0", output)

    def test_pending_orders_ignored(self):
        self._order(status="pending")
        self._run()
        self.assertFalse(Membership.objects.exists())

    def test_dry_run_writes_nothing(self):
        self._order()
        output = self._run("--dry-run")
        self.assertFalse(Membership.objects.exists())
        self.assertIn("would get premium", output)

    def test_completed_order_without_completion_time_is_skipped(self):
        other = get_user_model().objects.create_user(username="other", password="pw")
        MembershipOrder.objects.create(
            user=self.user, plan_id="premium", amount=Decimal("2499"), gateway_order_id="order_NOTIME",
            status="completed", completed_at=None,
        )
        self._order(user=other, plan_id="basic", gw="order_OK")

        output = self._run()

        self.assertFalse(Membership.objects.filter(user=self.user).exists())
        membership = Membership.objects.get(user=other)
        self.assertEqual((membership.plan_id, membership.expires_at), ("basic", COMPLETED_AT + timedelta(days=30)))
        self.assertIn("Checked 1 users, repaired 1", output)
