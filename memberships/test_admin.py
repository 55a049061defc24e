from decimal import Decimal

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from .models import MembershipOrder


class MembershipOrderAdminTests(TestCase):
    def setUp(self):
        self.staff = get_user_model().objects.create_superuser(username="admin", password="pw", email="a@example.com")
        self.client.force_login(self.staff)
        self.order = MembershipOrder.objects.create(
            user=self.staff, plan_id="basic", amount=Decimal("499"), gateway_order_id="order_ADM1",
        )

    def test_order_fields_are_read_only(self):
        model_admin = admin.site._registry[MembershipOrder]
        for field in ("status", "amount", "currency", "user", "plan_id", "completed_at", "gateway_payment_id"):
            with self.subTest(field=field):
                self.assertIn(field, model_admin.readonly_fields)

    def test_posting_change_form_does_not_complete_order(self):
        url = reverse("admin:memberships_membershiporder_change", args=[self.order.pk])
        self.assertEqual(self.client.get(url).status_code, 200)
        self.client.post(url, {"status": "completed", "amount": "1", "currency": "USD"})
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, MembershipOrder.STATUS_PENDING)
        self.assertEqual(self.order.amount, Decimal("499"))
        self.assertEqual(self.order.currency, "INR")

    def test_orders_cannot_be_added_or_deleted(self):
        self.assertEqual(self.client.get(reverse("admin:memberships_membershiporder_add")).status_code, 403)
        url = reverse("admin:memberships_membershiporder_delete", args=[self.order.pk])
        self.assertEqual(self.client.get(url).status_code, 403)
