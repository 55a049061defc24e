import threading
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connections
from django.test import TransactionTestCase

from .exceptions import AlreadyCompleted, PaymentTimeout
from .models import Membership, MembershipOrder
from .services import MembershipPayments
from .signatures import compute_payment_signature
from .store import OrderStore
from .test_services import CONFIG, SECRET, FakeGateway


class ConcurrentVerificationTests(TransactionTestCase):
    """Two callbacks for the same order racing on separate connections."""

    def setUp(self):
        self.user = get_user_model().objects.create_user(username="seller", password="pw")
        self.order = MembershipOrder.objects.create(
            user=self.user, plan_id="basic", amount=Decimal("499"), gateway_order_id="order_RACE1",
        )

    def _verify_in_thread(self, barrier, payment_id, results):
        payments = MembershipPayments(gateway=FakeGateway(), store=OrderStore(), config=CONFIG)
        try:
            barrier.wait(timeout=5)
            results[payment_id] = payments.verify_payment(
                gateway_payment_id=payment_id,
                gateway_order_id="order_RACE1",
                signature=compute_payment_signature("order_RACE1", payment_id, SECRET),
                order_id=str(self.order.pk),
                user_id=str(self.user.pk),
                plan_id="basic",
            )
        except Exception as e:
            results[payment_id] = e
        finally:
            connections.close_all()

    def test_only_one_verification_completes_the_order(self):
        barrier = threading.Barrier(2)
        results = {}
        threads = [
            threading.Thread(target=self._verify_in_thread, args=(barrier, payment_id, results))
            for payment_id in ("pay_RACE_A", "pay_RACE_B")
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        self.assertEqual(len(results), 2)
        winners = {k: v for k, v in results.items() if not isinstance(v, Exception)}
        losers = {k: v for k, v in results.items() if isinstance(v, Exception)}
        self.assertEqual(len(winners), 1, results)
        self.assertEqual(len(losers), 1, results)
        self.assertIsInstance(next(iter(losers.values())), (AlreadyCompleted, PaymentTimeout))

        (winner_payment, expiry), = winners.items()
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, MembershipOrder.STATUS_COMPLETED)
        self.assertEqual(self.order.gateway_payment_id, winner_payment)
        membership = Membership.objects.get(user=self.user)
        self.assertEqual(membership.expires_at, expiry)
        self.assertEqual(Membership.objects.count(), 1)
