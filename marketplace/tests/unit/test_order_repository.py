import re
import uuid

from django.test import TestCase

from marketplace.ordering.domain.services.order_repository import OrderRepository, generate_order_number
from marketplace.tests.factories import OrderFactory, PaidOrderFactory, UserFactory


class GenerateOrderNumberTest(TestCase):
    def test_format(self):
        self.assertRegex(generate_order_number(), re.compile(r"^ORD-\d{13}-[0-9A-Z]{5}$"))

    def test_numbers_differ(self):
        self.assertEqual(len({generate_order_number() for _ in range(50)}), 50)


class OrderRepositoryTest(TestCase):
    def setUp(self):
        self.repository = OrderRepository()
        self.user = UserFactory()

    def test_user_scoped_lookup_hides_foreign_orders(self):
        order = OrderFactory()

        self.assertIsNone(self.repository.get_order(order.id, self.user))
        self.assertEqual(self.repository.get_order(order.id), order)

    def test_malformed_id_is_not_found(self):
        self.assertIsNone(self.repository.get_order("not-a-uuid"))
        self.assertIsNone(self.repository.get_order_for_update("not-a-uuid"))
        self.assertIsNone(self.repository.get_order(uuid.uuid4()))

    def test_lookup_by_payment_intent(self):
        order = PaidOrderFactory(payment_intent_id="pi_repo_1")

        self.assertEqual(self.repository.get_by_payment_intent("pi_repo_1"), order)
        self.assertIsNone(self.repository.get_by_payment_intent(""))

    def test_list_orders_paginates(self):
        for _ in range(3):
            OrderFactory(buyer=self.user)

        orders, total = self.repository.list_orders(self.user, offset=1, limit=1)

        self.assertEqual(total, 3)
        self.assertEqual(len(orders), 1)

    def test_paid_orders(self):
        OrderFactory(buyer=self.user)
        paid = PaidOrderFactory(buyer=self.user)

        self.assertEqual(list(self.repository.paid_orders(self.user)), [paid])
