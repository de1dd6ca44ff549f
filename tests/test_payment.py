import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from store.cart import Cart, ProductSnapshot  # noqa: E402
from utils import config  # noqa: E402
from utils.payment import (  # noqa: E402
    PaymentOutcome,
    apply_outcome,
    outcome_from_status,
    payment_url,
    resolve_outcome,
)


class PaymentTestCase(unittest.TestCase):
    def setUp(self):
        self.cart = Cart()
        self.cart.add_many(ProductSnapshot(id="1", name="Topi", price=25000), 2)

    def test_outcome_from_status(self):
        self.assertIs(outcome_from_status("PAID"), PaymentOutcome.SUCCESS)
        self.assertIs(outcome_from_status("paid"), PaymentOutcome.SUCCESS)
        self.assertIs(outcome_from_status("PENDING"), PaymentOutcome.PENDING)
        self.assertIs(outcome_from_status("FAILED"), PaymentOutcome.ERROR)
        self.assertIs(outcome_from_status(None), PaymentOutcome.PENDING)
        self.assertIs(outcome_from_status("EXPIRED"), PaymentOutcome.PENDING)

    def test_payment_url_prefers_redirect(self):
        self.assertEqual(payment_url("tok", "https://pay.example/x"), "https://pay.example/x")
        self.assertEqual(payment_url("tok"), config.PAYMENT_URL + "tok")

    def test_success_clears_cart_and_goes_to_products(self):
        resolution = apply_outcome(PaymentOutcome.SUCCESS, "ORD-1", self.cart)
        self.assertTrue(self.cart.state.is_empty)
        self.assertEqual(resolution.next_mode, "products")
        self.assertIn("ORD-1", resolution.message)

    def test_pending_clears_cart_and_goes_to_orders(self):
        resolution = apply_outcome(PaymentOutcome.PENDING, "ORD-1", self.cart)
        self.assertTrue(self.cart.state.is_empty)
        self.assertEqual(resolution.next_mode, "orders")
        self.assertEqual(resolution.severity, "warning")

    def test_error_keeps_cart(self):
        resolution = apply_outcome(PaymentOutcome.ERROR, "ORD-1", self.cart)
        self.assertEqual(self.cart.state.item_count, 2)
        self.assertIsNone(resolution.next_mode)
        self.assertEqual(resolution.severity, "error")

    def test_closed_is_a_noop(self):
        before = self.cart.state
        resolution = apply_outcome(PaymentOutcome.CLOSED, "ORD-1", self.cart)
        self.assertIs(self.cart.state, before)
        self.assertFalse(resolution.clear_cart)
        self.assertIsNone(resolution.next_mode)

    def test_resolve_outcome_is_pure(self):
        resolve_outcome(PaymentOutcome.SUCCESS, "ORD-1")
        self.assertEqual(self.cart.state.item_count, 2)


if __name__ == "__main__":
    unittest.main()
