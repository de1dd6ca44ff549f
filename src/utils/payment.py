from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from api.models import PAYMENT_FAILED, PAYMENT_PAID, PAYMENT_PENDING
from store.cart import Cart
from utils import config


class PaymentOutcome(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    ERROR = "error"
    CLOSED = "closed"  # user closed the payment window


_STATUS_OUTCOMES = {
    PAYMENT_PAID: PaymentOutcome.SUCCESS,
    PAYMENT_PENDING: PaymentOutcome.PENDING,
    PAYMENT_FAILED: PaymentOutcome.ERROR,
}


def outcome_from_status(payment_status: Optional[str]) -> PaymentOutcome:
    """Map an order's payment status to the widget outcome; unknown -> PENDING."""
    return _STATUS_OUTCOMES.get((payment_status or "").upper(), PaymentOutcome.PENDING)


def payment_url(token: str, redirect_url: Optional[str] = None) -> str:
    return redirect_url or f"{config.PAYMENT_URL}{token}"


@dataclass(frozen=True)
class PaymentResolution:
    clear_cart: bool
    next_mode: Optional[str]  # app mode to switch to, None to stay
    message: str
    severity: Literal["information", "warning", "error"] = "information"


def resolve_outcome(outcome: PaymentOutcome, order_id: str) -> PaymentResolution:
    if outcome is PaymentOutcome.SUCCESS:
        return PaymentResolution(True, "products", f"Payment successful! Order ID: {order_id}")
    if outcome is PaymentOutcome.PENDING:
        return PaymentResolution(
            True,
            "orders",
            f"Waiting for payment. Please complete the payment for order {order_id}.",
            "warning",
        )
    if outcome is PaymentOutcome.ERROR:
        return PaymentResolution(
            False, None, f"Payment for order {order_id} failed.", "error"
        )
    return PaymentResolution(False, None, "Payment cancelled. You closed the payment window.")


def apply_outcome(outcome: PaymentOutcome, order_id: str, cart: Cart) -> PaymentResolution:
    """Resolve the outcome and clear the cart when it says so."""
    resolution = resolve_outcome(outcome, order_id)
    if resolution.clear_cart:
        cart.clear()
    return resolution
