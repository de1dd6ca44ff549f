from typing import Dict

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Markdown

import api.crud
from api.client import ApiError
from store.cart import grand_total, shipping_cost
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, NewOrderMessage
from utils.payment import apply_outcome
from utils.pure import format_currency, generate_markdown_table
from utils.validation import CHECKOUT_RULES, validate_form
from views.modal_dialog import DialogModal
from views.modal_payment import PaymentModal

_logger = get_logger(__name__)

# (field, label, placeholder)
FORM_FIELDS = [
    ("first_name", "First Name", "Jane"),
    ("last_name", "Last Name", "Doe"),
    ("email", "Email", "jane@example.com"),
    ("phone", "Phone", "081234567890"),
    ("address", "Address", "Jl. Merdeka No. 10"),
    ("city", "City", "Bandung"),
    ("province", "Province", "Jawa Barat"),
    ("postal_code", "Postal Code", "40111"),
    ("note", "Note (optional)", ""),
]


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary plus shipping form. Creates the order and runs the payment.
    Returns True when an order was created.
    """

    def __init__(self):
        super().__init__()

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="div-checkout"):
            yield Markdown("", id="md-order-summary")
            for name, label, placeholder in FORM_FIELDS:
                yield Label(label)
                yield Input(
                    placeholder=placeholder,
                    validators=CHECKOUT_RULES.get(name),
                    id=f"input-{name}",
                )
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        state = self.app.state
        cart = state.cart.state

        headers = ["Product Name", "Unit Price", "Quantity", "Total Price"]
        rows = [
            [
                line.product.name,
                format_currency(line.product.price),
                line.quantity,
                format_currency(line.subtotal),
            ]
            for line in cart.lines
        ]
        shipping = shipping_cost(cart.total)
        md = "### Order Summary\n\n"
        md += generate_markdown_table(headers, rows, ["l", "r", "c", "r"])
        md += f"\n\n**Subtotal:** {format_currency(cart.total)}"
        md += "  \n**Shipping:** " + (
            "Free" if shipping == 0 else format_currency(shipping)
        )
        md += f"  \n**Total:** {format_currency(grand_total(cart.total))}"
        await self.query_one(Markdown).update(md)

        if state.email:
            self.query_one("#input-email", Input).value = state.email
        self.query_one("#input-first_name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def _form_values(self) -> Dict[str, str]:
        return {
            name: self.query_one(f"#input-{name}", Input).value.strip()
            for name, _, _ in FORM_FIELDS
        }

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        values = self._form_values()
        errors = validate_form(values, CHECKOUT_RULES)
        if errors:
            for name in errors:
                self.query_one(f"#input-{name}", Input).add_class("-invalid")
            first = next(iter(errors))
            self.query_one(f"#input-{first}", Input).focus()
            self.notify(
                "\n".join(msgs[0] for msgs in errors.values()),
                title="Please check the form",
                severity="error",
            )
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order and continue to payment?",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        cart = self.app.state.cart
        submit_btn = self.query_one("#btn-submit", Button)
        submit_btn.disabled = True
        try:
            receipt = await api.crud.create_order(values, cart.lines)
        except ApiError as e:
            _logger.error(f"Order creation failed: {e}")
            self.notify(e.message, title="Order failed", severity="error")
            submit_btn.disabled = False
            return

        self.app.post_message(NewOrderMessage(receipt.order_id))

        outcome = await self.app.push_screen_wait(PaymentModal(receipt))
        resolution = apply_outcome(outcome, receipt.order_id, cart)
        _logger.info(f"Payment outcome for {receipt.order_id}: {outcome.value}")
        self.notify(resolution.message, severity=resolution.severity)

        if resolution.next_mode and resolution.next_mode != self.app.current_mode:
            self.app.post_message(
                ModeSwitchedMessage(self.app.current_mode, resolution.next_mode)
            )
            # this worker dies with the modal, so the switch runs on the app
            self.app.call_later(self.app.switch_mode, resolution.next_mode)
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
