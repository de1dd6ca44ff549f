from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label

import api.crud
from api.client import ApiError
from api.models import OrderReceipt
from utils.logger import get_logger
from utils.payment import PaymentOutcome, outcome_from_status, payment_url

_logger = get_logger(__name__)


class PaymentModal(ModalScreen[PaymentOutcome]):
    """
    Hands the payment over to the hosted payment page and waits for the user.
    Dismisses with the outcome: CLOSED when the user gives up, otherwise
    whatever the order's payment status says.
    """

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, receipt: OrderReceipt):
        super().__init__()
        self.receipt = receipt
        self.url = payment_url(receipt.token, receipt.redirect_url)

    def compose(self) -> ComposeResult:
        with Vertical(id="div-payment"):
            yield Label(f"Order {self.receipt.order_id}", id="label-payment-title")
            yield Label(
                "Complete the payment in your browser, then press Done.\n"
                "If no browser opened, visit:"
            )
            yield Label(self.url, id="label-payment-url")
            with Horizontal():
                yield Button("Close", id="btn-close")
                yield Button("Open Again", id="btn-open")
                yield Button("Done", id="btn-done", variant="primary")

    def on_mount(self):
        self.open_payment_page()
        self.query_one("#btn-done").focus()

    @on(Button.Pressed, "#btn-open")
    def open_payment_page(self) -> None:
        self.app.open_url(self.url)

    @on(Button.Pressed, "#btn-done")
    @work(exclusive=True)
    async def handle_done(self) -> None:
        try:
            order = await api.crud.get_order(self.receipt.order_id)
        except ApiError as e:
            _logger.error(f"Payment status lookup failed: {e}")
            self.notify(e.message, title="Could not check payment", severity="error")
            return

        status = order.payment_status if order else None
        _logger.info(f"Order {self.receipt.order_id} payment status: {status}")
        self.dismiss(outcome_from_status(status))

    @on(Button.Pressed, "#btn-close")
    def action_close(self) -> None:
        self.dismiss(PaymentOutcome.CLOSED)
