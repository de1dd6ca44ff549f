from typing import Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Label

import api.crud
from api.client import ApiError
from api.models import PAYMENT_PENDING, Order, OrderReceipt
from utils.logger import get_logger
from utils.payment import resolve_outcome
from utils.pure import format_currency, format_date
from views.base_screen import BaseScreen
from views.modal_payment import PaymentModal

_logger = get_logger(__name__)


class OrderStatusScreen(BaseScreen):
    """
    orders placed in this session and their payment status, for customers
    """

    BINDINGS = [
        Binding("r", "reload", "Refresh", show=True),
        Binding("p", "pay", "Pay Selected", show=True),
    ]

    def __init__(self):
        super().__init__()
        self._orders: Dict[str, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-orders-hint")
        yield DataTable(id="table-orders")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order ID", "Date", "Total", "Status")
        self.action_reload()

    def on_screen_resume(self):
        self.action_reload()

    @work(exclusive=True)
    async def action_reload(self) -> None:
        placed: List[str] = self.app.state.placed_orders
        hint = self.query_one("#label-orders-hint", Label)
        table = self.query_one(DataTable)

        if not placed:
            table.clear()
            hint.update("You have not placed any orders in this session.")
            return

        try:
            orders = await api.crud.list_orders()
        except ApiError as e:
            _logger.error(f"Loading orders failed: {e}")
            self.notify(e.message, title="Could not load orders", severity="error")
            return

        table.clear()
        self._orders = {o.id: o for o in orders if o.id in placed}
        # newest first
        for oid in reversed(placed):
            order = self._orders.get(oid)
            if order is None:
                table.add_row(oid, "-", "-", "UNKNOWN", key=oid)
                continue
            table.add_row(
                oid,
                format_date(order.created_at),
                format_currency(order.total),
                order.payment_status,
                key=oid,
            )
        hint.update(f"{len(placed)} order(s) placed. Press p to pay a pending order.")

    @on(DataTable.RowSelected)
    def handle_row_selected(self) -> None:
        self.action_pay()

    @work(exclusive=True, group="payment")
    async def action_pay(self) -> None:
        table = self.query_one(DataTable)
        if not table.row_count:
            return
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        order = self._orders.get(row_key.value)
        if order is None or order.payment_status != PAYMENT_PENDING:
            self.notify("Only pending orders can be paid.", severity="warning")
            return
        if not order.snap_token:
            self.notify("This order has no payment token.", severity="error")
            return

        outcome = await self.app.push_screen_wait(
            PaymentModal(OrderReceipt(order.id, order.snap_token))
        )
        # the cart was settled when the order was placed, leave it alone
        resolution = resolve_outcome(outcome, order.id)
        self.notify(resolution.message, severity=resolution.severity)
        self.action_reload()
