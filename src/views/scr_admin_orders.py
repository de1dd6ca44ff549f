from typing import List, Tuple

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

import api.crud
from api.models import PAYMENT_FAILED, PAYMENT_PAID, PAYMENT_PENDING, Order
from store.search import SearchPipeline, admin_orders_pipeline
from utils.pure import format_currency, format_date, generate_markdown_table
from views.admin_table import AdminTableScreen

STATUS_OPTIONS: List[Tuple[str, str]] = [
    ("Pending", PAYMENT_PENDING),
    ("Paid", PAYMENT_PAID),
    ("Failed", PAYMENT_FAILED),
]


def order_markdown(order: Order) -> str:
    customer = [
        ["Name", order.full_name],
        ["Email", order.email],
        ["Phone", order.phone or "-"],
        ["Address", order.address or "-"],
        ["City", order.city or "-"],
        ["Province", order.province or "-"],
        ["Postal Code", order.postal_code or "-"],
        ["Note", order.note or "-"],
    ]
    items = [
        [
            item.product_name or item.product_id,
            item.quantity,
            format_currency(item.price),
            format_currency(item.subtotal),
        ]
        for item in order.items
    ]

    md = f"### Order {order.id}\n\n"
    md += f"**Date:** {format_date(order.created_at)}  \n"
    md += f"**Payment Status:** {order.payment_status}  \n"
    md += f"**Total:** {format_currency(order.total)}\n\n"
    md += "#### Customer\n\n"
    md += generate_markdown_table(["Field", "Value"], customer)
    md += "\n\n#### Items\n\n"
    md += (
        generate_markdown_table(
            ["Product", "Qty", "Unit Price", "Subtotal"], items, ["l", "c", "r", "r"]
        )
        or "No items."
    )
    return md


class OrderDetailModal(ModalScreen[None]):
    def __init__(self, order: Order) -> None:
        super().__init__()
        self.order = order

    def compose(self) -> ComposeResult:
        with Vertical(id="div-order-detail"):
            yield MarkdownViewer(order_markdown(self.order), show_table_of_contents=False)
            with Horizontal():
                yield Button("Close", id="btn-quit", variant="primary")

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss()


class AdminOrdersScreen(AdminTableScreen):
    NOUN = "order"
    COLUMNS = ("Order ID", "Customer", "Email", "Date", "Total", "Status")
    FILTER_ALL_LABEL = "All Statuses"
    READ_ONLY = True

    def make_pipeline(self) -> SearchPipeline:
        return admin_orders_pipeline()

    async def fetch(self) -> List[Order]:
        return await api.crud.list_orders()

    async def filter_options(self) -> List[Tuple[str, str]]:
        return STATUS_OPTIONS

    def row(self, record: Order):
        return (
            record.id,
            record.full_name,
            record.email,
            format_date(record.created_at),
            format_currency(record.total),
            record.payment_status,
        )

    async def open(self, record: Order) -> None:
        await self.app.push_screen_wait(OrderDetailModal(record))
