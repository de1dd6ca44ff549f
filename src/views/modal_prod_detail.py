from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Integer
from textual.widgets import Button, Input, Label, MarkdownViewer

from api.models import Product
from utils.pure import format_currency, generate_markdown_table


class ProdDetailModal(ModalScreen[bool]):
    """
    prod detail, plus adding to cart
    Will return true if cart changed, false if not
    """

    order_qty = reactive(1)

    def __init__(self, product: Product) -> None:
        super().__init__()
        self._prod = product
        self._max_qty = 0

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                yield Label("", id="label-qty-hint")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        prod = self._prod
        rows = [
            ["Price", format_currency(prod.price)],
            ["Category", prod.category_name or "-"],
            ["Stock", prod.stock],
            ["Size", prod.size or "-"],
            ["Color", prod.color or "-"],
        ]
        md = f"### {prod.name}\n\n"
        md += generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        if prod.description:
            md += f"\n\n{prod.description}"
        await self.query_one(MarkdownViewer).document.update(md)

        # what is already in the cart counts against the stock
        line = self.app.state.cart.state.get(prod.id)
        in_cart = line.quantity if line else 0
        self._max_qty = max(prod.stock - in_cart, 0)

        hint = self.query_one("#label-qty-hint", Label)
        if in_cart:
            hint.update(f"{in_cart} already in cart")

        if self._max_qty < 1:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = "Out of Stock" if not in_cart else "Stock Limit Reached"
            order_btn.disabled = True
            order_btn.variant = "warning"
            for widget_id in ("#btn-sub-qty", "#btn-add-qty", "#input-order-qty"):
                self.query_one(widget_id).disabled = True
            self.query_one("#btn-quit").focus()
            return

        self.query_one("#input-order-qty", Input).validators = [
            Integer(minimum=1, maximum=self._max_qty)
        ]
        self.watch_order_qty(self.order_qty)
        self.query_one("#input-order-qty").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def validate_order_qty(self, qty: int) -> int:
        if self._max_qty < 1:
            return 1
        return min(max(qty, 1), self._max_qty)

    def watch_order_qty(self, qty: int):
        if not self.is_mounted:
            return
        self.query_one("#btn-sub-qty").disabled = qty <= 1
        self.query_one("#btn-add-qty").disabled = qty >= self._max_qty
        self.query_one("#input-order-qty", Input).value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        self.app.state.cart.add_many(self._prod.to_snapshot(), self.order_qty)
        self.app.notify(f"Added {self.order_qty} x {self._prod.name} to cart.")
        self.dismiss(True)
