from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.widgets import Button, Label, Rule

from store.cart import CartLine, CartState, grand_total, shipping_cost
from utils.pure import format_currency
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal


class CartItemWidget(HorizontalGroup):
    def __init__(self, line: CartLine):
        super().__init__()
        self.line = line

    def compose(self):
        line = self.line
        product = line.product
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(product.name, id="label-item-name")
                yield Label(format_currency(product.price), id="label-item-price")
                yield Label(format_currency(line.subtotal), id="label-item-subtotal")
            with Container(id="div-actions"):
                yield Button("-", id="btn-item-sub")
                yield Label(str(line.quantity), id="label-item-qty")
                yield Button(
                    "+",
                    id="btn-item-add",
                    disabled=line.quantity >= product.stock,
                )
                yield Button("Remove", id="btn-item-remove", variant="error")

    def _bump(self, step: int) -> None:
        cart = self.app.state.cart
        # read the committed line, this widget may not be redrawn yet
        line = cart.state.get(self.line.id)
        if line is None:
            return
        if step > 0 and line.quantity >= line.product.stock:
            return
        cart.set_quantity(line.id, line.quantity + step)

    @on(Button.Pressed, "#btn-item-add")
    def handle_add(self) -> None:
        self._bump(1)

    @on(Button.Pressed, "#btn-item-sub")
    def handle_sub(self) -> None:
        # dropping to zero removes the line
        self._bump(-1)

    @on(Button.Pressed, "#btn-item-remove")
    def handle_remove(self) -> None:
        self.app.state.cart.remove(self.line.id)
        self.notify(f"{self.line.product.name} removed from cart.")


class CartScreen(BaseScreen):
    """
    cart contents with per line controls, totals and checkout
    """

    def __init__(self) -> None:
        super().__init__()
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("", id="label-cart-subtotal")
        yield Label("", id="label-cart-shipping")
        yield Rule(line_style="dashed")
        yield Label("", id="label-cart-total")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        cart = self.app.state.cart
        self._unsubscribe = cart.subscribe(self.handle_cart_change)
        self.handle_cart_change(cart.state)

    def on_unmount(self):
        if self._unsubscribe:
            self._unsubscribe()

    def handle_cart_change(self, state: CartState) -> None:
        self.render_cart(state)

    @work(exclusive=True)  # must be exclusive, else rapid clicks mount duplicates
    async def render_cart(self, state: CartState) -> None:
        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        await content.mount_all([CartItemWidget(line) for line in state.lines])

        if state.is_empty:
            content.add_class("no-items")
        else:
            content.remove_class("no-items")

        shipping = shipping_cost(state.total)
        self.query_one("#label-cart-subtotal", Label).update(
            f"Subtotal ({state.item_count} items): {format_currency(state.total)}"
        )
        self.query_one("#label-cart-shipping", Label).update(
            "Shipping: " + ("Free" if shipping == 0 else format_currency(shipping))
        )
        self.query_one("#label-cart-total", Label).update(
            f"Total: {format_currency(grand_total(state.total))}"
        )
        self.query_one("#btn-checkout", Button).disabled = state.is_empty
        self.query_one("#btn-clear-cart", Button).disabled = state.is_empty

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        cart = self.app.state.cart
        if cart.state.is_empty:
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            cart.clear()

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        """
        Open up checkout screen
        """
        if self.app.state.cart.state.is_empty:
            self.app.notify("Cart is empty.", severity="warning")
            return

        await self.app.push_screen_wait(CheckoutModal())
