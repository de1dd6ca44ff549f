# in-memory cart, keyed by product id, total recomputed on every mutation
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

PLACEHOLDER_IMAGE = "/placeholder.svg"

FREE_SHIPPING_THRESHOLD = 500_000
FLAT_SHIPPING_COST = 25_000


@dataclass(frozen=True)
class ProductSnapshot:
    """
    Copy of a product taken when it is put in the cart.
    Later changes to the remote product do not reach lines already added.
    """

    id: str
    name: str
    price: int  # smallest currency unit
    image: str = PLACEHOLDER_IMAGE
    description: str = ""
    category: str = ""
    stock: int = 0
    size: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class CartLine:
    product: ProductSnapshot
    quantity: int

    @property
    def id(self) -> str:
        return self.product.id

    @property
    def subtotal(self) -> int:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class CartState:
    lines: Tuple[CartLine, ...] = ()
    total: int = 0

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def get(self, identifier: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.id == identifier:
                return line
        return None


EMPTY_CART = CartState()


def compute_total(lines) -> int:
    return sum(line.product.price * line.quantity for line in lines)


def _with_lines(lines) -> CartState:
    lines = tuple(lines)
    return CartState(lines=lines, total=compute_total(lines))


def add_line(state: CartState, product: ProductSnapshot) -> CartState:
    """
    Increment the line for product.id by one, or append a new line with quantity 1.
    Stock is not checked here.
    """
    if state.get(product.id) is None:
        return _with_lines([*state.lines, CartLine(product, 1)])
    return _with_lines(
        replace(line, quantity=line.quantity + 1) if line.id == product.id else line
        for line in state.lines
    )


def set_line_quantity(state: CartState, identifier: str, quantity: int) -> CartState:
    """Replace the quantity of a line; quantity <= 0 drops the line."""
    lines = (
        replace(line, quantity=quantity) if line.id == identifier else line
        for line in state.lines
    )
    return _with_lines(line for line in lines if line.quantity > 0)


def remove_line(state: CartState, identifier: str) -> CartState:
    return _with_lines(line for line in state.lines if line.id != identifier)


def shipping_cost(total: int) -> int:
    return 0 if total >= FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_COST


def grand_total(total: int) -> int:
    return total + shipping_cost(total)


class Cart:
    """
    State container for the cart, handed to screens through the app state.

    Every mutation replaces `state` with a new CartState and notifies subscribers
    synchronously, in call order.
    """

    def __init__(self, state: CartState = EMPTY_CART) -> None:
        self._state = state
        self._subscribers: List[Callable[[CartState], None]] = []

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return self._state.lines

    @property
    def total(self) -> int:
        return self._state.total

    def subscribe(self, callback: Callable[[CartState], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _commit(self, state: CartState) -> CartState:
        self._state = state
        for callback in list(self._subscribers):
            callback(state)
        return state

    def add(self, product: ProductSnapshot) -> CartState:
        return self._commit(add_line(self._state, product))

    def add_many(self, product: ProductSnapshot, count: int) -> CartState:
        state = self._state
        for _ in range(count):
            state = add_line(state, product)
        if count <= 0:
            return state
        return self._commit(state)

    def set_quantity(self, identifier: str, quantity: int) -> CartState:
        return self._commit(set_line_quantity(self._state, identifier, quantity))

    def remove(self, identifier: str) -> CartState:
        return self._commit(remove_line(self._state, identifier))

    def clear(self) -> CartState:
        return self._commit(EMPTY_CART)
