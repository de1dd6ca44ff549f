from typing import Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import DataTable, Input, Label, Select

import api.crud
from api.client import ApiError
from api.models import Category, Product
from store.search import SHOW_ALL, SORT_LABELS, SortKey, storefront_pipeline
from utils.logger import get_logger
from utils.pure import format_currency, truncate
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

_logger = get_logger(__name__)


class ProductsScreen(BaseScreen):
    """
    storefront listing, for customers only
    """

    BINDINGS = [
        Binding("a", "quick_add", "Add to Cart", show=True),
        Binding("r", "reload", "Reload", show=True),
        # only here to be displayed in footer
        Binding("fn+shift+1", "abs(1)", "View Product", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()
        self.pipeline = storefront_pipeline()
        self._products: List[Product] = []
        self._by_id: Dict[str, Product] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-search-bar"):
            yield Input(
                id="input-search", placeholder="Search products..."
            )
            yield Select(
                [("All Categories", SHOW_ALL)],
                value=SHOW_ALL,
                allow_blank=False,
                id="select-category",
            )
            yield Select(
                [(label, key.value) for key, label in SORT_LABELS.items()],
                value=SortKey.NAME_ASC.value,
                allow_blank=False,
                id="select-sort",
            )
        yield DataTable(id="table-search-result")
        yield Label("", id="label-result-count")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Category", "Price", "Stock", "Description")

        self.query_one("#input-search").focus()
        self.load_products()
        self.load_categories()

    @work(exclusive=True, group="products")
    async def load_products(self) -> None:
        try:
            products = await api.crud.list_products()
        except ApiError as e:
            _logger.error(f"Loading products failed: {e}")
            self.notify(e.message, title="Could not load products", severity="error")
            return
        self._products = products
        self._by_id = {p.id: p for p in self._products}
        self.refresh_table()

    @work(exclusive=True, group="categories")
    async def load_categories(self) -> None:
        try:
            categories: List[Category] = await api.crud.list_categories()
        except ApiError as e:
            _logger.warning(f"Loading categories failed: {e}")
            return
        select = self.query_one("#select-category", Select)
        select.set_options(
            [("All Categories", SHOW_ALL)] + [(c.name, c.id) for c in categories]
        )
        # set_options drops the selection
        select.value = self.pipeline.filter_value

    def refresh_table(self) -> None:
        shown = self.pipeline.apply(self._products)

        table = self.query_one(DataTable)
        table.clear()
        for prod in shown:
            table.add_row(
                prod.name,
                prod.category_name or "-",
                format_currency(prod.price),
                prod.stock if not prod.low_stock else f"{prod.stock} (low)",
                truncate(prod.description, 40),
                key=prod.id,
            )

        self.query_one("#label-result-count", Label).update(
            f"Showing {len(shown)} of {len(self._products)} products"
        )

    @on(Input.Changed, "#input-search")
    def handle_query_change(self, message: Input.Changed) -> None:
        self.pipeline.query = message.value
        self.refresh_table()

    @on(Select.Changed, "#select-category")
    def handle_category_change(self, message: Select.Changed) -> None:
        if message.value == Select.BLANK:
            return
        self.pipeline.filter_value = str(message.value)
        self.refresh_table()

    @on(Select.Changed, "#select-sort")
    def handle_sort_change(self, message: Select.Changed) -> None:
        if message.value == Select.BLANK:
            return
        self.pipeline.sort_key = SortKey(message.value)
        self.refresh_table()

    def _selected_product(self) -> Product | None:
        table = self.query_one(DataTable)
        if not table.row_count:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self._by_id.get(row_key.value)

    @on(DataTable.RowSelected)
    @work()
    async def handle_row_selected(self, message: DataTable.RowSelected) -> None:
        prod = self._by_id.get(message.row_key.value)
        if prod is not None:
            await self.app.push_screen_wait(ProdDetailModal(prod))

    def action_quick_add(self) -> None:
        prod = self._selected_product()
        if prod is None:
            return

        line = self.app.state.cart.state.get(prod.id)
        if (line.quantity if line else 0) >= prod.stock:
            self.notify(f"{prod.name} is out of stock.", severity="warning")
            return

        self.app.state.cart.add(prod.to_snapshot())
        self.notify(f"{prod.name} added to cart.")

    def action_reload(self) -> None:
        self.load_products()
        self.load_categories()
