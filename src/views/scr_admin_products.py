from typing import List, Tuple

import api.crud
from api.models import Category, Product
from store.search import SearchPipeline, admin_products_pipeline
from utils.pure import format_currency, truncate
from views.admin_table import AdminTableScreen
from views.modal_forms import ProductFormModal


class AdminProductsScreen(AdminTableScreen):
    NOUN = "product"
    COLUMNS = ("Name", "Category", "Price", "Stock", "Size", "Color")
    FILTER_ALL_LABEL = "All Categories"

    def __init__(self):
        super().__init__()
        self._categories: List[Category] = []

    def make_pipeline(self) -> SearchPipeline:
        return admin_products_pipeline()

    async def fetch(self) -> List[Product]:
        return await api.crud.list_products()

    async def filter_options(self) -> List[Tuple[str, str]]:
        self._categories = await api.crud.list_categories()
        return [(c.name, c.id) for c in self._categories]

    def row(self, record: Product):
        stock = str(record.stock) + (" (low)" if record.low_stock else "")
        return (
            truncate(record.name, 40),
            record.category_name or "-",
            format_currency(record.price),
            stock,
            record.size or "-",
            record.color or "-",
        )

    async def create(self) -> bool:
        return await self.app.push_screen_wait(ProductFormModal(self._categories))

    async def edit(self, record: Product) -> bool:
        return await self.app.push_screen_wait(
            ProductFormModal(self._categories, record)
        )

    async def remove(self, record: Product) -> None:
        await api.crud.delete_product(record.id)
