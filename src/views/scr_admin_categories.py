from typing import List

import api.crud
from api.models import Category
from store.search import SearchPipeline, admin_categories_pipeline
from utils.pure import format_date
from views.admin_table import AdminTableScreen
from views.modal_forms import CategoryFormModal


class AdminCategoriesScreen(AdminTableScreen):
    NOUN = "category"
    COLUMNS = ("Name", "Created", "Updated")

    def make_pipeline(self) -> SearchPipeline:
        return admin_categories_pipeline()

    async def fetch(self) -> List[Category]:
        return await api.crud.list_categories()

    def row(self, record: Category):
        return (record.name, format_date(record.created_at), format_date(record.updated_at))

    async def create(self) -> bool:
        return await self.app.push_screen_wait(CategoryFormModal())

    async def edit(self, record: Category) -> bool:
        return await self.app.push_screen_wait(CategoryFormModal(record))

    async def remove(self, record: Category) -> None:
        await api.crud.delete_category(record.id)
