from typing import List

import api.crud
from api.client import ApiError
from api.models import ROLE_ADMIN, User
from store.search import SearchPipeline, admin_users_pipeline
from utils.pure import format_date
from views.admin_table import AdminTableScreen
from views.modal_forms import UserFormModal


class AdminUsersScreen(AdminTableScreen):
    NOUN = "user"
    COLUMNS = ("Name", "Email", "Role", "Joined")

    def make_pipeline(self) -> SearchPipeline:
        return admin_users_pipeline()

    async def fetch(self) -> List[User]:
        return await api.crud.list_users()

    def row(self, record: User):
        role = "Admin" if record.role == ROLE_ADMIN else "Customer"
        return (record.name, record.email, role, format_date(record.created_at))

    async def create(self) -> bool:
        return await self.app.push_screen_wait(UserFormModal())

    async def edit(self, record: User) -> bool:
        return await self.app.push_screen_wait(UserFormModal(record))

    async def remove(self, record: User) -> None:
        if record.email == self.app.state.email:
            raise ApiError("You cannot delete your own account.")
        await api.crud.delete_user(record.id)
