from typing import Dict, List, Optional, Sequence, Tuple

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Validator
from textual.widgets import Button, Input, Label, Select

import api.crud
from api.client import ApiError
from api.models import ROLE_ADMIN, ROLE_CUSTOMER, Category, Product, User
from utils.logger import get_logger
from utils.validation import CATEGORY_RULES, PRODUCT_RULES, USER_RULES, validate_form

_logger = get_logger(__name__)


class FormModal(ModalScreen[bool]):
    """
    A titled form with Cancel / Save.
    Subclasses yield their fields in compose_fields() and send the values in save().
    Dismisses with True once save() went through.
    """

    title_text = ""
    RULES: Dict[str, List[Validator]] = {}

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="div-form"):
            yield Label(self.title_text, id="label-form-title")
            yield from self.compose_fields()
            with Horizontal(id="div-form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Save", id="btn-save", variant="primary")

    def compose_fields(self) -> ComposeResult:
        yield from ()

    def field(
        self, name: str, label: str, value: object = "", **kwargs
    ) -> ComposeResult:
        yield Label(label)
        yield Input(
            value="" if value is None else str(value),
            validators=self.RULES.get(name),
            id=f"input-{name}",
            **kwargs,
        )

    def values(self) -> Dict[str, str]:
        result = {
            w.id.removeprefix("input-"): w.value.strip() for w in self.query(Input)
        }
        for select in self.query(Select):
            value = select.value
            result[select.id.removeprefix("select-")] = (
                "" if value == Select.BLANK else str(value)
            )
        return result

    def on_mount(self):
        self.query(Input).first().focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    async def save(self, values: Dict[str, str]) -> None:
        raise NotImplementedError

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        values = self.values()
        errors = validate_form(values, self.RULES)
        if errors:
            for name in errors:
                for widget in self.query(f"#input-{name}"):
                    widget.add_class("-invalid")
            self.notify(
                "\n".join(msgs[0] for msgs in errors.values()),
                title="Please check the form",
                severity="error",
            )
            return

        try:
            await self.save(values)
        except ApiError as e:
            _logger.error(f"{self.title_text} failed: {e}")
            self.notify(e.message, title="Save failed", severity="error")
            return

        self.notify("Saved.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self):
        self.dismiss(False)


class ProductFormModal(FormModal):
    RULES = PRODUCT_RULES

    def __init__(
        self, categories: Sequence[Category], product: Optional[Product] = None
    ) -> None:
        super().__init__()
        self.categories = categories
        self.product = product
        self.title_text = "Edit Product" if product else "New Product"

    def compose_fields(self) -> ComposeResult:
        prod = self.product
        yield from self.field("name", "Name", prod.name if prod else "")
        yield Label("Category")
        options: List[Tuple[str, str]] = [(c.name, c.id) for c in self.categories]
        known = {c.id for c in self.categories}
        yield Select(
            options,
            value=prod.category_id if prod and prod.category_id in known else Select.BLANK,
            prompt="Select a category",
            id="select-category_id",
        )
        yield from self.field(
            "description", "Description", prod.description if prod else ""
        )
        yield from self.field("price", "Price (Rp)", prod.price if prod else "", type="integer")
        yield from self.field("stock", "Stock", prod.stock if prod else "", type="integer")
        yield from self.field("image", "Image URL (optional)", prod.image if prod else "")
        yield from self.field("size", "Size (optional)", prod.size if prod else "")
        yield from self.field("color", "Color (optional)", prod.color if prod else "")

    async def save(self, values: Dict[str, str]) -> None:
        data = api.crud.product_payload(
            name=values["name"],
            category_id=values["category_id"],
            description=values["description"],
            price=int(values["price"]),
            stock=int(values["stock"]),
            image=values.get("image", ""),
            size=values.get("size", ""),
            color=values.get("color", ""),
        )
        if self.product:
            await api.crud.update_product(self.product.id, data)
        else:
            await api.crud.create_product(data)


class CategoryFormModal(FormModal):
    RULES = CATEGORY_RULES

    def __init__(self, category: Optional[Category] = None) -> None:
        super().__init__()
        self.category = category
        self.title_text = "Edit Category" if category else "New Category"

    def compose_fields(self) -> ComposeResult:
        yield from self.field("name", "Name", self.category.name if self.category else "")

    async def save(self, values: Dict[str, str]) -> None:
        if self.category:
            await api.crud.update_category(self.category.id, values["name"])
        else:
            await api.crud.create_category(values["name"])


class UserFormModal(FormModal):
    RULES = USER_RULES

    def __init__(self, user: Optional[User] = None) -> None:
        super().__init__()
        self.user = user
        self.title_text = "Edit User" if user else "New User"

    def compose_fields(self) -> ComposeResult:
        user = self.user
        yield from self.field("name", "Name", user.name if user else "")
        yield from self.field("email", "Email", user.email if user else "")
        yield from self.field(
            "password",
            "Password" + (" (leave blank to keep)" if user else ""),
            password=True,
        )
        yield Label("Role")
        yield Select(
            [("Customer", ROLE_CUSTOMER), ("Admin", ROLE_ADMIN)],
            value=user.role if user and user.role in (ROLE_ADMIN, ROLE_CUSTOMER) else ROLE_CUSTOMER,
            allow_blank=False,
            id="select-role",
        )

    async def save(self, values: Dict[str, str]) -> None:
        data = api.crud.user_payload(
            values["name"], values["email"], values["role"], values.get("password", "")
        )
        if self.user:
            await api.crud.update_user(self.user.id, data)
        else:
            if not values.get("password"):
                raise ApiError("A password is required for new users.")
            await api.crud.create_user(data)
