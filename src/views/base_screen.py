from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from store.cart import CartState
from utils.messages import ModeSwitchedMessage, UserLogoutMessage
from utils.pure import format_currency, generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal


class Sidebar(Container):
    def __init__(self) -> None:
        super().__init__()
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Label("", id="label-cart-badge")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        state = self.app.state
        if not state.is_authenticated:
            return

        rows = [
            ["Name", state.name or "-"],
            ["Email", state.email or "-"],
            ["Role", "Admin" if state.is_admin else "Customer"],
        ]
        await self.query_one(Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

        modes = self.app.ADMIN_MODES if state.is_admin else self.app.CUSTOMER_MODES
        list_menu = self.query_one("#list-menu", ListView)
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        self.highlight_item(self.app.current_mode)

        badge = self.query_one("#label-cart-badge", Label)
        if state.is_admin:
            badge.display = False
        else:
            self.update_badge(state.cart.state)
            self._unsubscribe = state.cart.subscribe(self.update_badge)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()

    def update_badge(self, cart: CartState) -> None:
        self.query_one("#label-cart-badge", Label).update(
            f"Cart: {cart.item_count} item(s), {format_currency(cart.total)}"
        )

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.app.current_mode)
        if self.app.current_mode != selected_mode:
            self.app.post_message(
                ModeSwitchedMessage(self.app.current_mode, selected_mode)
            )
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        for item in self.query_one("#list-menu").children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        """
        Set the header subtitle and whether the sidebar is shown.
        The subtitle defaults to the menu label of the mode this screen serves.
        """
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if type(self) is v:
                labels = {**self.app.CUSTOMER_MODES, **self.app.ADMIN_MODES}
                self.sub_title = labels.get(k, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
