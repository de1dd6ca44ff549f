from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import (
    ModeSwitchedMessage,
    NewOrderMessage,
    QuitRequestedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.state import GlobalState
from views.scr_admin_categories import AdminCategoriesScreen
from views.scr_admin_orders import AdminOrdersScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_admin_users import AdminUsersScreen
from views.scr_cart import CartScreen
from views.scr_dashboard import DashboardScreen
from views.scr_login import LoginScreen
from views.scr_order_status import OrderStatusScreen
from views.scr_products import ProductsScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    TITLE = "Storefront"

    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "login": LoginScreen,
        "products": ProductsScreen,
        "cart": CartScreen,
        "orders": OrderStatusScreen,
        "dashboard": DashboardScreen,
        "adm_products": AdminProductsScreen,
        "adm_categories": AdminCategoriesScreen,
        "adm_users": AdminUsersScreen,
        "adm_orders": AdminOrdersScreen,
    }

    ADMIN_MODES = {
        "dashboard": "Dashboard",
        "adm_products": "Products",
        "adm_categories": "Categories",
        "adm_users": "Users",
        "adm_orders": "Orders",
    }
    CUSTOMER_MODES = {
        "products": "Products",
        "cart": "Cart",
        "orders": "My Orders",
    }

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/products.tcss",
        "styles/cart.tcss",
        "styles/admin.tcss",
    ]

    state: GlobalState

    def __init__(self):
        super().__init__()
        self.state = GlobalState()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLoginMessage)
    async def handle_user_login(self):
        _logger.info(f"Logged in as {self.state.email} ({self.state.role})")
        await self.go_home()

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.end_session()
        self.notify("Logout successful.")
        await self.switch_mode("login")
        await self.reset_modes()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        # the session token stays stored, the next start logs back in
        self.exit()

    @on(NewOrderMessage)
    def handle_new_order(self, message: NewOrderMessage):
        self.state.placed_orders.append(message.order_id)
        _logger.info(f"New order {message.order_id}")

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, message: ModeSwitchedMessage):
        _logger.debug(f"Mode {message.old_mode} -> {message.new_mode}")

    async def reset_modes(self) -> None:
        """
        Drop the screens of every mode so the next user gets fresh ones
        (sidebar contents depend on who is logged in).
        """
        for mode, screen in self.MODES.items():
            if mode == "login":
                continue
            await self.remove_mode(mode)
            self.add_mode(mode, screen)

    async def go_home(self) -> None:
        home = "dashboard" if self.state.is_admin else "products"
        self.post_message(ModeSwitchedMessage(self.current_mode, home))
        await self.switch_mode(home)

    @work
    async def main_flow(self):
        if await self.state.restore_session():
            await self.go_home()
        else:
            await self.switch_mode("login")


def main() -> None:
    app = StorefrontApp()
    app.run()


if __name__ == "__main__":
    main()
