from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import MarkdownViewer

import api.crud as crud
from api.client import ApiError
from utils.logger import get_logger
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen

_logger = get_logger(__name__)


class DashboardScreen(BaseScreen):
    """
    Admin landing page: how many users, products, orders and categories exist.
    """

    BINDINGS = [Binding("r", "reload", "Refresh", show=True)]

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-counts", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.action_reload()

    @on(ScreenResume)
    @work(exclusive=True)
    async def action_reload(self) -> None:
        viewer = self.query_one("#md-counts", MarkdownViewer)
        try:
            counts = await crud.dashboard_counts()
        except ApiError as e:
            _logger.error(f"Loading dashboard failed: {e}")
            self.notify(e.message, title="Could not load dashboard", severity="error")
            await viewer.document.update("### Dashboard\n\nNo data available.")
            return

        rows = [
            ["Users", counts.users],
            ["Products", counts.products],
            ["Orders", counts.orders],
            ["Categories", counts.categories],
        ]
        md = (
            f"### Welcome, {self.app.state.name or 'Admin'}\n\n"
            + generate_markdown_table(["Resource", "Total"], rows, ["l", "r"])
            + "\n\nUse the menu on the left to manage each resource."
        )
        await viewer.document.update(md)
