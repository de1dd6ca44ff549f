from typing import Any, Dict, List, Optional, Sequence, Tuple

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import DataTable, Input, Label, Select

from api.client import ApiError
from store.search import SHOW_ALL, SearchPipeline
from utils.logger import get_logger
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDeleteModal

_logger = get_logger(__name__)


class AdminTableScreen(BaseScreen):
    """
    Searchable table of one resource with create / edit / delete.

    Subclasses fill in:
      - NOUN, COLUMNS and optionally FILTER_ALL_LABEL (enables the filter select)
      - make_pipeline(), fetch(), row()
      - filter_options() when filtering
      - create() / edit() / remove() for writable resources, READ_ONLY otherwise
    """

    NOUN = "record"
    COLUMNS: Sequence[str] = ()
    FILTER_ALL_LABEL: Optional[str] = None
    READ_ONLY = False

    BINDINGS = [
        Binding("n", "create", "New", show=True),
        Binding("e", "edit", "Edit", show=True),
        Binding("d", "delete", "Delete", show=True),
        Binding("r", "reload", "Reload", show=True),
    ]

    def __init__(self):
        super().__init__()
        self.pipeline: SearchPipeline = self.make_pipeline()
        self._records: List[Any] = []
        self._by_key: Dict[str, Any] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-search-bar"):
            yield Input(id="input-search", placeholder=f"Search {self.NOUN}s...")
            if self.FILTER_ALL_LABEL:
                yield Select(
                    [(self.FILTER_ALL_LABEL, SHOW_ALL)],
                    value=SHOW_ALL,
                    allow_blank=False,
                    id="select-filter",
                )
        yield DataTable(id="table-records")
        yield Label("", id="label-result-count")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*self.COLUMNS)
        self.query_one("#input-search").focus()

    def check_action(self, action: str, parameters: Tuple[object, ...]) -> Optional[bool]:
        if self.READ_ONLY and action in ("create", "edit", "delete"):
            return False
        return True

    # ---------------------------
    # hooks
    # ---------------------------

    def make_pipeline(self) -> SearchPipeline:
        raise NotImplementedError

    async def fetch(self) -> List[Any]:
        raise NotImplementedError

    def row(self, record: Any) -> Sequence[Any]:
        raise NotImplementedError

    def key_of(self, record: Any) -> str:
        return record.id

    async def filter_options(self) -> List[Tuple[str, str]]:
        return []

    async def create(self) -> bool:
        return False

    async def edit(self, record: Any) -> bool:
        return False

    async def remove(self, record: Any) -> None:
        pass

    async def open(self, record: Any) -> None:
        """Enter on a row. Editable tables edit, read-only ones override this."""
        if await self.edit(record):
            self.action_reload()

    # ---------------------------
    # loading and rendering
    # ---------------------------

    @on(ScreenResume)
    @work(exclusive=True, group="load")
    async def action_reload(self) -> None:
        try:
            self._records = await self.fetch()
            options = await self.filter_options() if self.FILTER_ALL_LABEL else []
        except ApiError as e:
            _logger.error(f"Loading {self.NOUN}s failed: {e}")
            self.notify(e.message, title=f"Could not load {self.NOUN}s", severity="error")
            return

        self._by_key = {self.key_of(r): r for r in self._records}
        if self.FILTER_ALL_LABEL:
            select = self.query_one("#select-filter", Select)
            select.set_options([(self.FILTER_ALL_LABEL, SHOW_ALL)] + options)
            known = {value for _, value in options}
            if self.pipeline.filter_value not in known:
                self.pipeline.filter_value = SHOW_ALL
            select.value = self.pipeline.filter_value
        self.refresh_table()

    def refresh_table(self) -> None:
        shown = self.pipeline.apply(self._records)

        table = self.query_one(DataTable)
        table.clear()
        for record in shown:
            table.add_row(*self.row(record), key=self.key_of(record))

        self.query_one("#label-result-count", Label).update(
            f"Showing {len(shown)} of {len(self._records)} {self.NOUN}s"
        )

    @on(Input.Changed, "#input-search")
    def handle_query_change(self, message: Input.Changed) -> None:
        self.pipeline.query = message.value
        self.refresh_table()

    @on(Select.Changed, "#select-filter")
    def handle_filter_change(self, message: Select.Changed) -> None:
        if message.value == Select.BLANK:
            return
        self.pipeline.filter_value = str(message.value)
        self.refresh_table()

    def selected(self) -> Optional[Any]:
        table = self.query_one(DataTable)
        if not table.row_count:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self._by_key.get(row_key.value)

    # ---------------------------
    # actions
    # ---------------------------

    @on(DataTable.RowSelected)
    @work(group="crud")
    async def handle_row_selected(self, message: DataTable.RowSelected) -> None:
        record = self._by_key.get(message.row_key.value)
        if record is not None:
            await self.open(record)

    @work(group="crud")
    async def action_create(self) -> None:
        if await self.create():
            self.action_reload()

    @work(group="crud")
    async def action_edit(self) -> None:
        record = self.selected()
        if record is None:
            self.notify(f"No {self.NOUN} selected.", severity="warning")
            return
        if await self.edit(record):
            self.action_reload()

    @work(group="crud")
    async def action_delete(self) -> None:
        record = self.selected()
        if record is None:
            self.notify(f"No {self.NOUN} selected.", severity="warning")
            return
        if not await self.app.push_screen_wait(ConfirmDeleteModal(self.NOUN)):
            return

        try:
            await self.remove(record)
        except ApiError as e:
            _logger.error(f"Deleting {self.NOUN} {self.key_of(record)} failed: {e}")
            self.notify(e.message, title="Delete failed", severity="error")
            return

        self.notify(f"{self.NOUN.capitalize()} deleted.")
        self.action_reload()
