"""Board screen showing KPI columns and cards."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Footer, Static

from kpiboard.dashboard import Dashboard
from kpiboard.model.actions import Action, Location
from kpiboard.model.entities import BoardState, Card, Column
from kpiboard.model.selection import check_column_delete
from kpiboard.ui.card import CardWidget
from kpiboard.ui.column import ColumnHeader, ColumnWidget
from kpiboard.ui.confirm import ConfirmScreen, NoticeScreen
from kpiboard.ui.modals import BoardModal, EditKpiScreen, build_modal
from kpiboard.ui.watcher import StoreWatcherMixin

logger = logging.getLogger(__name__)

KPI_FORMS = ("create_kpi", "create_derived_kpi", "tracking", "task_kpi")


class BoardScreen(StoreWatcherMixin, Screen):
    """Main board screen showing all columns."""

    DEFAULT_CSS = """
    BoardScreen #board-header {
        height: 1;
        width: 100%;
        text-style: bold;
        padding: 0 1;
        background: $primary-darken-2;
    }
    BoardScreen #columns {
        width: 100%;
        height: 1fr;
    }
    """

    BINDINGS = [
        ("r", "refresh_column", "Refresh"),
        ("n", "new_kpi", "New KPI"),
        ("c", "new_column", "New column"),
        ("x", "delete_column", "Delete column"),
        ("e", "edit_kpi", "Edit KPI"),
        ("d", "delete_kpi", "Delete KPI"),
        ("ctrl+left", "move_column(-1)", "Column left"),
        ("ctrl+right", "move_column(1)", "Column right"),
        Binding("escape", "app.close_all", "Close dialogs", show=False),
    ]

    def __init__(self, dashboard: Dashboard):
        self._init_watcher()
        super().__init__()
        self.dashboard = dashboard
        self._columns: tuple[Column, ...] = ()
        self._modal_screens: dict[str, BoardModal] = {}
        self._focus_card: str | None = None
        self._rendering = False
        self._render_pending = False

    def compose(self) -> ComposeResult:
        yield Static("KPI board", id="board-header")
        yield Horizontal(id="columns")
        yield Footer()

    async def on_mount(self) -> None:
        self.store_watch(self.dashboard.store, self._on_state_changed)
        await self._render_state()
        self.call_after_refresh(self._focus_first)
        self.set_interval(0.5, self._update_statuses)

    def _on_state_changed(self, old: BoardState, new: BoardState, action: Action) -> None:
        self.call_later(self._render_state)

    # -- rendering --

    async def _render_state(self) -> None:
        """Bring columns and dialogs in line with the current state."""
        if self._rendering:
            self._render_pending = True
            return
        self._rendering = True
        try:
            while True:
                self._render_pending = False
                state = self.dashboard.state
                await self._render_columns(state)
                self._sync_modals(state)
                if not self._render_pending:
                    break
        finally:
            self._rendering = False

    async def _render_columns(self, state: BoardState) -> None:
        if state.columns is self._columns:
            return
        container = self.query_one("#columns", Horizontal)
        focus = self._focus_card or self._focused_card_id()
        widgets = list(container.query(ColumnWidget))
        if [w.column_id for w in widgets] == [c.id for c in state.columns]:
            for widget, column in zip(widgets, state.columns):
                await widget.update_column(column)
        else:
            await container.remove_children()
            await container.mount_all(
                ColumnWidget(column, self.dashboard.refresh.status(column.id)) for column in state.columns
            )
        self._columns = state.columns
        self._update_statuses()
        if focus is not None:
            self._refocus(focus)

    def _update_statuses(self) -> None:
        for widget in self.query(ColumnWidget):
            widget.set_status(self.dashboard.refresh.status(widget.column_id))

    def _sync_modals(self, state: BoardState) -> None:
        """Push a dialog for each newly set flag, close those whose flag cleared.

        A dialog covered by another screen cannot be popped yet; it is
        marked and closes itself once it is on top again.
        """
        for name in reversed(list(self._modal_screens)):
            if getattr(state.modals, name):
                continue
            screen = self._modal_screens.pop(name)
            if self.app.screen is screen:
                self.app.pop_screen()
            elif screen in self.app.screen_stack:
                screen.flag_cleared = True

        for name in state.modals.open():
            if name in self._modal_screens:
                continue
            screen = build_modal(name, state)
            if screen is None:
                continue
            self._modal_screens[name] = screen
            self.app.push_screen(
                screen, lambda result, name=name, screen=screen: self._on_modal_closed(name, screen, result)
            )

    def _on_modal_closed(self, name: str, screen: BoardModal, result) -> None:
        """A dialog was dismissed by the user."""
        if self._modal_screens.get(name) is not screen:
            return
        del self._modal_screens[name]
        state = self.dashboard.state
        column = state.selected_column
        if name in ("detail_view", "derived_detail_view"):
            card = screen.card
            self.dashboard.close_modal(name)
            if result == "action_plan":
                self.dashboard.open_action_plan(card)
            elif result == "edit":
                self._edit_kpi(card)
            elif result == "delete":
                self._confirm_delete_kpi(card)
            return
        self.dashboard.close_modal(name)
        if result is None:
            return
        if name in KPI_FORMS:
            column_id = column.id if column is not None else None
            self.run_worker(self._create_kpi(column_id, result), exclusive=False)
        elif name == "create_task":
            title, description = result
            self.run_worker(self._create_column(title, description), exclusive=False)

    async def _create_kpi(self, column_id: str | None, form: dict) -> None:
        try:
            card = await self.dashboard.create_kpi(form["title"], column_id, form["kind"], form["payload"])
        except Exception as e:
            logger.warning("creating KPI failed: %s", e)
            self.notify(f"Could not create KPI: {e}", severity="error")
            return
        self._focus_card = card.id
        self.notify(f"Created {card.title}")

    async def _create_column(self, title: str, description: str) -> None:
        try:
            column = await self.dashboard.create_column(title, description)
        except Exception as e:
            logger.warning("creating column failed: %s", e)
            self.notify(f"Could not create column: {e}", severity="error")
            return
        self.notify(f"Created column {column.title}")

    def _edit_kpi(self, card: Card) -> None:
        def on_result(changes: dict | None) -> None:
            if changes:
                self.run_worker(self._save_kpi(card.id, changes), exclusive=False)

        self.app.push_screen(EditKpiScreen(card), on_result)

    async def _save_kpi(self, card_id: str, changes: dict) -> None:
        try:
            card = await self.dashboard.edit_kpi(card_id, changes)
        except Exception as e:
            logger.warning("editing %s failed: %s", card_id, e)
            self.notify(f"Could not save KPI: {e}", severity="error")
            return
        self._focus_card = card.id
        self.notify(f"Saved {card.title}")

    def _confirm_delete_kpi(self, card: Card) -> None:
        def on_confirm(confirmed: bool) -> None:
            if confirmed:
                self.run_worker(self._delete_kpi(card.id), exclusive=False)

        self.app.push_screen(
            ConfirmScreen("Are you sure you want to delete this KPI?", yes="Delete", no="Cancel", heading="Delete KPI"),
            on_confirm,
        )

    async def _delete_kpi(self, card_id: str) -> None:
        try:
            await self.dashboard.delete_kpi(card_id)
        except Exception as e:
            logger.warning("deleting %s failed: %s", card_id, e)
            self.notify(f"Could not delete KPI: {e}", severity="error")
            return
        self.notify("KPI deleted")
        self.call_after_refresh(self._focus_first)

    # -- focus --

    def _focus_first(self) -> None:
        for widget in self.query(ColumnWidget):
            cards = [c for c in widget.card_widgets() if not c.card.special]
            if cards:
                cards[0].focus()
                return
        headers = list(self.query(ColumnHeader))
        if headers:
            headers[0].focus()

    def _focused_card_id(self) -> str | None:
        focused = self.focused
        return focused.card.id if isinstance(focused, CardWidget) else None

    def _refocus(self, card_id: str) -> None:
        for widget in self.query(CardWidget):
            if widget.card.id == card_id:
                widget.focus()
                self._focus_card = None
                return

    def _focused_kpi(self) -> Card | None:
        """The KPI under the focused card widget, if it is a data card."""
        focused = self.focused
        if not isinstance(focused, CardWidget) or focused.card.special:
            return None
        column = self.dashboard.state.column(focused.column_id)
        return column.find(focused.card.id) if column is not None else None

    def _focused_column(self) -> Column | None:
        widget = self.focused
        while widget is not None:
            if isinstance(widget, (ColumnWidget, ColumnHeader, CardWidget)):
                return self.dashboard.state.column(widget.column_id)
            widget = widget.parent
        return None

    # -- cards --

    def on_card_widget_clicked(self, event: CardWidget.Clicked) -> None:
        event.stop()
        column = self.dashboard.state.column(event.column_id)
        self.dashboard.click_card(event.card, column)

    def action_edit_kpi(self) -> None:
        card = self._focused_kpi()
        if card is not None:
            self._edit_kpi(card)

    def action_delete_kpi(self) -> None:
        card = self._focused_kpi()
        if card is not None:
            self._confirm_delete_kpi(card)

    def on_card_widget_move_requested(self, event: CardWidget.MoveRequested) -> None:
        """Translate a keyboard move into one drag gesture."""
        event.stop()
        state = self.dashboard.state
        column_index = state.column_index(event.column_id)
        if column_index < 0:
            return
        column = state.columns[column_index]
        index = next((i for i, c in enumerate(column.items) if c.id == event.card.id), -1)
        if index < 0:
            return

        if event.dx:
            target_index = column_index + event.dx
            if not 0 <= target_index < len(state.columns):
                return
            target = state.columns[target_index]
            position = min(index, len(target.items))
        else:
            target = column
            position = index + event.dy
            if not 0 <= position < len(column.items):
                return

        pinned = sum(1 for c in target.items if c.special)
        position = max(position, pinned)
        destination = Location(target.id, position)
        source = Location(column.id, index)
        if source == destination:
            return
        self._focus_card = event.card.id
        self.run_worker(self.dashboard.drag_end(source, destination), exclusive=False)

    # -- columns --

    def action_refresh_column(self) -> None:
        column = self._focused_column()
        if column is not None:
            self.dashboard.refresh_column(column.id)
            self._update_statuses()

    def action_new_kpi(self) -> None:
        column = self._focused_column()
        self.dashboard.open_modal("create_kpi", column)

    def action_new_column(self) -> None:
        self.dashboard.open_modal("create_task")

    def action_move_column(self, direction: int) -> None:
        column = self._focused_column()
        if column is None:
            return
        index = self.dashboard.state.column_index(column.id) + direction
        if 0 <= index < len(self.dashboard.state.columns):
            self.dashboard.move_column(column.id, index)

    def action_delete_column(self) -> None:
        column = self._focused_column()
        if column is None:
            return
        notice = check_column_delete(column)
        if notice is not None:
            self.app.push_screen(NoticeScreen(notice))
            return

        def on_confirm(confirmed: bool) -> None:
            if confirmed:
                self.run_worker(self._delete_column(column.id), exclusive=False)

        self.app.push_screen(ConfirmScreen(f"Delete column {column.title}?"), on_confirm)

    async def _delete_column(self, column_id: str) -> None:
        notice = await self.dashboard.delete_column(column_id)
        if notice is not None:
            self.app.push_screen(NoticeScreen(notice))
            return
        self.call_after_refresh(self._focus_first)
