"""A board session: the store plus the collaborators that feed it.

UI code talks to a Dashboard instead of mutating anything itself. Every
method ends in one or more ``store.dispatch`` calls; asynchronous work
(fetching, creating, deleting) happens first and re-enters the store by
dispatching when it completes.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from kpiboard.config import Settings
from kpiboard.model.actions import (
    Location,
    MoveItem,
    RefreshColumn,
    RemoveColumn,
    ReplaceColumns,
    SetTaskUserSelections,
)
from kpiboard.model.entities import BoardState, Card, Column, initial_columns
from kpiboard.model.move import move_column
from kpiboard.model import selection
from kpiboard.model.selection import Notice
from kpiboard.refresh import RefreshCoordinator
from kpiboard.services import (
    ColumnProvider,
    CreationService,
    DataFetchService,
    DeletionService,
    EditingService,
    PlacementService,
)
from kpiboard.store import Store

logger = logging.getLogger(__name__)


class Dashboard:
    """Owns a Store and a RefreshCoordinator and wires the services to them."""

    def __init__(
        self,
        fetcher: DataFetchService,
        provider: ColumnProvider | None = None,
        deleter: DeletionService | None = None,
        creator: CreationService | None = None,
        placement: PlacementService | None = None,
        editor: EditingService | None = None,
        settings: Settings | None = None,
        store: Store | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store or Store()
        self.provider = provider
        self.deleter = deleter
        self.creator = creator
        self.placement = placement
        self.editor = editor
        self.refresh = RefreshCoordinator(self.store, fetcher, self.settings)

    @classmethod
    def from_source(cls, source, settings: Settings | None = None) -> Dashboard:
        """A Dashboard whose every collaborator is one source object."""
        return cls(
            fetcher=source,
            provider=source,
            deleter=source,
            creator=source,
            placement=source,
            editor=source,
            settings=settings or source.settings(),
        )

    @property
    def state(self) -> BoardState:
        return self.store.get_state()

    @property
    def primordial_id(self) -> str:
        return self.settings.primordial_id

    # -- lifecycle --

    def start(self) -> None:
        """Seed the board with the primordial column and start refreshing."""
        if not self.state.columns:
            self.store.dispatch(ReplaceColumns(initial_columns(self.primordial_id)))
            self.store.dispatch(RefreshColumn(self.primordial_id))
        self.refresh.start()

    async def open(self) -> None:
        """Start the session and load the provisioned columns."""
        self.start()
        await self.load_columns()

    def close(self) -> None:
        self.refresh.close()

    async def wait_idle(self) -> None:
        await self.refresh.wait_idle()

    # -- provisioning --

    async def load_columns(self) -> None:
        """Replace the board with primordial + provisioned columns.

        Columns already on the board keep their cards; new ones are marked
        for refresh so their first fetch runs.
        """
        if self.provider is None:
            return
        provisioned = await self.provider.list_columns()
        self.store.dispatch(ReplaceColumns(self._combine(provisioned)))
        logger.info("loaded %d columns", len(provisioned))

    def _combine(self, provisioned: list[Column]) -> tuple[Column, ...]:
        state = self.state
        primordial = state.column(self.primordial_id) or initial_columns(self.primordial_id)[0]
        columns = [primordial]
        for col in provisioned:
            if col.id == self.primordial_id:
                logger.warning("ignoring provisioned column %s: the id is reserved for new KPIs", col.id)
                continue
            existing = state.column(col.id)
            if existing is not None:
                columns.append(replace(existing, title=col.title, description=col.description, status=col.status))
            else:
                columns.append(replace(col, items=(), needs_refresh=True))
        return tuple(columns)

    # -- drag surface --

    async def drag_end(self, source: Location, destination: Location | None) -> None:
        """Apply a finished drag gesture as one MoveItem.

        A cross-column move of a data card is persisted through the
        placement service first, so the refetch that follows agrees.
        """
        if destination is None or source == destination:
            return
        src = self.state.column(source.column_id)
        dst = self.state.column(destination.column_id)
        if src is None or dst is None or not 0 <= source.index < len(src.items):
            return

        card = src.items[source.index]
        if self.placement is not None and src.id != dst.id and not card.special:
            group = None if dst.id == self.primordial_id else dst.id
            try:
                await self.placement.assign(card.id, group)
            except Exception as exc:
                logger.warning("placing %s in %s failed: %s", card.id, dst.id, exc)

            # The board may have changed while we waited.
            src = self.state.column(source.column_id)
            if src is None or self.state.column(destination.column_id) is None:
                return
            index = _index_of_card(src, card.id)
            if index < 0:
                return
            source = Location(source.column_id, index)

        self.store.dispatch(MoveItem(source, destination))

    def move_column(self, column_id: str, new_index: int) -> None:
        self.store.dispatch(ReplaceColumns(move_column(self.state.columns, column_id, new_index)))

    # -- selection and modals --

    def click_card(self, card: Card, column: Column | None = None) -> None:
        self.store.dispatch_all(selection.click_card(self.state, card, column))

    def open_modal(self, name: str, column: Column | None = None) -> None:
        if column is not None and name in selection.COLUMN_MODALS:
            self.store.dispatch_all(selection.open_column_modal(self.state, name, column))
        else:
            self.store.dispatch_all(selection.toggle_modal(self.state, name, True))

    def close_modal(self, name: str) -> None:
        state = self.state
        if name in ("detail_view", "derived_detail_view", "action_plan"):
            actions = selection.close_detail(state, name)
        elif name in selection.COLUMN_MODALS and state.selected_column is not None:
            actions = selection.close_column_modal(state, name)
        else:
            actions = selection.toggle_modal(state, name, False)
        self.store.dispatch_all(actions)

    def close_all_modals(self) -> None:
        self.store.dispatch_all(selection.close_all_modals())

    def open_derived_detail(self, card: Card | None) -> None:
        self.store.dispatch_all(selection.open_derived_detail(card))

    def open_action_plan(self, card: Card | None) -> None:
        self.store.dispatch_all(selection.open_action_plan(card))

    def set_task_user_selections(self, selections) -> None:
        self.store.dispatch(SetTaskUserSelections(selections))

    # -- deletion --

    async def delete_column(self, column_id: str) -> Notice | None:
        """Delete an empty column.

        Returns a Notice for the user instead of deleting when the column
        still has cards or the deletion service refuses.
        """
        column = self.state.column(column_id)
        if column is None:
            return None
        notice = selection.check_column_delete(column)
        if notice is not None:
            return notice
        if self.deleter is not None:
            try:
                await self.deleter.delete_column(column_id)
            except Exception as exc:
                logger.warning("deleting column %s failed: %s", column_id, exc)
                return Notice(title="Delete Failed", body=str(exc))
        self.store.dispatch(RemoveColumn(column_id))
        logger.info("removed column %s", column_id)
        return None

    # -- forms --

    def refresh_column(self, column_id: str) -> None:
        """The column's refresh button."""
        self.refresh.mark(column_id)

    def kpi_created(self, column_id: str | None = None) -> None:
        """A KPI was added: close the form and refetch its column and the new KPIs column."""
        column_id = column_id or (self.state.selected_column.id if self.state.selected_column else None)
        if self.state.modals.create_kpi:
            self.close_modal("create_kpi")
        if column_id and column_id != self.primordial_id:
            self.refresh.request(column_id)
        self.refresh.request(self.primordial_id)

    def kpi_edited(self, card_id: str) -> None:
        """A KPI was edited: refetch the column holding it."""
        column = self.state.find_card_column(card_id)
        if column is not None:
            self.refresh.request(column.id)

    async def create_kpi(
        self,
        title: str,
        column_id: str | None = None,
        kind: str = "tracking",
        payload=None,
    ) -> Card:
        if self.creator is None:
            raise RuntimeError("no creation service configured")
        group = None if column_id in (None, self.primordial_id) else column_id
        card = await self.creator.create_kpi(group, title, kind, payload)
        self.kpi_created(column_id)
        return card

    async def edit_kpi(self, card_id: str, changes) -> Card:
        """Save changes to a KPI and refetch the column holding it."""
        if self.editor is None:
            raise RuntimeError("no editing service configured")
        card = await self.editor.update_kpi(card_id, changes)
        self.kpi_edited(card_id)
        return card

    async def delete_kpi(self, card_id: str) -> None:
        """Delete a KPI, close any dialog showing it and refetch its column."""
        if self.editor is None:
            raise RuntimeError("no editing service configured")
        await self.editor.delete_kpi(card_id)
        state = self.state
        for name, card in (
            ("detail_view", state.selected_kpi),
            ("derived_detail_view", state.selected_derived_kpi),
            ("action_plan", state.selected_task_kpi),
        ):
            if card is not None and card.id == card_id:
                self.close_modal(name)
        self.kpi_edited(card_id)
        logger.info("deleted KPI %s", card_id)

    async def create_column(self, title: str, description: str = "") -> Column:
        if self.creator is None:
            raise RuntimeError("no creation service configured")
        column = await self.creator.create_column(title, description)
        if self.state.modals.create_task:
            self.close_modal("create_task")
        await self.load_columns()
        return column


def _index_of_card(column: Column, card_id: str) -> int:
    for i, card in enumerate(column.items):
        if card.id == card_id:
            return i
    return -1
