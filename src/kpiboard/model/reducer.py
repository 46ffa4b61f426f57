"""The board transition function.

``reduce(state, action)`` is the only place a new board state is made.
It is total: unknown actions and references to missing columns return
the input state unchanged. Whenever the new value of a field is
structurally equal to the current one, the original state object is
returned, so observers can compare snapshots with ``is``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from kpiboard.model.actions import (
    Action,
    AddColumn,
    MoveItem,
    RefreshColumn,
    RemoveColumn,
    ReplaceColumns,
    SetModals,
    SetRefreshQueue,
    SetSelectedColumn,
    SetSelectedDerivedKPI,
    SetSelectedKPI,
    SetSelectedTaskKPI,
    SetTaskUserSelections,
    UpdateColumnItems,
)
from kpiboard.model.entities import BoardState, freeze_selections
from kpiboard.model.equality import same_members, structurally_equal
from kpiboard.model.move import move_item


def reduce(state: BoardState, action: Action) -> BoardState:
    """Apply one action to state and return the resulting state."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)


def _replace_columns(state: BoardState, action: ReplaceColumns) -> BoardState:
    if structurally_equal(state.columns, action.columns):
        return state
    return replace(state, columns=tuple(action.columns))


def _update_column_items(state: BoardState, action: UpdateColumnItems) -> BoardState:
    idx = state.column_index(action.column_id)
    if idx < 0:
        return state
    col = state.columns[idx]
    if not col.needs_refresh and structurally_equal(col.items, action.items):
        return state
    columns = list(state.columns)
    columns[idx] = replace(col, items=tuple(action.items), needs_refresh=False)
    return replace(state, columns=tuple(columns))


def _move_item(state: BoardState, action: MoveItem) -> BoardState:
    result = move_item(state.columns, action.source, action.destination)
    if result is None:
        return state
    columns, touched = result
    queue = state.refresh_queue | touched if touched else state.refresh_queue
    return replace(state, columns=columns, refresh_queue=queue)


def _add_column(state: BoardState, action: AddColumn) -> BoardState:
    if state.column(action.column.id) is not None:
        return state
    return replace(state, columns=state.columns + (action.column,))


def _remove_column(state: BoardState, action: RemoveColumn) -> BoardState:
    if state.column(action.column_id) is None:
        return state
    return replace(state, columns=tuple(c for c in state.columns if c.id != action.column_id))


def _set_selected_column(state: BoardState, action: SetSelectedColumn) -> BoardState:
    old_id = state.selected_column.id if state.selected_column else None
    new_id = action.column.id if action.column else None
    if old_id == new_id:
        return state
    return replace(state, selected_column=action.column)


# Selection slots always commit, even for the same card, so a closed
# detail view can be reopened by clicking the same card again.


def _set_selected_kpi(state: BoardState, action: SetSelectedKPI) -> BoardState:
    return replace(
        state,
        selected_kpi=action.card,
        modals=replace(state.modals, detail_view=action.card is not None),
    )


def _set_selected_derived_kpi(state: BoardState, action: SetSelectedDerivedKPI) -> BoardState:
    return replace(
        state,
        selected_derived_kpi=action.card,
        modals=replace(state.modals, derived_detail_view=action.card is not None),
    )


def _set_selected_task_kpi(state: BoardState, action: SetSelectedTaskKPI) -> BoardState:
    return replace(
        state,
        selected_task_kpi=action.card,
        modals=replace(state.modals, action_plan=action.card is not None),
    )


def _set_task_user_selections(state: BoardState, action: SetTaskUserSelections) -> BoardState:
    payload = action.selections
    selections = payload(state.task_user_selections) if callable(payload) else payload
    if structurally_equal(state.task_user_selections, selections or {}):
        return state
    return replace(state, task_user_selections=freeze_selections(selections))


def _set_modals(state: BoardState, action: SetModals) -> BoardState:
    if structurally_equal(state.modals, action.modals):
        return state
    return replace(state, modals=action.modals)


def _set_refresh_queue(state: BoardState, action: SetRefreshQueue) -> BoardState:
    if same_members(state.refresh_queue, action.column_ids):
        return state
    return replace(state, refresh_queue=frozenset(action.column_ids))


def _refresh_column(state: BoardState, action: RefreshColumn) -> BoardState:
    idx = state.column_index(action.column_id)
    if idx < 0 or state.columns[idx].needs_refresh:
        return state
    columns = list(state.columns)
    columns[idx] = replace(columns[idx], needs_refresh=True)
    return replace(state, columns=tuple(columns))


_HANDLERS: dict[type, Callable[[BoardState, Action], BoardState]] = {
    ReplaceColumns: _replace_columns,
    UpdateColumnItems: _update_column_items,
    MoveItem: _move_item,
    AddColumn: _add_column,
    RemoveColumn: _remove_column,
    SetSelectedColumn: _set_selected_column,
    SetSelectedKPI: _set_selected_kpi,
    SetSelectedDerivedKPI: _set_selected_derived_kpi,
    SetSelectedTaskKPI: _set_selected_task_kpi,
    SetTaskUserSelections: _set_task_user_selections,
    SetModals: _set_modals,
    SetRefreshQueue: _set_refresh_queue,
    RefreshColumn: _refresh_column,
}
