"""Map user intents to selection and modal actions.

Every function here is pure: it reads a state snapshot and returns the
actions to dispatch, in order. Modal visibility lives only in the state,
so closing everything is one ``SetModals`` rather than chasing open
dialogs.
"""

from __future__ import annotations

from dataclasses import dataclass

from kpiboard.model.actions import (
    Action,
    SetModals,
    SetSelectedColumn,
    SetSelectedDerivedKPI,
    SetSelectedKPI,
    SetSelectedTaskKPI,
)
from kpiboard.model.entities import BoardState, Card, Column, Modals

# Flags that are opened on behalf of a column (the column is selected first).
COLUMN_MODALS = frozenset({"create_kpi", "create_derived_kpi", "create_task", "tracking", "task_kpi"})

# Card kinds whose click opens a dialog instead of selecting the card.
CLICK_MODALS = {
    "derived": "create_derived_kpi",
    "summary": "status_summary",
    "form": "create_kpi",
}


@dataclass(frozen=True)
class Notice:
    """A blocking message the user must acknowledge."""

    title: str
    body: str
    button: str = "OK"


def toggle_modal(state: BoardState, name: str, is_open: bool) -> list[Action]:
    return [SetModals(state.modals.set(**{name: is_open}))]


def open_column_modal(state: BoardState, name: str, column: Column) -> list[Action]:
    """Select the column, then show the dialog."""
    return [
        SetSelectedColumn(column),
        SetModals(state.modals.set(**{name: True})),
    ]


def close_column_modal(state: BoardState, name: str) -> list[Action]:
    """Hide the dialog, then clear the column selection."""
    return [
        SetModals(state.modals.set(**{name: False})),
        SetSelectedColumn(None),
    ]


def click_card(state: BoardState, card: Card, column: Column | None = None) -> list[Action]:
    """Actions for a click on a card.

    Pinned cards open their dialog; the form cards select the column they
    were clicked in first. Any data card becomes the selected KPI, which
    opens the detail view.
    """
    modal = CLICK_MODALS.get(card.kind)
    if modal is None:
        return [SetSelectedKPI(card)]
    if column is not None and modal in COLUMN_MODALS:
        return open_column_modal(state, modal, column)
    return toggle_modal(state, modal, True)


def open_derived_detail(card: Card | None) -> list[Action]:
    return [SetSelectedDerivedKPI(card)]


def open_action_plan(card: Card | None) -> list[Action]:
    return [SetSelectedTaskKPI(card)]


def close_detail(state: BoardState, name: str) -> list[Action]:
    """Close one of the selection-driven views."""
    if name == "detail_view":
        return [SetSelectedKPI(None)]
    if name == "derived_detail_view":
        return [SetSelectedDerivedKPI(None)]
    if name == "action_plan":
        return [SetSelectedTaskKPI(None)]
    return toggle_modal(state, name, False)


def close_all_modals() -> list[Action]:
    return [SetModals(Modals())]


def check_column_delete(column: Column) -> Notice | None:
    """Return a Notice when column may not be deleted yet."""
    if column.items:
        return Notice(
            title="Cannot Delete Column",
            body="Cannot delete column with items. Please remove all items first.",
        )
    return None
