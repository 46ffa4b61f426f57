"""Immutable board model and its transition function."""

from kpiboard.model.actions import (
    Action,
    AddColumn,
    Location,
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
from kpiboard.model.entities import (
    PRIMORDIAL_ID,
    BoardState,
    Card,
    Column,
    Modals,
    card_from_record,
    initial_columns,
    special_cards,
)
from kpiboard.model.equality import structurally_equal
from kpiboard.model.move import move_column, move_item
from kpiboard.model.reducer import reduce
from kpiboard.model.refresh import merge_fetched

__all__ = [
    "PRIMORDIAL_ID",
    "Action",
    "AddColumn",
    "BoardState",
    "Card",
    "Column",
    "Location",
    "Modals",
    "MoveItem",
    "RefreshColumn",
    "RemoveColumn",
    "ReplaceColumns",
    "SetModals",
    "SetRefreshQueue",
    "SetSelectedColumn",
    "SetSelectedDerivedKPI",
    "SetSelectedKPI",
    "SetSelectedTaskKPI",
    "SetTaskUserSelections",
    "UpdateColumnItems",
    "card_from_record",
    "initial_columns",
    "merge_fetched",
    "move_column",
    "move_item",
    "reduce",
    "special_cards",
    "structurally_equal",
]
