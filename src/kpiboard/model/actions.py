"""The closed set of actions the reducer understands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Union

from kpiboard.model.entities import Card, Column, Modals

Selections = Mapping[str, "tuple[str, ...] | list[str]"]
SelectionsUpdater = Callable[[Mapping[str, tuple[str, ...]]], Selections]


@dataclass(frozen=True)
class Location:
    """A slot on the board: column id plus 0-based index."""

    column_id: str
    index: int


@dataclass(frozen=True)
class ReplaceColumns:
    columns: tuple[Column, ...]


@dataclass(frozen=True)
class UpdateColumnItems:
    column_id: str
    items: tuple[Card, ...]


@dataclass(frozen=True)
class MoveItem:
    source: Location
    destination: Location


@dataclass(frozen=True)
class AddColumn:
    column: Column


@dataclass(frozen=True)
class RemoveColumn:
    column_id: str


@dataclass(frozen=True)
class SetSelectedColumn:
    column: Column | None


@dataclass(frozen=True)
class SetSelectedKPI:
    card: Card | None


@dataclass(frozen=True)
class SetSelectedDerivedKPI:
    card: Card | None


@dataclass(frozen=True)
class SetSelectedTaskKPI:
    card: Card | None


@dataclass(frozen=True)
class SetTaskUserSelections:
    """Replace the selections, or update them through a callable."""

    selections: Selections | SelectionsUpdater


@dataclass(frozen=True)
class SetModals:
    modals: Modals


@dataclass(frozen=True)
class SetRefreshQueue:
    column_ids: frozenset[str]


@dataclass(frozen=True)
class RefreshColumn:
    column_id: str


Action = Union[
    ReplaceColumns,
    UpdateColumnItems,
    MoveItem,
    AddColumn,
    RemoveColumn,
    SetSelectedColumn,
    SetSelectedKPI,
    SetSelectedDerivedKPI,
    SetSelectedTaskKPI,
    SetTaskUserSelections,
    SetModals,
    SetRefreshQueue,
    RefreshColumn,
]
