"""Immutable board entities: cards, columns, modal flags and board state."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Mapping

PRIMORDIAL_ID = "kpis"
PRIMORDIAL_TITLE = "NEW KPIs"

CARD_KINDS = ("tracking", "task", "summary", "form", "derived")
SPECIAL_KINDS = frozenset({"summary", "form", "derived"})

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def freeze_mapping(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Return a read-only copy of data."""
    if not data:
        return _EMPTY
    if isinstance(data, MappingProxyType):
        return data
    return MappingProxyType(dict(data))


@dataclass(frozen=True)
class Card:
    """One KPI record. ``payload`` is whatever the renderer needs."""

    id: str
    kind: str = "tracking"
    payload: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    def __post_init__(self) -> None:
        if self.kind not in CARD_KINDS:
            raise ValueError(f"unknown card kind: {self.kind!r}")
        object.__setattr__(self, "payload", freeze_mapping(self.payload))

    @property
    def title(self) -> str:
        return self.payload.get("title") or self.id

    @property
    def special(self) -> bool:
        return self.kind in SPECIAL_KINDS


@dataclass(frozen=True)
class Column:
    """A named, ordered bucket of cards."""

    id: str
    title: str = ""
    items: tuple[Card, ...] = ()
    needs_refresh: bool = False
    description: str = ""
    status: str = "Active"

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def with_items(self, items) -> Column:
        return replace(self, items=tuple(items))

    def find(self, card_id: str) -> Card | None:
        for card in self.items:
            if card.id == card_id:
                return card
        return None


@dataclass(frozen=True)
class Modals:
    """Visibility flags for every dialog the board can show."""

    create_kpi: bool = False
    create_derived_kpi: bool = False
    create_task: bool = False
    tracking: bool = False
    task_kpi: bool = False
    detail_view: bool = False
    derived_detail_view: bool = False
    status_summary: bool = False
    action_plan: bool = False

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def set(self, **flags: bool) -> Modals:
        """Return a copy with the given flags changed."""
        unknown = set(flags) - set(self.names())
        if unknown:
            raise KeyError(", ".join(sorted(unknown)))
        return replace(self, **flags)

    def open(self) -> tuple[str, ...]:
        """Names of the flags currently set."""
        return tuple(name for name in self.names() if getattr(self, name))


@dataclass(frozen=True)
class BoardState:
    """The single authoritative snapshot of the board."""

    columns: tuple[Column, ...] = ()
    selected_column: Column | None = None
    selected_kpi: Card | None = None
    selected_derived_kpi: Card | None = None
    selected_task_kpi: Card | None = None
    modals: Modals = field(default_factory=Modals)
    refresh_queue: frozenset[str] = frozenset()
    task_user_selections: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: _EMPTY)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "refresh_queue", frozenset(self.refresh_queue))
        object.__setattr__(self, "task_user_selections", freeze_selections(self.task_user_selections))

    def column(self, column_id: str) -> Column | None:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def column_index(self, column_id: str) -> int:
        """Index of column_id in the board, or -1."""
        for i, col in enumerate(self.columns):
            if col.id == column_id:
                return i
        return -1

    def find_card_column(self, card_id: str) -> Column | None:
        """Find the column containing a card."""
        for col in self.columns:
            if col.find(card_id) is not None:
                return col
        return None

    def stale_ids(self) -> frozenset[str]:
        """Column ids waiting for a fetch."""
        flagged = {col.id for col in self.columns if col.needs_refresh}
        return frozenset(flagged) | self.refresh_queue


def freeze_selections(data: Mapping[str, Any] | None) -> Mapping[str, tuple[str, ...]]:
    """Normalise a task -> assignees mapping to read-only tuples."""
    if not data:
        return _EMPTY
    return MappingProxyType({str(k): tuple(v) for k, v in data.items()})


def special_cards() -> tuple[Card, ...]:
    """The pinned cards the primordial column always starts with."""
    return (
        Card(
            id="kpi-summary",
            kind="summary",
            payload={
                "title": "KPI STATUS SUMMARY",
                "value": "41%",
                "percent_achieved": 41,
                "trend": 8,
                "chart_type": "line",
                "color": "#2196f3",
            },
        ),
        Card(id="kpi-form", kind="form", payload={"title": "KPI FORM"}),
        Card(id="kpi-derived", kind="derived", payload={"title": "DERIVED KPI"}),
    )


def initial_columns(primordial_id: str = PRIMORDIAL_ID) -> tuple[Column, ...]:
    """Columns the board is seeded with before provisioning."""
    return (Column(id=primordial_id, title=PRIMORDIAL_TITLE, items=special_cards()),)


def card_from_record(record: Mapping[str, Any]) -> Card:
    """Build a Card from a flat record with ``id`` and ``type``/``kind`` keys."""
    data = dict(record)
    card_id = str(data.pop("id"))
    kind = data.pop("kind", None) or data.pop("type", None) or "tracking"
    data.pop("type", None)
    return Card(id=card_id, kind=kind, payload=data)
