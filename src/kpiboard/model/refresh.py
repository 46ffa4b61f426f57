"""Pure helpers for folding fetched cards back into the board."""

from __future__ import annotations

from typing import Iterable

from kpiboard.model.entities import Card, Column


def special_prefix(column: Column) -> tuple[Card, ...]:
    """The pinned cards currently held by a column, in order."""
    return tuple(card for card in column.items if card.special)


def merge_fetched(column: Column, fetched: Iterable[Card], primordial_id: str) -> tuple[Card, ...]:
    """Items a column should hold after a fetch completes.

    The primordial column keeps its pinned cards in front of the fetched
    ones. Pinned kinds arriving in the fetched payload are dropped so they
    never appear twice. Every other column takes the fetched items as-is.
    """
    fetched = tuple(fetched)
    if column.id != primordial_id:
        return fetched
    return special_prefix(column) + tuple(card for card in fetched if not card.special)


def paging_for(column_id: str, primordial_id: str, page_size: int) -> dict:
    """Query options for a column fetch. The primordial column has no group."""
    if column_id == primordial_id:
        return {"page_number": 0, "limit": page_size}
    return {"group": column_id, "page_number": 0, "limit": page_size}


def with_queued(queue: frozenset[str], *column_ids: str) -> frozenset[str]:
    return queue | frozenset(column_ids)


def without_queued(queue: frozenset[str], *column_ids: str) -> frozenset[str]:
    return queue - frozenset(column_ids)
