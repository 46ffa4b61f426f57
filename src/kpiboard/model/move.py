"""Card reordering within and across columns."""

from __future__ import annotations

from kpiboard.model.actions import Location
from kpiboard.model.entities import Column


def move_item(
    columns: tuple[Column, ...],
    source: Location,
    destination: Location,
) -> tuple[tuple[Column, ...], frozenset[str]] | None:
    """Relocate one card from source to destination.

    Returns ``(columns, touched)`` where touched holds the column ids that
    must be refetched (both sides of a cross-column move, nothing for a
    reorder), or None when the move does not apply.

    Indices are taken as given: the card is removed first and then
    inserted at the literal destination index of the resulting list, so a
    same-column move of index 0 to 2 in ``[A, B, C]`` gives ``[B, C, A]``.
    An index past the end appends.
    """
    if source == destination:
        return None

    src_idx = _index_of(columns, source.column_id)
    dst_idx = _index_of(columns, destination.column_id)
    if src_idx < 0 or dst_idx < 0:
        return None

    src_col = columns[src_idx]
    if not 0 <= source.index < len(src_col.items):
        return None

    new_columns = list(columns)

    # Same-column reorder is done on a single copy so the card never
    # exists twice or zero times in the board.
    if src_idx == dst_idx:
        items = list(src_col.items)
        card = items.pop(source.index)
        items.insert(max(destination.index, 0), card)
        new_columns[src_idx] = src_col.with_items(items)
        return tuple(new_columns), frozenset()

    dst_col = columns[dst_idx]
    src_items = list(src_col.items)
    card = src_items.pop(source.index)
    dst_items = list(dst_col.items)
    dst_items.insert(max(destination.index, 0), card)

    new_columns[src_idx] = src_col.with_items(src_items)
    new_columns[dst_idx] = dst_col.with_items(dst_items)
    return tuple(new_columns), frozenset({src_col.id, dst_col.id})


def move_column(columns: tuple[Column, ...], column_id: str, new_index: int) -> tuple[Column, ...]:
    """Return columns with column_id moved to new_index."""
    idx = _index_of(columns, column_id)
    if idx < 0:
        return columns
    all_cols = list(columns)
    col = all_cols.pop(idx)
    all_cols.insert(max(new_index, 0), col)
    return tuple(all_cols)


def _index_of(columns: tuple[Column, ...], column_id: str) -> int:
    for i, col in enumerate(columns):
        if col.id == column_id:
            return i
    return -1
