"""Shared test helpers for model tests."""

import pytest

from kpiboard.model.entities import BoardState, Card, Column, initial_columns


def _make_card(card_id, title=None, kind="tracking", **payload):
    """Helper to build a Card with a title payload."""
    return Card(id=card_id, kind=kind, payload={"title": title or card_id, **payload})


def _make_column(column_id, *card_ids, needs_refresh=False):
    """Helper to build a Column holding cards with the given ids."""
    return Column(
        id=column_id,
        title=column_id.upper(),
        items=tuple(_make_card(c) for c in card_ids),
        needs_refresh=needs_refresh,
    )


@pytest.fixture
def two_columns():
    """X=[A, B], Y=[C, D]."""
    return BoardState(columns=(_make_column("x", "a", "b"), _make_column("y", "c", "d")))


@pytest.fixture
def seeded():
    """Just the primordial column with its pinned cards."""
    return BoardState(columns=initial_columns())


@pytest.fixture
def make_card():
    return _make_card


@pytest.fixture
def make_column():
    return _make_column
