"""Tests for board entities."""

from dataclasses import FrozenInstanceError

import pytest

from kpiboard.model.entities import (
    PRIMORDIAL_TITLE,
    BoardState,
    Card,
    Column,
    Modals,
    card_from_record,
    initial_columns,
)


def test_card_title_falls_back_to_id():
    assert Card(id="kpi-1").title == "kpi-1"
    assert Card(id="kpi-1", payload={"title": "Revenue"}).title == "Revenue"


def test_card_rejects_unknown_kind():
    with pytest.raises(ValueError, match="unknown card kind"):
        Card(id="a", kind="chart")


def test_card_payload_is_read_only():
    card = Card(id="a", payload={"title": "A"})
    with pytest.raises(TypeError):
        card.payload["title"] = "B"


def test_default_mappings_are_empty_and_read_only():
    card = Card(id="a")
    state = BoardState()
    assert dict(card.payload) == {}
    assert dict(state.task_user_selections) == {}
    with pytest.raises(TypeError):
        card.payload["title"] = "A"
    with pytest.raises(TypeError):
        state.task_user_selections["t1"] = ()


def test_card_is_frozen():
    card = Card(id="a")
    with pytest.raises(FrozenInstanceError):
        card.id = "b"


def test_special_kinds():
    assert Card(id="s", kind="summary").special
    assert Card(id="f", kind="form").special
    assert Card(id="d", kind="derived").special
    assert not Card(id="t", kind="task").special


def test_column_items_become_tuple():
    column = Column(id="x", items=[Card(id="a")])
    assert isinstance(column.items, tuple)
    assert column.find("a").id == "a"
    assert column.find("b") is None


def test_initial_columns():
    (column,) = initial_columns()
    assert column.id == "kpis"
    assert column.title == PRIMORDIAL_TITLE
    assert [c.kind for c in column.items] == ["summary", "form", "derived"]
    assert column.needs_refresh is False


def test_initial_columns_custom_id():
    assert initial_columns("new")[0].id == "new"


def test_modals_set_and_open():
    modals = Modals().set(create_kpi=True, tracking=True)
    assert modals.open() == ("create_kpi", "tracking")
    assert Modals().open() == ()


def test_modals_set_unknown_raises():
    with pytest.raises(KeyError, match="nope"):
        Modals().set(nope=True)


def test_state_lookups():
    state = BoardState(columns=(Column(id="x", items=(Card(id="a"),)), Column(id="y")))
    assert state.column("y").id == "y"
    assert state.column("z") is None
    assert state.column_index("y") == 1
    assert state.column_index("z") == -1
    assert state.find_card_column("a").id == "x"
    assert state.find_card_column("b") is None


def test_stale_ids_combines_flag_and_queue():
    state = BoardState(
        columns=(Column(id="x", needs_refresh=True), Column(id="y")),
        refresh_queue={"z"},
    )
    assert state.stale_ids() == {"x", "z"}


def test_state_freezes_selections():
    state = BoardState(task_user_selections={"t1": ["ann", "bob"]})
    assert state.task_user_selections["t1"] == ("ann", "bob")
    with pytest.raises(TypeError):
        state.task_user_selections["t2"] = ()


def test_card_from_record():
    card = card_from_record({"id": 7, "type": "task", "title": "Ship", "tasks": []})
    assert card.id == "7"
    assert card.kind == "task"
    assert dict(card.payload) == {"title": "Ship", "tasks": []}


def test_card_from_record_defaults_to_tracking():
    assert card_from_record({"id": "kpi-1"}).kind == "tracking"
