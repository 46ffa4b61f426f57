"""Tests for the flag-driven dialogs."""

import pytest
from textual.app import App
from textual.widgets import Button, Input, Select

from kpiboard.model.entities import BoardState, Card, Column, Modals
from kpiboard.ui.modals import (
    ActionPlanScreen,
    CardDetailScreen,
    CreateColumnScreen,
    CreateKpiScreen,
    EditKpiScreen,
    SummaryScreen,
    build_modal,
    detail_rows,
    summary_line,
)

REVENUE = Card(
    id="kpi-2",
    payload={
        "title": "Revenue",
        "value": "$1.2M",
        "target": "$2M",
        "percent_achieved": 60,
        "owner": "ann",
        "tasks": [
            {"id": "t1", "title": "Close deals", "status": "Done"},
            {"id": "t2", "title": "Hire reps", "status": "Open", "assignees": ["bob"]},
        ],
    },
)


class ModalApp(App):
    """Minimal app that pushes one dialog and records its result."""

    def __init__(self, screen):
        super().__init__()
        self.dialog = screen
        self.results = []

    def on_mount(self) -> None:
        self.push_screen(self.dialog, self.results.append)

    def action_close_all(self) -> None:
        self.results.append("close_all")


def test_detail_rows_order():
    rows = detail_rows(REVENUE)
    assert [label for label, _ in rows] == ["Value", "Target", "Percent achieved", "Owner"]


def test_summary_line():
    cards = [Card(id="a", payload={"percent_achieved": 40}), Card(id="b", payload={"percent_achieved": 60})]
    assert summary_line("Sales", cards).plain == "Sales  2 KPIs  avg 50%"
    assert summary_line("Ops", []).plain == "Ops  0 KPIs"


@pytest.mark.parametrize(
    "name,screen_type",
    [
        ("create_kpi", CreateKpiScreen),
        ("create_derived_kpi", CreateKpiScreen),
        ("tracking", CreateKpiScreen),
        ("task_kpi", CreateKpiScreen),
        ("create_task", CreateColumnScreen),
        ("status_summary", SummaryScreen),
    ],
)
def test_build_modal_for_forms(name, screen_type):
    assert isinstance(build_modal(name, BoardState()), screen_type)


def test_build_modal_for_selection_views():
    state = BoardState(selected_kpi=REVENUE, selected_task_kpi=REVENUE)
    assert isinstance(build_modal("detail_view", state), CardDetailScreen)
    assert isinstance(build_modal("action_plan", state), ActionPlanScreen)
    assert build_modal("derived_detail_view", state) is None


def test_build_modal_names_column():
    state = BoardState(selected_column=Column(id="ops", title="Operations"), modals=Modals(task_kpi=True))
    screen = build_modal("task_kpi", state)
    assert screen.heading == "New task KPI in Operations"
    assert screen.kinds == ("task",)


@pytest.mark.asyncio
async def test_detail_action_plan_button():
    app = ModalApp(CardDetailScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.click("#action-plan")
        await pilot.pause()
        assert app.results == ["action_plan"]


@pytest.mark.asyncio
async def test_detail_without_tasks_has_no_action_plan():
    app = ModalApp(CardDetailScreen(Card(id="a")))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        assert [b.id for b in app.screen.query(Button)] == ["edit", "delete", "close"]


@pytest.mark.asyncio
async def test_detail_of_pinned_card_cannot_be_edited():
    app = ModalApp(CardDetailScreen(Card(id="kpi-form", kind="form")))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        assert [b.id for b in app.screen.query(Button)] == ["close"]


@pytest.mark.asyncio
@pytest.mark.parametrize("button", ["edit", "delete"])
async def test_detail_edit_and_delete_buttons(button):
    app = ModalApp(CardDetailScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.click(f"#{button}")
        await pilot.pause()
        assert app.results == [button]
        assert len(app.screen_stack) == 1


@pytest.mark.asyncio
async def test_detail_close_dismisses_once():
    app = ModalApp(CardDetailScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.click("#close")
        await pilot.pause()
        assert app.results == [None]
        assert len(app.screen_stack) == 1


@pytest.mark.asyncio
async def test_escape_closes_all():
    app = ModalApp(CardDetailScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.press("escape")
        await pilot.pause()
        assert app.results == ["close_all"]


@pytest.mark.asyncio
async def test_action_plan_lists_tasks_with_users():
    app = ModalApp(ActionPlanScreen(REVENUE, {"t1": ("ann",)}))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        lines = [str(w.render()) for w in app.screen.query(".task")]
        assert lines == ["☑ Close deals  (ann)", "☐ Hire reps  (bob)"]
        assert app.screen.task_selections == {"t1": ("ann",)}


@pytest.mark.asyncio
async def test_create_kpi_form():
    app = ModalApp(CreateKpiScreen("New KPI"))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        assert app.screen.query_one("#kind", Select).value == "tracking"
        await pilot.press(*"nps")
        await pilot.press("enter")
        await pilot.pause()
        assert app.results == [{"title": "nps", "kind": "tracking", "payload": {}}]


@pytest.mark.asyncio
async def test_create_kpi_requires_title():
    app = ModalApp(CreateKpiScreen("New KPI"))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.click("#create")
        await pilot.pause()
        assert app.results == []
        assert isinstance(app.screen, CreateKpiScreen)


@pytest.mark.asyncio
async def test_create_derived_kpi_with_formula():
    app = ModalApp(CreateKpiScreen("New derived KPI", kinds=("tracking",), with_formula=True))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        assert len(app.screen.query("#kind")) == 0
        app.screen.query_one("#title", Input).value = "Margin"
        app.screen.query_one("#formula", Input).value = "kpi-2 / kpi-3"
        await pilot.click("#create")
        await pilot.pause()
        assert app.results == [{"title": "Margin", "kind": "tracking", "payload": {"formula": "kpi-2 / kpi-3"}}]


@pytest.mark.asyncio
async def test_create_column_form():
    app = ModalApp(CreateColumnScreen())
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        app.screen.query_one("#title", Input).value = "Support"
        app.screen.query_one("#description", Input).value = "Tickets"
        await pilot.click("#create")
        await pilot.pause()
        assert app.results == [("Support", "Tickets")]


@pytest.mark.asyncio
async def test_cancel_returns_none():
    app = ModalApp(CreateColumnScreen())
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.click("#close")
        await pilot.pause()
        assert app.results == [None]
        assert len(app.screen_stack) == 1


@pytest.mark.asyncio
async def test_edit_kpi_form_returns_changed_fields():
    app = ModalApp(EditKpiScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        assert app.screen.query_one("#value", Input).value == "$1.2M"
        app.screen.query_one("#value", Input).value = "$1.5M"
        app.screen.query_one("#owner", Input).value = ""
        await pilot.click("#save")
        await pilot.pause()
        assert app.results == [{"value": "$1.5M", "owner": None}]
        assert len(app.screen_stack) == 1


@pytest.mark.asyncio
async def test_edit_kpi_form_unchanged():
    app = ModalApp(EditKpiScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.press("enter")
        await pilot.pause()
        assert app.results == [{}]


@pytest.mark.asyncio
async def test_edit_kpi_form_requires_title():
    app = ModalApp(EditKpiScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        app.screen.query_one("#title", Input).value = ""
        await pilot.click("#save")
        await pilot.pause()
        assert app.results == []
        assert isinstance(app.screen, EditKpiScreen)


@pytest.mark.asyncio
async def test_edit_kpi_escape_cancels_only_the_form():
    app = ModalApp(EditKpiScreen(REVENUE))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        await pilot.press("escape")
        await pilot.pause()
        assert app.results == [None]
