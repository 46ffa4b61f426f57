"""Dialogs shown while a modal flag is set in the board state.

Each screen dismisses with its result; the board screen turns the result
into dashboard calls and clears the flag. Escape closes every dialog at
once through the app's ``close_all`` action.
"""

from __future__ import annotations

from typing import Mapping

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Select, Static

from kpiboard.model.entities import BoardState, Card
from kpiboard.ui.card import KIND_ICONS, build_footer_text

MODAL_CSS = """
    #dialog {
        width: 70;
        height: auto;
        max-height: 90%;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #dialog-title {
        text-style: bold;
        width: 100%;
        margin-bottom: 1;
    }
    .field-label {
        margin-top: 1;
        color: $text-muted;
    }
    #buttons {
        width: 100%;
        height: 3;
        margin-top: 1;
        align: center middle;
    }
    Button {
        margin: 0 1;
    }
"""

# Payload keys shown in a fixed order before the rest.
DETAIL_KEYS = ("value", "target", "percent_achieved", "trend", "owner", "frequency", "description")
HIDDEN_KEYS = frozenset({"title", "tasks", "group", "color", "chart_type"})


class BoardModal(ModalScreen):
    """Base for the board's dialogs.

    Subclasses react to buttons by overriding ``button_pressed`` rather
    than ``on_button_pressed``, so each press is handled once. A dialog
    whose flag is cleared while another screen covers it is marked with
    ``flag_cleared`` and closes itself when it is uncovered.
    """

    DEFAULT_CSS = "BoardModal { align: center middle; }" + MODAL_CSS

    BINDINGS = [Binding("escape", "app.close_all", "Close", show=False)]

    def __init__(self) -> None:
        super().__init__()
        self.flag_cleared = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.button_pressed(event.button.id)

    def button_pressed(self, button_id: str | None) -> None:
        if button_id == "close":
            self.dismiss(None)

    def on_screen_resume(self) -> None:
        if self.flag_cleared:
            self.dismiss(None)


def detail_rows(card: Card) -> list[tuple[str, str]]:
    """Label/value pairs for a card's payload."""
    payload = card.payload
    keys = [k for k in DETAIL_KEYS if k in payload]
    keys += sorted(k for k in payload if k not in keys and k not in HIDDEN_KEYS)
    return [(key.replace("_", " ").capitalize(), str(payload[key])) for key in keys]


class CardDetailScreen(BoardModal):
    """Read-only view of a KPI.

    Dismisses with "action_plan", "edit" or "delete" when the matching
    button is pressed.
    """

    DEFAULT_CSS = "CardDetailScreen #dialog { width: 84; }"

    def __init__(self, card: Card, derived: bool = False):
        super().__init__()
        self.card = card
        self.derived = derived

    def compose(self) -> ComposeResult:
        icon = KIND_ICONS.get(self.card.kind, "")
        with Vertical(id="dialog"):
            yield Static(Text(f"{icon} {self.card.title}"), id="dialog-title")
            footer = build_footer_text(self.card)
            if footer:
                yield Static(footer, id="detail-summary")
            with VerticalScroll(id="detail-fields"):
                for label, value in detail_rows(self.card):
                    yield Static(Text.assemble((f"{label}: ", "bold"), value))
            with Horizontal(id="buttons"):
                if self.card.payload.get("tasks"):
                    yield Button("Action plan", id="action-plan", variant="primary")
                if not self.card.special:
                    yield Button("Edit", id="edit")
                    yield Button("Delete", id="delete", variant="error")
                yield Button("Close", id="close")

    def button_pressed(self, button_id: str | None) -> None:
        if button_id in ("action-plan", "edit", "delete"):
            self.dismiss(button_id.replace("-", "_"))
        else:
            super().button_pressed(button_id)


class ActionPlanScreen(BoardModal):
    """Tasks of a KPI with the users picked for each."""

    def __init__(self, card: Card, selections: Mapping[str, tuple[str, ...]]):
        super().__init__()
        self.card = card
        self.task_selections = selections

    def compose(self) -> ComposeResult:
        tasks = self.card.payload.get("tasks") or []
        with Vertical(id="dialog"):
            yield Static(Text(f"Action plan: {self.card.title}"), id="dialog-title")
            with VerticalScroll(id="tasks"):
                if not tasks:
                    yield Static("No tasks", classes="field-label")
                for i, task in enumerate(tasks):
                    task_id = str(task.get("id", i))
                    done = task.get("status") == "Done"
                    line = Text("☑ " if done else "☐ ")
                    line.append(str(task.get("title", task_id)), style="strike" if done else "")
                    users = self.task_selections.get(task_id) or task.get("assignees") or ()
                    if users:
                        line.append(f"  ({', '.join(users)})", style="dim")
                    yield Static(line, classes="task")
            with Horizontal(id="buttons"):
                yield Button("Close", id="close")


class CreateKpiScreen(BoardModal):
    """Form for a new KPI. Dismisses with ``{"title", "kind", "payload"}``."""

    def __init__(
        self,
        heading: str,
        kinds: tuple[str, ...] = ("tracking", "task"),
        with_formula: bool = False,
    ):
        super().__init__()
        self.heading = heading
        self.kinds = kinds
        self.with_formula = with_formula

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(Text(self.heading), id="dialog-title")
            yield Static("Title", classes="field-label")
            yield Input(placeholder="KPI title", id="title")
            if len(self.kinds) > 1:
                yield Static("Type", classes="field-label")
                yield Select(
                    [(kind.capitalize(), kind) for kind in self.kinds],
                    value=self.kinds[0],
                    allow_blank=False,
                    id="kind",
                )
            if self.with_formula:
                yield Static("Formula", classes="field-label")
                yield Input(placeholder="e.g. kpi-1 / kpi-2", id="formula")
            with Horizontal(id="buttons"):
                yield Button("Create", id="create", variant="primary")
                yield Button("Cancel", id="close")

    def on_mount(self) -> None:
        self.query_one("#title", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def button_pressed(self, button_id: str | None) -> None:
        if button_id == "create":
            self._submit()
        else:
            super().button_pressed(button_id)

    def _submit(self) -> None:
        title = self.query_one("#title", Input).value.strip()
        if not title:
            self.notify("A title is required", severity="warning")
            return
        kind = self.kinds[0]
        if len(self.kinds) > 1:
            kind = self.query_one("#kind", Select).value
        payload = {}
        if self.with_formula:
            formula = self.query_one("#formula", Input).value.strip()
            if formula:
                payload["formula"] = formula
        self.dismiss({"title": title, "kind": kind, "payload": payload})


class CreateColumnScreen(BoardModal):
    """Form for a new column. Dismisses with ``(title, description)``."""

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static("New column", id="dialog-title")
            yield Static("Name", classes="field-label")
            yield Input(placeholder="Column name", id="title")
            yield Static("Description", classes="field-label")
            yield Input(id="description")
            with Horizontal(id="buttons"):
                yield Button("Create", id="create", variant="primary")
                yield Button("Cancel", id="close")

    def on_mount(self) -> None:
        self.query_one("#title", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def button_pressed(self, button_id: str | None) -> None:
        if button_id == "create":
            self._submit()
        else:
            super().button_pressed(button_id)

    def _submit(self) -> None:
        title = self.query_one("#title", Input).value.strip()
        if not title:
            self.notify("A name is required", severity="warning")
            return
        description = self.query_one("#description", Input).value.strip()
        self.dismiss((title, description))


EDIT_FIELDS = (("title", "Title"), ("value", "Value"), ("target", "Target"), ("owner", "Owner"))


class EditKpiScreen(BoardModal):
    """Form for a KPI's main fields.

    Dismisses with a dict of the fields that changed. A field emptied by
    the user maps to None so the source drops it.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False)]

    def __init__(self, card: Card):
        super().__init__()
        self.card = card

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(Text(f"Edit {self.card.title}"), id="dialog-title")
            for key, label in EDIT_FIELDS:
                yield Static(label, classes="field-label")
                yield Input(value=self._current(key), id=key)
            with Horizontal(id="buttons"):
                yield Button("Save", id="save", variant="primary")
                yield Button("Cancel", id="close")

    def on_mount(self) -> None:
        self.query_one("#title", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def button_pressed(self, button_id: str | None) -> None:
        if button_id == "save":
            self._submit()
        else:
            super().button_pressed(button_id)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _current(self, key: str) -> str:
        value = self.card.payload.get(key)
        return "" if value is None else str(value)

    def _submit(self) -> None:
        changes = {}
        for key, _ in EDIT_FIELDS:
            text = self.query_one(f"#{key}", Input).value.strip()
            if text != self._current(key):
                changes[key] = text or None
        if "title" in changes and changes["title"] is None:
            self.notify("A title is required", severity="warning")
            return
        self.dismiss(changes)


class SummaryScreen(BoardModal):
    """Card counts and average progress per column."""

    def __init__(self, state: BoardState):
        super().__init__()
        self.state = state

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static("KPI status summary", id="dialog-title")
            for column in self.state.columns:
                yield Static(summary_line(column.title, [c for c in column.items if not c.special]))
            with Horizontal(id="buttons"):
                yield Button("Close", id="close")


def summary_line(title: str, cards: list[Card]) -> Text:
    text = Text.assemble((title, "bold"), f"  {len(cards)} KPIs")
    progress = [c.payload["percent_achieved"] for c in cards if isinstance(c.payload.get("percent_achieved"), (int, float))]
    if progress:
        text.append(f"  avg {sum(progress) / len(progress):.0f}%", style="dim")
    return text


def build_modal(name: str, state: BoardState) -> BoardModal | None:
    """The dialog for an open modal flag, or None if it has nothing to show."""
    column = state.selected_column
    where = f" in {column.title}" if column is not None else ""
    if name == "detail_view":
        return CardDetailScreen(state.selected_kpi) if state.selected_kpi else None
    if name == "derived_detail_view":
        return CardDetailScreen(state.selected_derived_kpi, derived=True) if state.selected_derived_kpi else None
    if name == "action_plan":
        return ActionPlanScreen(state.selected_task_kpi, state.task_user_selections) if state.selected_task_kpi else None
    if name == "create_kpi":
        return CreateKpiScreen(f"New KPI{where}")
    if name == "create_derived_kpi":
        return CreateKpiScreen(f"New derived KPI{where}", kinds=("tracking",), with_formula=True)
    if name == "tracking":
        return CreateKpiScreen(f"New tracking KPI{where}", kinds=("tracking",))
    if name == "task_kpi":
        return CreateKpiScreen(f"New task KPI{where}", kinds=("task",))
    if name == "create_task":
        return CreateColumnScreen()
    if name == "status_summary":
        return SummaryScreen(state)
    return None
