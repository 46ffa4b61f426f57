"""Card widgets for the kpiboard UI."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.widgets import Static

from kpiboard.model.entities import Card

KIND_ICONS = {
    "tracking": "📈",
    "task": "✅",
    "summary": "📊",
    "form": "➕",
    "derived": "🧮",
}


def build_footer_text(card: Card) -> Text:
    """Value, progress and trend of a card as styled text."""
    payload = card.payload
    text = Text()
    value = payload.get("value")
    if value:
        text.append(str(value), style="bold")
    percent = payload.get("percent_achieved")
    if percent is not None:
        if text:
            text.append("  ")
        text.append(f"{percent}%")
    trend = payload.get("trend")
    if isinstance(trend, (int, float)) and trend:
        if text:
            text.append("  ")
        arrow, style = ("▲", "green") if trend > 0 else ("▼", "red")
        text.append(f"{arrow}{abs(trend)}", style=style)
    tasks = payload.get("tasks")
    if tasks:
        done = sum(1 for t in tasks if t.get("status") == "Done")
        if text:
            text.append("  ")
        text.append(f"{done}/{len(tasks)} tasks", style="dim")
    return text


class CardWidget(Static, can_focus=True):
    """A single card in a column."""

    BINDINGS = [
        ("enter", "open_card", "Open"),
        ("space", "open_card"),
        ("shift+up", "move(0, -1)", "Move up"),
        ("shift+down", "move(0, 1)", "Move down"),
        ("shift+left", "move(-1, 0)", "Move left"),
        ("shift+right", "move(1, 0)", "Move right"),
    ]

    class Clicked(Message):
        """Posted when a card is opened."""

        def __init__(self, card: Card, column_id: str) -> None:
            super().__init__()
            self.card = card
            self.column_id = column_id

    class MoveRequested(Message):
        """Posted when a card should move by (columns, rows)."""

        def __init__(self, card: Card, column_id: str, dx: int, dy: int) -> None:
            super().__init__()
            self.card = card
            self.column_id = column_id
            self.dx = dx
            self.dy = dy

    DEFAULT_CSS = """
    CardWidget {
        width: 100%;
        height: auto;
        padding: 0 1;
        margin-bottom: 1;
        background: $surface;
    }
    CardWidget:focus {
        background: $primary;
    }
    CardWidget.special {
        border: dashed $primary-darken-2;
    }
    CardWidget #card-footer {
        width: 100%;
        height: auto;
        color: $text-muted;
    }
    """

    def __init__(self, card: Card, column_id: str) -> None:
        super().__init__()
        self.card = card
        self.column_id = column_id
        self.set_class(card.special, "special")

    def compose(self) -> ComposeResult:
        icon = KIND_ICONS.get(self.card.kind, "")
        yield Static(Text(f"{icon} {self.card.title}"), id="card-title")
        footer = build_footer_text(self.card)
        if footer:
            yield Static(footer, id="card-footer")

    def action_open_card(self) -> None:
        self.post_message(self.Clicked(self.card, self.column_id))

    def action_move(self, dx: int, dy: int) -> None:
        if self.card.special:
            return
        self.post_message(self.MoveRequested(self.card, self.column_id, dx, dy))

    def on_click(self, event) -> None:
        event.stop()
        self.focus()
        self.action_open_card()
