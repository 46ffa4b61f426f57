"""Column widgets for the kpiboard UI."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Rule, Static

from kpiboard.model.entities import Column
from kpiboard.ui.card import CardWidget

STATUS_ICONS = {
    "idle": "",
    "stale": "⏳",
    "fetching": "🔄",
    "failed": "⚠",
}


def header_label(title: str, status: str) -> Text:
    icon = STATUS_ICONS.get(status, "")
    return Text(f"{title} {icon}" if icon else title)


class ColumnHeader(Static, can_focus=True):
    """Focusable column title, so empty columns can still be acted on."""

    DEFAULT_CSS = """
    ColumnHeader {
        width: 100%;
        height: 1;
        text-align: center;
        text-style: bold;
    }
    ColumnHeader:focus {
        background: $primary;
    }
    """

    def __init__(self, column_id: str, title: str, status: str = "idle") -> None:
        super().__init__(header_label(title, status))
        self.column_id = column_id
        self.column_title = title

    def set_status(self, status: str) -> None:
        self.update(header_label(self.column_title, status))


class ColumnWidget(VerticalScroll):
    """A single column on the board, rendered from a Column snapshot."""

    DEFAULT_CSS = """
    ColumnWidget {
        width: 1fr;
        height: 100%;
        min-width: 28;
        max-width: 32;
        padding: 0 1;
        border-right: tall $surface-lighten-1;
    }
    ColumnWidget > Rule.-horizontal {
        margin: 0;
    }
    ColumnWidget .empty {
        width: 100%;
        text-align: center;
        color: $text-muted;
        padding: 1 0;
    }
    """

    def __init__(self, column: Column, status: str = "idle") -> None:
        super().__init__()
        self.column = column
        self.status = status

    @property
    def column_id(self) -> str:
        return self.column.id

    def compose(self) -> ComposeResult:
        yield ColumnHeader(self.column.id, self.column.title, self.status)
        yield Rule()
        for card in self.column.items:
            yield CardWidget(card, self.column.id)
        if not any(not card.special for card in self.column.items):
            yield Static("No items in this column", classes="empty")

    async def update_column(self, column: Column) -> None:
        """Re-render for a new snapshot of the same column."""
        if column is self.column:
            return
        self.column = column
        await self.recompose()

    def set_status(self, status: str) -> None:
        if status == self.status:
            return
        self.status = status
        for header in self.query(ColumnHeader):
            header.set_status(status)

    def card_widgets(self) -> list[CardWidget]:
        return list(self.query(CardWidget))
