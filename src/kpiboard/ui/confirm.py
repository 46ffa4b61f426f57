"""Yes/no and notice dialogs."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

from kpiboard.model.selection import Notice

DIALOG_CSS = """
    #dialog {
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #dialog-title {
        text-style: bold;
        text-align: center;
        width: 100%;
    }
    #message {
        text-align: center;
        width: 100%;
        margin: 1 0;
    }
    #buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }
    Button {
        margin: 0 2;
    }
"""


class ConfirmScreen(ModalScreen[bool]):
    """Modal screen asking a yes/no question."""

    CSS = "ConfirmScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False)]

    def __init__(self, message: str, yes: str = "Yes", no: str = "No", heading: str | None = None):
        super().__init__()
        self.message = message
        self.heading = heading
        self.yes = yes
        self.no = no

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            if self.heading:
                yield Static(self.heading, id="dialog-title")
            yield Static(self.message, id="message")
            with Horizontal(id="buttons"):
                yield Button(self.yes, id="yes", variant="primary")
                yield Button(self.no, id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "yes")

    def action_cancel(self) -> None:
        self.dismiss(False)


class NoticeScreen(ModalScreen[None]):
    """Modal screen showing a Notice with a single button."""

    CSS = "NoticeScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [Binding("escape", "close", "Close", show=False)]

    def __init__(self, notice: Notice):
        super().__init__()
        self.notice = notice

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(self.notice.title, id="dialog-title")
            yield Static(self.notice.body, id="message")
            with Horizontal(id="buttons"):
                yield Button(self.notice.button, id="ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
