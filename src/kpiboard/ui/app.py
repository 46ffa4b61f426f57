"""Main Textual application for kpiboard."""

from pathlib import Path

from textual.app import App

from kpiboard.dashboard import Dashboard
from kpiboard.source import SourceError, YamlSource
from kpiboard.ui.board import BoardScreen
from kpiboard.ui.confirm import ConfirmScreen


class KpiBoardApp(App):
    """KPI board TUI."""

    CSS = """
    Tooltip {
        padding: 0 1;
        margin: 0;
    }
    """

    TITLE = "kpiboard"
    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, path: Path, dashboard: Dashboard | None = None):
        super().__init__()
        self.source = YamlSource(path)
        self.dashboard = dashboard

    async def on_mount(self) -> None:
        if self.dashboard is not None:
            await self._show_board()
        elif not self.source.path.exists():
            self.push_screen(
                ConfirmScreen(f"No board at {self.source.path}. Create one?"),
                self._on_init_response,
            )
        else:
            await self._load_board()

    async def _on_init_response(self, result: bool) -> None:
        if not result:
            self.exit()
            return
        try:
            self.source.init()
        except SourceError as e:
            self.exit(return_code=1, message=str(e))
            return
        await self._load_board()

    async def _load_board(self) -> None:
        """Open the board file and show it."""
        try:
            self.dashboard = Dashboard.from_source(self.source)
        except SourceError as e:
            self.exit(return_code=1, message=str(e))
            return
        await self._show_board()

    async def _show_board(self) -> None:
        try:
            await self.dashboard.open()
        except SourceError as e:
            self.exit(return_code=1, message=str(e))
            return
        self.push_screen(BoardScreen(self.dashboard))

    def action_close_all(self) -> None:
        """Close every dialog the board state has open."""
        if self.dashboard is not None:
            self.dashboard.close_all_modals()

    def action_quit(self) -> None:
        """Stop background fetches and quit."""
        if self.dashboard is not None:
            self.dashboard.close()
        self.exit()
