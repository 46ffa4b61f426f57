"""Textual UI for kpiboard."""

from kpiboard.ui.app import KpiBoardApp
from kpiboard.ui.board import BoardScreen
from kpiboard.ui.confirm import ConfirmScreen, NoticeScreen

__all__ = [
    "BoardScreen",
    "ConfirmScreen",
    "KpiBoardApp",
    "NoticeScreen",
]
