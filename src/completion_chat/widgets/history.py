"""Sidebar with the static chat-history list and the theme toggle."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Button, Label

from ..models import ChatHistoryEntry


class HistorySidebar(Vertical):
    """Read-only history entries; the entries do not affect the conversation."""

    DEFAULT_CSS = """
    HistorySidebar {
        width: 28;
        padding: 1;
        border-right: solid $panel;
        background: $surface;
    }
    HistorySidebar > #history_title {
        text-style: bold;
        margin-bottom: 1;
    }
    HistorySidebar > .history-entry {
        padding: 0 1;
        margin-bottom: 1;
    }
    HistorySidebar > .history-entry:hover {
        background: $boost;
    }
    HistorySidebar > #theme_toggle {
        margin-top: 1;
    }
    """

    class ThemeToggleRequested(Message):
        """Posted when the dark/light toggle is pressed."""

    def __init__(
        self,
        entries: Sequence[ChatHistoryEntry],
        dark_mode: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.entries = tuple(entries)
        self._dark_mode = dark_mode

    @staticmethod
    def toggle_label(dark_mode: bool) -> str:
        """Label names the mode the button switches to."""
        return "Light Mode" if dark_mode else "Dark Mode"

    def compose(self) -> ComposeResult:
        yield Label("Chat History", id="history_title")
        for entry in self.entries:
            yield Label(entry.title, id=f"history_{entry.id}", classes="history-entry")
        yield Button(self.toggle_label(self._dark_mode), id="theme_toggle")

    def set_dark_mode(self, dark_mode: bool) -> None:
        self._dark_mode = dark_mode
        self.query_one("#theme_toggle", Button).label = self.toggle_label(dark_mode)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "theme_toggle":
            event.stop()
            self.post_message(self.ThemeToggleRequested())
