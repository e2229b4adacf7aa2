"""Scrollable conversation view widget."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from ..models import Message
from .activity_bar import PendingIndicator
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """Host message bubbles, followed by the pending indicator and error line."""

    DEFAULT_CSS = """
    ConversationView > #error_line {
        color: $error;
        margin-top: 1;
        height: auto;
    }
    """

    def __init__(self, indicator_label: str = "...", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._indicator_label = indicator_label
        self.rendered_ids: list[int] = []
        self.error_text = ""

    def compose(self) -> ComposeResult:
        yield PendingIndicator(self._indicator_label, id="pending_indicator")
        yield Static("", id="error_line")

    @property
    def indicator(self) -> PendingIndicator:
        return self.query_one("#pending_indicator", PendingIndicator)

    @property
    def error_line(self) -> Static:
        return self.query_one("#error_line", Static)

    async def add_message(self, message: Message) -> MessageBubble:
        """Mount a bubble above the indicator and scroll to it."""
        bubble = MessageBubble(message)
        await self.mount(bubble, before=self.indicator)
        self.rendered_ids.append(message.id)
        self.scroll_end(animate=False)
        return bubble

    def set_error(self, text: str) -> None:
        self.error_text = text
        self.error_line.update(text)
        self.error_line.display = bool(text)
