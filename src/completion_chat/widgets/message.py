"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..models import Message, Origin


class MessageBubble(Vertical):
    """Render one immutable chat message with a role header."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > .bubble-header {
        text-style: bold;
    }
    MessageBubble > .bubble-content {
        height: auto;
    }
    """

    def __init__(self, message: Message, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.message = message
        self.add_class(f"role-{message.origin.value}")

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return "You" if self.message.origin is Origin.USER else "Assistant"

    def render_content(self) -> Text | Markdown:
        """User text is shown verbatim; assistant replies are rendered as Markdown."""
        if self.message.is_user:
            return Text(self.message.content)
        return Markdown(self.message.content.rstrip())

    def compose(self) -> ComposeResult:
        yield Static(self.role_prefix, classes="bubble-header")
        yield Static(self.render_content(), classes="bubble-content")
