"""Input row containing the message field and send button."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, Input


class InputBox(Horizontal):
    """Message field plus send button; both are disabled while a request is pending."""

    class SendRequested(Message):
        """Posted when the send button is pressed."""

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Type your message...", id="message_input")
        yield Button("Send", id="send_button", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send_button":
            event.stop()
            self.post_message(self.SendRequested())

    def set_locked(self, locked: bool) -> None:
        self.query_one("#message_input", Input).disabled = locked
        self.query_one("#send_button", Button).disabled = locked
