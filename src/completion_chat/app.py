"""Main Textual application for the completion chat client."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Input

from .completion import CompletionClient
from .config import load_config
from .logging_utils import configure_logging
from .models import ChatHistoryEntry
from .state import ConversationState
from .store import ConversationStore
from .widgets.conversation import ConversationView
from .widgets.history import HistorySidebar
from .widgets.input_box import InputBox

LOGGER = logging.getLogger(__name__)

DARK_THEME = "textual-dark"
LIGHT_THEME = "textual-light"


class CompletionChatApp(App):
    """Chat UI that renders a :class:`ConversationStore` and forwards input to it."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #app-root {
        height: 1fr;
    }

    #main {
        width: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #message_input {
        width: 1fr;
    }

    #send_button {
        margin-left: 1;
        min-width: 10;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .role-user {
        margin-left: 15%;
        background: $primary;
    }

    .role-assistant {
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+t", "toggle_dark_mode", "Theme"),
        Binding("escape", "cancel_request", "Cancel", show=False),
    ]

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        store: ConversationStore | None = None,
        config_path: Path | None = None,
    ) -> None:
        super().__init__()
        self.config = config if config is not None else load_config(config_path)
        configure_logging(self.config["logging"])

        completion_config = self.config["completion"]
        self._client: CompletionClient | None = None
        if store is None:
            self._client = CompletionClient.from_config(completion_config)
            store = ConversationStore(
                self._client,
                response_timeout_seconds=float(
                    completion_config["response_timeout_seconds"]
                ),
            )
        self.store = store
        self.history_entries = [
            ChatHistoryEntry(id=int(entry["id"]), title=str(entry["title"]))
            for entry in self.config["history"]["entries"]
        ]
        self.dark_mode = bool(self.config["ui"]["dark_mode"])
        self._draft_from_input = self.store.draft_input
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="app-root"):
            if self.config["ui"]["show_history"]:
                yield HistorySidebar(
                    self.history_entries, dark_mode=self.dark_mode, id="sidebar"
                )
            with Vertical(id="main"):
                yield ConversationView(
                    indicator_label=self.config["ui"]["pending_indicator"],
                    id="conversation",
                )
                yield InputBox(id="input_box")
        yield Footer()

    async def on_mount(self) -> None:
        self.title = str(self.config["app"]["title"])
        self._apply_theme()
        self._w_conversation = self.query_one(ConversationView)
        self._w_input_box = self.query_one(InputBox)
        self._w_input = self.query_one("#message_input", Input)
        self._unsubscribe = self.store.subscribe(self._on_store_change)
        await self._render_state()
        self._w_input.focus()
        LOGGER.info(
            "app.mounted",
            extra={
                "event": "app.mounted",
                "endpoint": self.config["completion"]["endpoint_url"],
            },
        )

    def _on_store_change(self, _state: ConversationState) -> None:
        self.call_later(self._render_state)

    async def _render_state(self) -> None:
        """Bring the widgets in line with the latest store snapshot."""
        state = self.store.state
        conversation = self._w_conversation
        for message in state.messages[len(conversation.rendered_ids) :]:
            await conversation.add_message(message)

        conversation.indicator.set_active(state.pending)
        conversation.set_error(state.last_error)
        self._w_input_box.set_locked(state.pending)

        # Only push the draft into the field when the store changed it itself
        # (e.g. cleared on submit); otherwise typing would be overwritten by
        # a snapshot that lags behind the widget.
        if state.draft_input != self._draft_from_input:
            self._draft_from_input = state.draft_input
            self._w_input.value = state.draft_input

        self.sub_title = "Waiting for response..." if state.pending else "Ready"
        if not state.pending:
            self._w_input.focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "message_input":
            return
        self._draft_from_input = event.value
        self.store.set_draft_input(event.value)

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            await self.action_send_message()

    async def on_input_box_send_requested(self, _event: InputBox.SendRequested) -> None:
        await self.action_send_message()

    async def action_send_message(self) -> None:
        """Submit the current draft; blank drafts and busy states are ignored."""
        if self.store.pending:
            self.sub_title = "Busy. Wait for the current request to finish."
            return
        self.store.submit(self.store.draft_input)

    def action_cancel_request(self) -> None:
        if not self.store.cancel():
            self.sub_title = "No request to cancel."

    def _apply_theme(self) -> None:
        self.theme = DARK_THEME if self.dark_mode else LIGHT_THEME

    def action_toggle_dark_mode(self) -> None:
        self.dark_mode = not self.dark_mode
        self._apply_theme()
        for sidebar in self.query(HistorySidebar):
            sidebar.set_dark_mode(self.dark_mode)

    def on_history_sidebar_theme_toggle_requested(
        self, _event: HistorySidebar.ThemeToggleRequested
    ) -> None:
        self.action_toggle_dark_mode()

    async def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.store.aclose()
        if self._client is not None:
            await self._client.aclose()
