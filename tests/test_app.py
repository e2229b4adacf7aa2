"""Runtime tests for the Textual app wired to a conversation store."""

from __future__ import annotations

import asyncio
from copy import deepcopy
import logging
import unittest

from completion_chat.config import DEFAULT_CONFIG
from completion_chat.models import CompletionErr, CompletionOk, CompletionResult
from completion_chat.store import ConversationStore

try:
    from textual.widgets import Button, Input

    from completion_chat.app import DARK_THEME, LIGHT_THEME, CompletionChatApp
    from completion_chat.widgets.conversation import ConversationView
    from completion_chat.widgets.history import HistorySidebar
except ModuleNotFoundError:
    Button = None  # type: ignore[assignment,misc]
    Input = None  # type: ignore[assignment,misc]
    CompletionChatApp = None  # type: ignore[assignment,misc]


class _ControlledClient:
    """Completion client whose replies are resolved by the test."""

    def __init__(self) -> None:
        self.prompts: list[str] = []
        self._replies: list[asyncio.Future[CompletionResult]] = []

    async def complete(self, prompt: str) -> CompletionResult:
        self.prompts.append(prompt)
        reply: asyncio.Future[CompletionResult] = (
            asyncio.get_running_loop().create_future()
        )
        self._replies.append(reply)
        return await reply

    def resolve(self, result: CompletionResult) -> None:
        self._replies[-1].set_result(result)


async def _settle(pilot) -> None:
    for _ in range(3):
        await pilot.pause()


def _config() -> dict:
    config = deepcopy(DEFAULT_CONFIG)
    config["logging"]["structured"] = False
    return config


@unittest.skipIf(CompletionChatApp is None, "textual is not installed")
class AppRuntimeTests(unittest.IsolatedAsyncioTestCase):
    """Drive the real app class through the submit/response cycle."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def _build_app(self) -> tuple[CompletionChatApp, ConversationStore, _ControlledClient]:
        assert CompletionChatApp is not None
        client = _ControlledClient()
        store = ConversationStore(client)
        return CompletionChatApp(config=_config(), store=store), store, client

    async def test_submit_and_reply_are_rendered(self) -> None:
        app, store, client = self._build_app()
        async with app.run_test() as pilot:
            input_widget = app.query_one("#message_input", Input)
            input_widget.value = "Hello"
            await _settle(pilot)
            self.assertEqual(store.draft_input, "Hello")

            await pilot.press("enter")
            await _settle(pilot)

            conversation = app.query_one(ConversationView)
            self.assertEqual(client.prompts, ["Hello"])
            self.assertEqual(conversation.rendered_ids, [0])
            self.assertTrue(conversation.indicator.display)
            self.assertTrue(input_widget.disabled)
            self.assertEqual(input_widget.value, "")
            self.assertEqual(app.sub_title, "Waiting for response...")

            client.resolve(CompletionOk("Hi there!"))
            await store.wait_idle()
            await _settle(pilot)

            self.assertEqual(conversation.rendered_ids, [0, 1])
            self.assertFalse(conversation.indicator.display)
            self.assertFalse(input_widget.disabled)
            self.assertEqual(app.sub_title, "Ready")

    async def test_failure_shows_error_line(self) -> None:
        app, store, client = self._build_app()
        async with app.run_test() as pilot:
            store.set_draft_input("Hello")
            await app.action_send_message()
            await _settle(pilot)

            client.resolve(CompletionErr("fetch error: boom"))
            await store.wait_idle()
            await _settle(pilot)

            conversation = app.query_one(ConversationView)
            self.assertEqual(conversation.rendered_ids, [0])
            self.assertEqual(conversation.error_text, "Error: fetch error: boom")
            self.assertTrue(conversation.error_line.display)

    async def test_blank_draft_is_not_sent(self) -> None:
        app, store, client = self._build_app()
        async with app.run_test() as pilot:
            store.set_draft_input("   ")
            await app.action_send_message()
            await _settle(pilot)

            self.assertEqual(store.messages, ())
            self.assertEqual(client.prompts, [])

    async def test_send_while_pending_reports_busy(self) -> None:
        app, store, client = self._build_app()
        async with app.run_test() as pilot:
            store.set_draft_input("first")
            await app.action_send_message()
            await _settle(pilot)

            store.set_draft_input("second")
            await app.action_send_message()
            await _settle(pilot)

            self.assertEqual(client.prompts, ["first"])
            self.assertEqual(app.sub_title, "Busy. Wait for the current request to finish.")

    async def test_escape_cancels_pending_request(self) -> None:
        app, store, _client = self._build_app()
        async with app.run_test() as pilot:
            store.set_draft_input("Hello")
            await app.action_send_message()
            await _settle(pilot)

            app.action_cancel_request()
            await _settle(pilot)

            self.assertFalse(store.pending)
            self.assertEqual(store.last_error, "Error: request cancelled")

    async def test_sidebar_lists_history_and_toggles_theme(self) -> None:
        app, _store, _client = self._build_app()
        async with app.run_test() as pilot:
            entries = app.query(".history-entry")
            self.assertEqual(len(entries), 3)
            self.assertEqual(app.theme, LIGHT_THEME)

            sidebar = app.query_one(HistorySidebar)
            sidebar.query_one("#theme_toggle", Button).press()
            await _settle(pilot)

            self.assertTrue(app.dark_mode)
            self.assertEqual(app.theme, DARK_THEME)
            self.assertIn("Light Mode", str(sidebar.query_one("#theme_toggle", Button).label))


if __name__ == "__main__":
    unittest.main()
