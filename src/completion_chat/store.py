"""Observable conversation store enforcing the request lifecycle."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import replace
import itertools
import logging
from typing import Protocol

from .models import CompletionErr, CompletionResult, Message, Origin
from .state import ConversationState, RequestPhase

LOGGER = logging.getLogger(__name__)

StateListener = Callable[[ConversationState], None]

CANCELLED_REASON = "request cancelled"


class SupportsComplete(Protocol):
    async def complete(self, prompt: str) -> CompletionResult: ...


class ConversationStore:
    """Own the conversation state and every transition applied to it.

    All mutations run synchronously on the event loop, so each one is atomic
    with respect to other UI events. The only suspension point is the
    completion call, which runs in a task returned by :meth:`submit`.
    """

    def __init__(
        self,
        client: SupportsComplete,
        response_timeout_seconds: float | None = None,
    ) -> None:
        self._client = client
        self.response_timeout_seconds = response_timeout_seconds or None
        self._state = ConversationState()
        self._ids = itertools.count()
        self._listeners: list[StateListener] = []
        self._request_task: asyncio.Task[CompletionResult] | None = None
        self._request_serial = 0

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def phase(self) -> RequestPhase:
        return self._state.phase

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._state.messages

    @property
    def draft_input(self) -> str:
        return self._state.draft_input

    @property
    def pending(self) -> bool:
        return self._state.pending

    @property
    def last_error(self) -> str:
        return self._state.last_error

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _commit(self, new_state: ConversationState) -> None:
        previous = self._state
        if new_state == previous:
            return
        self._state = new_state
        if previous.pending != new_state.pending:
            LOGGER.info(
                "store.state.transition",
                extra={
                    "event": "store.state.transition",
                    "from_state": previous.phase.value,
                    "to_state": new_state.phase.value,
                },
            )
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:  # noqa: BLE001 - one bad observer must not break the store.
                LOGGER.exception(
                    "store.listener.failed",
                    extra={"event": "store.listener.failed"},
                )

    def _new_message(self, content: str, origin: Origin) -> Message:
        return Message(id=next(self._ids), content=content, origin=origin)

    def set_draft_input(self, text: str) -> None:
        self._commit(replace(self._state, draft_input=text))

    def submit(self, text: str) -> asyncio.Task[CompletionResult] | None:
        """Append ``text`` as a user message and start the completion request.

        Returns the request task, or ``None`` when the input is blank or a
        request is already in flight. Raises ``RuntimeError`` without touching
        the state when no event loop is running.
        """
        if not text.strip():
            return None
        if self._state.pending:
            LOGGER.warning("store.submit.busy", extra={"event": "store.submit.busy"})
            return None
        loop = asyncio.get_running_loop()

        message = self._new_message(text, Origin.USER)
        self._commit(
            replace(
                self._state,
                messages=self._state.messages + (message,),
                draft_input="",
                pending=True,
                last_error="",
            )
        )

        self._request_serial += 1
        task = loop.create_task(self._run_request(text, self._request_serial))
        self._request_task = task
        return task

    async def _run_request(self, prompt: str, serial: int) -> CompletionResult:
        try:
            result = await asyncio.wait_for(
                self._client.complete(prompt), self.response_timeout_seconds
            )
        except asyncio.TimeoutError:
            result = CompletionErr(
                f"fetch error: no response within {self.response_timeout_seconds:g}s"
            )
        except asyncio.CancelledError:
            if serial == self._request_serial and self._state.pending:
                self._request_task = None
                self.on_completion_failure(CANCELLED_REASON)
            raise
        except Exception as exc:  # noqa: BLE001 - every request must settle the store.
            LOGGER.exception(
                "store.request.crashed",
                extra={"event": "store.request.crashed", "serial": serial},
            )
            detail = str(exc) or exc.__class__.__name__
            result = CompletionErr(f"fetch error: {detail}")

        if serial != self._request_serial:
            LOGGER.info(
                "store.result.discarded",
                extra={"event": "store.result.discarded", "serial": serial},
            )
            return result
        self._request_task = None
        if isinstance(result, CompletionErr):
            self.on_completion_failure(result.reason)
        else:
            self.on_completion_success(result.text)
        return result

    def on_completion_success(self, text: str) -> None:
        if not self._state.pending:
            LOGGER.warning(
                "store.completion.unexpected",
                extra={"event": "store.completion.unexpected", "outcome": "success"},
            )
            return
        self._invalidate_request()
        message = self._new_message(text, Origin.ASSISTANT)
        self._commit(
            replace(
                self._state,
                messages=self._state.messages + (message,),
                pending=False,
                last_error="",
            )
        )

    def on_completion_failure(self, reason: str) -> None:
        if not self._state.pending:
            LOGGER.warning(
                "store.completion.unexpected",
                extra={"event": "store.completion.unexpected", "outcome": "failure"},
            )
            return
        self._invalidate_request()
        self._commit(replace(self._state, pending=False, last_error=f"Error: {reason}"))

    def _invalidate_request(self) -> None:
        """Detach and cancel the in-flight task so a late result cannot be applied twice."""
        task = self._request_task
        self._request_task = None
        if task is not None and task is not asyncio.current_task():
            self._request_serial += 1
            task.cancel()

    def cancel(self) -> bool:
        """Cancel the in-flight request; the store records a failure."""
        task = self._request_task
        if not self._state.pending or task is None:
            return False
        self._request_task = None
        self._request_serial += 1
        task.cancel()
        self.on_completion_failure(CANCELLED_REASON)
        return True

    async def wait_idle(self) -> None:
        """Wait for the in-flight request, if any, to settle."""
        task = self._request_task
        if task is None:
            return
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def aclose(self) -> None:
        """Cancel any in-flight request at teardown."""
        task = self._request_task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
