"""Animated pending indicator shown while a completion is outstanding."""

from __future__ import annotations

import asyncio
from typing import Any

from textual.widgets import Static

_PULSE_FRAMES: tuple[str, ...] = ("·  ", "·· ", "···", " ··", "  ·", "   ")


class PendingIndicator(Static):
    """A pulsing placeholder bubble bound to the store's ``pending`` flag.

    The indicator reflects a single outstanding request, not incremental
    token delivery.
    """

    DEFAULT_CSS = """
    PendingIndicator {
        height: auto;
        width: auto;
        padding: 0 2;
        margin: 1 0;
        border: round $panel;
        color: $text-muted;
    }
    """

    def __init__(self, label: str = "...", **kwargs: Any) -> None:
        super().__init__(label, **kwargs)
        self._label = label
        self._animation_task: asyncio.Task[None] | None = None
        self.display = False

    @property
    def active(self) -> bool:
        return self._animation_task is not None

    def set_active(self, active: bool) -> None:
        """Show and animate, or hide and stop, the indicator."""
        if active == self.active:
            return
        self.display = active
        if active:
            self._animation_task = asyncio.create_task(self._animate())
            return
        task = self._animation_task
        self._animation_task = None
        if task is not None and not task.done():
            task.cancel()
        self.update(self._label)

    async def _animate(self) -> None:
        frame_index = 0
        try:
            while True:
                frame = _PULSE_FRAMES[frame_index % len(_PULSE_FRAMES)]
                self.update(f"{self._label} {frame}")
                frame_index += 1
                await asyncio.sleep(0.2)
        finally:
            self.update(self._label)

    def on_unmount(self) -> None:
        self.set_active(False)
