"""Request lifecycle phases and the immutable conversation snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import Message


class RequestPhase(str, Enum):
    """Finite state machine for the request lifecycle."""

    IDLE = "IDLE"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"


@dataclass(frozen=True)
class ConversationState:
    """Snapshot handed to observers after every store change."""

    messages: tuple[Message, ...] = ()
    draft_input: str = ""
    pending: bool = False
    last_error: str = ""

    @property
    def phase(self) -> RequestPhase:
        if self.pending:
            return RequestPhase.AWAITING_RESPONSE
        return RequestPhase.IDLE

    @property
    def can_submit(self) -> bool:
        """Return True when a new submission would be accepted."""
        return not self.pending and bool(self.draft_input.strip())
