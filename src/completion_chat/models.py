"""Conversation messages and completion wire/result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Origin(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single immutable chat message."""

    id: int
    content: str
    origin: Origin

    @property
    def is_user(self) -> bool:
        return self.origin is Origin.USER


@dataclass(frozen=True)
class ChatHistoryEntry:
    """Read-only sidebar entry; has no interaction with the conversation."""

    id: int
    title: str


class CompletionRequest(BaseModel):
    """Request body sent to the completion endpoint."""

    model_config = ConfigDict(frozen=True)
    prompt: str


class CompletionResponse(BaseModel):
    """Expected response body; unknown fields are ignored."""

    completion: str


@dataclass(frozen=True)
class CompletionOk:
    text: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class CompletionErr:
    reason: str

    @property
    def ok(self) -> bool:
        return False


CompletionResult = CompletionOk | CompletionErr
