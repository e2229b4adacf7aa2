"""Top-level package for completion-chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import (
    CompletionChatError,
    CompletionParseError,
    CompletionTransportError,
    ConfigValidationError,
)
from .models import (
    ChatHistoryEntry,
    CompletionErr,
    CompletionOk,
    CompletionRequest,
    CompletionResponse,
    Message,
    Origin,
)
from .state import ConversationState, RequestPhase

if TYPE_CHECKING:
    from .app import CompletionChatApp
    from .completion import CompletionClient
    from .config import ensure_config_dir, load_config
    from .store import ConversationStore

__all__ = [
    "ChatHistoryEntry",
    "CompletionChatApp",
    "CompletionChatError",
    "CompletionClient",
    "CompletionErr",
    "CompletionOk",
    "CompletionParseError",
    "CompletionRequest",
    "CompletionResponse",
    "CompletionTransportError",
    "ConfigValidationError",
    "ConversationState",
    "ConversationStore",
    "Message",
    "Origin",
    "RequestPhase",
    "ensure_config_dir",
    "load_config",
]


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the core stays importable without the UI stack."""
    if name == "CompletionClient":
        from .completion import CompletionClient

        return CompletionClient
    if name == "ConversationStore":
        from .store import ConversationStore

        return ConversationStore
    if name in {"ensure_config_dir", "load_config"}:
        from .config import ensure_config_dir, load_config

        return {"ensure_config_dir": ensure_config_dir, "load_config": load_config}[name]
    if name == "CompletionChatApp":
        from .app import CompletionChatApp

        return CompletionChatApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
