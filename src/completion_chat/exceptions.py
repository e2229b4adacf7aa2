"""Domain exception hierarchy for the completion chat client."""

from __future__ import annotations


class CompletionChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class CompletionTransportError(CompletionChatError):
    """Raised when the completion endpoint cannot be reached or rejects the call."""


class CompletionParseError(CompletionChatError):
    """Raised when the endpoint reply is not a well-formed completion payload."""


class ConfigValidationError(CompletionChatError):
    """Raised when configuration cannot be validated safely."""
