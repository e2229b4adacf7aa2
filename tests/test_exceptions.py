"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from completion_chat.exceptions import (
    CompletionChatError,
    CompletionParseError,
    CompletionTransportError,
    ConfigValidationError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        self.assertTrue(issubclass(CompletionTransportError, CompletionChatError))
        self.assertTrue(issubclass(CompletionParseError, CompletionChatError))
        self.assertTrue(issubclass(ConfigValidationError, CompletionChatError))
        self.assertTrue(issubclass(CompletionChatError, RuntimeError))


if __name__ == "__main__":
    unittest.main()
