"""Widget exports for the completion chat UI."""

from .activity_bar import PendingIndicator
from .conversation import ConversationView
from .history import HistorySidebar
from .input_box import InputBox
from .message import MessageBubble

__all__ = [
    "ConversationView",
    "HistorySidebar",
    "InputBox",
    "MessageBubble",
    "PendingIndicator",
]
