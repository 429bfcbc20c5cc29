"""Chat-protocol seam: message shape, client interface and the dispatch loop."""

from .client import ChatClient
from .dispatcher import TriggerDispatcher
from .message import RPL_NOTOPIC, RPL_TOPIC, ChatMessage

__all__ = ["ChatClient", "ChatMessage", "TriggerDispatcher", "RPL_NOTOPIC", "RPL_TOPIC"]
