"""Inference API client module."""

from think_relay.llm.client import ChatClient
from think_relay.llm.models import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    StreamChunk,
    TitleRequest,
)

__all__ = [
    "ChatClient",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "StreamChunk",
    "TitleRequest",
]
