"""Chat-completion providers."""

from .base import ChatMessage, ChatProvider, ProviderChatRequest
from .openrouter import OpenRouterProvider

__all__ = ["ChatMessage", "ChatProvider", "OpenRouterProvider", "ProviderChatRequest"]
