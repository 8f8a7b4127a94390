"""Base classes and contracts for chat-completion providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal, Union

Role = Literal["system", "user", "assistant"]


@dataclass
class ChatMessage:
    """One conversational turn.
    
    ``content`` is either plain text or an ordered list of typed parts
    (``{"type": "text", ...}``, ``{"type": "image_url", ...}``).
    """
    
    role: Role
    content: Union[str, list[dict]]
    
    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class ProviderChatRequest:
    """Chat completion request as sent to the provider."""
    
    model: str
    messages: list[ChatMessage] = field(default_factory=list)
    temperature: float = 0.3
    max_tokens: int = 4000
    
    def to_payload(self) -> dict:
        """JSON body for the chat-completions endpoint."""
        return {
            "model": self.model,
            "messages": [message.to_dict() for message in self.messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }


class ChatProvider(ABC):
    """Abstract base class for chat-completion providers.
    
    Implementations send one request and hand back the provider's JSON
    reply untouched; failures are raised, not translated.
    """
    
    provider_name: str
    
    @abstractmethod
    async def complete(self, request: ProviderChatRequest, api_key: str) -> dict:
        """Send one chat completion request.
        
        Args:
            request: Assembled chat request
            api_key: Bearer credential for this call
            
        Returns:
            Provider response body as a dict
        """
        ...
