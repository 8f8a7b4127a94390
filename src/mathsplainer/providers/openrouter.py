"""OpenRouter chat-completions provider."""

import logging
from typing import Callable, Optional, Union

import httpx
from openai import AsyncOpenAI, DefaultAsyncHttpxClient

from ..config import Settings
from .base import ChatProvider, ProviderChatRequest

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], AsyncOpenAI]


class OpenRouterProvider(ChatProvider):
    """OpenRouter implementation over the OpenAI-compatible API."""
    
    provider_name = "openrouter"
    
    def __init__(
        self,
        settings: Settings,
        client_factory: Optional[ClientFactory] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize OpenRouter provider.
        
        Args:
            settings: Process settings (endpoint and attribution headers)
            client_factory: Builds a client for a given API key
                (default: ``AsyncOpenAI`` pointed at ``settings.base_url``)
            transport: HTTP transport for the default client
                (default: the SDK's own)
        """
        self.settings = settings
        self._transport = transport
        self._client_factory = client_factory or self._create_client
    
    @property
    def attribution_headers(self) -> dict[str, str]:
        return {
            "HTTP-Referer": self.settings.site_url,
            "X-Title": self.settings.app_title,
        }
    
    def _create_client(self, api_key: str) -> AsyncOpenAI:
        http_client = None
        if self._transport is not None:
            http_client = DefaultAsyncHttpxClient(transport=self._transport)
        
        # One attempt only; SDK default timeout
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.settings.base_url,
            default_headers=self.attribution_headers,
            max_retries=0,
            http_client=http_client,
        )
    
    async def complete(self, request: ProviderChatRequest, api_key: str) -> Union[dict, str]:
        """Send the request to OpenRouter.
        
        Args:
            request: Assembled chat request
            api_key: Bearer credential for this call
            
        Returns:
            Provider response body as received (raw text when the
            provider answered 2xx without JSON)
            
        Raises:
            openai.APIStatusError: Provider answered with a non-2xx status
            openai.APIConnectionError: Network failure or timeout
        """
        client = self._client_factory(api_key)

        logger.debug(
            f"POST {self.settings.base_url}/chat/completions "
            f"(model={request.model}, max_tokens={request.max_tokens})"
        )

        try:
            response = await client.chat.completions.create(**request.to_payload())
        finally:
            await client.close()
        
        # A 2xx body that is not JSON comes back as plain text
        if not hasattr(response, "model_dump"):
            logger.warning(f"Non-JSON reply from provider ({type(response).__name__})")
            return response
        
        return response.model_dump(exclude_unset=True)
