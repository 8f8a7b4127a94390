"""Explanation pipeline for text and image math problems."""

import logging
from typing import Any, Optional, Union

import openai

from .config import Settings
from .errors import ExplanationError
from .normalizer import (
    ImageExplanationRequest,
    normalize_image_request,
    normalize_text_request,
)
from .prompts import build_image_request, build_text_request
from .providers.base import ChatProvider, ProviderChatRequest
from .providers.openrouter import OpenRouterProvider
from .translator import ExplanationResult, translate_completion, translate_error

logger = logging.getLogger(__name__)

Outcome = Union[ExplanationResult, ExplanationError]


class MathExplainer:
    """Explains math problems step by step using a chat-completion model.
    
    Each call runs the whole pipeline: validate the request body, build
    the chat request, send it to the provider, and translate the reply.
    Nothing is kept between calls.
    
    Examples:
        explainer = MathExplainer(Settings.from_env())
        
        outcome = await explainer.explain_problem({"problem": "2x + 3 = 7"})
        if isinstance(outcome, ExplanationResult):
            print(outcome.explanation)
        else:
            print(outcome.status_code, outcome.message)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[ChatProvider] = None,
    ):
        """Initialize explainer.
        
        Args:
            settings: Process settings (default: read from environment)
            provider: Chat provider (default: OpenRouter)
        """
        self.settings = settings or Settings.from_env()
        self._provider = provider or OpenRouterProvider(self.settings)

    @property
    def model(self) -> str:
        return self.settings.model

    async def explain_problem(self, body: Any) -> Outcome:
        """Explain a problem given as text.
        
        Args:
            body: Request body ``{problem, apiKey?}``
            
        Returns:
            ExplanationResult, or the error that stopped the pipeline
        """
        request = normalize_text_request(body, self.settings)
        if isinstance(request, ExplanationError):
            logger.warning(f"Rejected text request ({request.kind}): {request.message}")
            return request
        
        logger.info(f"Explaining text problem ({len(request.problem)} chars)")
        
        chat_request = build_text_request(request, self.model)
        return await self._dispatch(chat_request, request.api_key)

    async def explain_image(self, body: Any) -> Outcome:
        """Explain a problem shown in an image.
        
        Args:
            body: Request body ``{imageBase64, apiKey?, additionalContext?}``
            
        Returns:
            ExplanationResult, or the error that stopped the pipeline
        """
        request = normalize_image_request(body, self.settings)
        if isinstance(request, ExplanationError):
            logger.warning(f"Rejected image request ({request.kind}): {request.message}")
            return request
        
        self._log_image(request)
        
        chat_request = build_image_request(request, self.model)
        return await self._dispatch(chat_request, request.api_key)

    def _log_image(self, request: ImageExplanationRequest) -> None:
        logger.info(
            f"Explaining image problem ({request.media_type}, "
            f"{len(request.image_data):,} base64 chars, "
            f"context: {request.additional_context or 'none'})"
        )

    async def _dispatch(self, chat_request: ProviderChatRequest, api_key: str) -> Outcome:
        """Send the chat request and translate whatever comes back."""
        try:
            payload = await self._provider.complete(chat_request, api_key)
        except openai.APIError as e:
            return translate_error(e, api_key)
        
        result = translate_completion(payload, self.model)
        
        if isinstance(result, ExplanationResult):
            usage = result.usage if isinstance(result.usage, dict) else {}
            logger.info(
                f"Explanation received: model={result.model} "
                f"tokens={usage.get('total_tokens', 'n/a')} "
                f"length={len(result.explanation)}"
            )
        else:
            logger.error(f"Malformed provider response: {result.message}")
        
        return result
