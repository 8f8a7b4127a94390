"""Translation of provider replies and failures into the outward contract."""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import openai

from .errors import MalformedProviderResponse, ProviderError

logger = logging.getLogger(__name__)

REDACTED = "[redacted]"


@dataclass(frozen=True)
class ExplanationResult:
    """Successful explanation returned to the caller."""
    
    explanation: str
    model: str
    usage: Optional[dict] = None
    
    def to_dict(self) -> dict:
        result = {"explanation": self.explanation, "model": self.model}
        if self.usage is not None:
            result["usage"] = self.usage
        return result


def translate_completion(
    payload: Any,
    fallback_model: str,
) -> Union[ExplanationResult, MalformedProviderResponse]:
    """Map a provider success payload to an ExplanationResult.
    
    Args:
        payload: Provider response body
        fallback_model: Configured model, reported when the provider
            does not echo one
            
    Returns:
        ExplanationResult, or MalformedProviderResponse when the payload
        has no ``choices[0].message.content`` string
    """
    if not isinstance(payload, dict):
        return MalformedProviderResponse(data=None)
    
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return MalformedProviderResponse(data=payload)
    
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    
    if not isinstance(content, str):
        return MalformedProviderResponse(data=payload)
    
    return ExplanationResult(
        explanation=content,
        model=payload.get("model") or fallback_model,
        usage=payload.get("usage"),
    )


def _error_body(exc: openai.APIStatusError) -> Any:
    """Full provider error body; the SDK keeps only the inner ``error``."""
    try:
        return exc.response.json()
    except ValueError:
        return exc.body


def _error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    
    error = body.get("error", body)
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _redact(value: Any, secret: Optional[str]) -> Any:
    if not secret:
        return value
    if isinstance(value, str):
        return value.replace(secret, REDACTED)
    if isinstance(value, dict):
        return {key: _redact(item, secret) for key, item in value.items()}
    if isinstance(value, list):
        return [_redact(item, secret) for item in value]
    return value


def translate_error(exc: openai.APIError, api_key: Optional[str] = None) -> ProviderError:
    """Map a failed provider call to a ProviderError.
    
    Args:
        exc: Error raised by the openai SDK
        api_key: Credential used for the call, scrubbed from the report
        
    Returns:
        ProviderError with the provider's status (500 when there is none),
        the provider's error message when present, and the raw error body
    """
    if isinstance(exc, openai.APIStatusError):
        body = _error_body(exc)
        error = ProviderError(
            status_code=exc.status_code,
            message=_redact(_error_message(body), api_key) or ProviderError.message,
            data=_redact(body, api_key),
        )
    else:
        # Connection errors and timeouts carry no response
        error = ProviderError()
    
    logger.error(
        f"OpenRouter API error: status={error.status_code} message={error.message}"
    )
    return error
