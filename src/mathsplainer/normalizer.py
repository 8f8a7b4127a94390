"""Input validation and normalization for explanation requests."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import Settings
from .errors import ExplanationError, MissingCredential, MissingInput

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:image/([^;]+);base64,")

# Used when the client sends bare base64 without a data-URI prefix
DEFAULT_MEDIA_TYPE = "image/jpeg"


@dataclass(frozen=True)
class TextExplanationRequest:
    """Validated text problem with its resolved API key."""
    
    problem: str
    api_key: str


@dataclass(frozen=True)
class ImageExplanationRequest:
    """Validated image problem with its resolved API key."""
    
    image_data: str  # base64 payload, prefix stripped
    media_type: str
    api_key: str
    additional_context: Optional[str] = None


ExplanationRequest = Union[TextExplanationRequest, ImageExplanationRequest]


def _non_empty_string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def parse_data_uri(value: str) -> tuple[str, str]:
    """Split a data-URI image string into media type and payload.
    
    Args:
        value: ``data:image/<subtype>;base64,<payload>`` or bare base64
        
    Returns:
        (media_type, payload)
    """
    match = DATA_URI_PATTERN.match(value)
    
    if match is None:
        # No recognizable prefix: whole string is the payload
        return DEFAULT_MEDIA_TYPE, value
    
    return f"image/{match.group(1)}", value[match.end():]


def resolve_api_key(
    explicit_key: Any,
    settings: Settings,
) -> Union[str, MissingCredential]:
    """Resolve API key from the request or the configured default.
    
    Resolution order:
    1. Key sent with the request
    2. Process-wide configured key
    
    Args:
        explicit_key: Key from the request body (may be missing)
        settings: Process settings
        
    Returns:
        Resolved key, or MissingCredential if neither is present
    """
    key = _non_empty_string(explicit_key)
    if key:
        return key
    
    if settings.api_key:
        logger.debug("Using configured default API key")
        return settings.api_key
    
    return MissingCredential()


def normalize_text_request(
    body: Any,
    settings: Settings,
) -> Union[TextExplanationRequest, ExplanationError]:
    """Validate a text explanation request body.
    
    Args:
        body: Parsed JSON body ``{problem, apiKey?}``
        settings: Process settings
        
    Returns:
        TextExplanationRequest, or MissingInput / MissingCredential
    """
    body = body if isinstance(body, dict) else {}
    
    problem = _non_empty_string(body.get("problem"))
    if problem is None:
        return MissingInput(message="Problem text is required")
    
    key = resolve_api_key(body.get("apiKey"), settings)
    if isinstance(key, ExplanationError):
        return key
    
    return TextExplanationRequest(problem=problem, api_key=key)


def normalize_image_request(
    body: Any,
    settings: Settings,
) -> Union[ImageExplanationRequest, ExplanationError]:
    """Validate an image explanation request body.
    
    Args:
        body: Parsed JSON body ``{imageBase64, apiKey?, additionalContext?}``
        settings: Process settings
        
    Returns:
        ImageExplanationRequest, or MissingInput / MissingCredential
    """
    body = body if isinstance(body, dict) else {}
    
    image = _non_empty_string(body.get("imageBase64"))
    if image is None:
        return MissingInput(message="Image data is required")
    
    key = resolve_api_key(body.get("apiKey"), settings)
    if isinstance(key, ExplanationError):
        return key
    
    media_type, payload = parse_data_uri(image)
    
    logger.debug(
        f"Image input: media_type={media_type} payload_length={len(payload)} "
        f"payload_prefix={payload[:50]}"
    )
    
    return ImageExplanationRequest(
        image_data=payload,
        media_type=media_type,
        api_key=key,
        additional_context=_non_empty_string(body.get("additionalContext")),
    )
