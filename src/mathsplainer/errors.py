"""Tagged error values returned by the explanation pipeline.

Errors travel back to the caller as values rather than exceptions, so every
pipeline step returns either its result or one of these.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ExplanationError:
    """Base error carried back to the caller."""
    
    status_code: int
    message: str
    data: Optional[Any] = None
    
    kind = "ExplanationError"
    
    def to_report(self) -> dict:
        """Serialize to the outward error shape.
        
        Returns:
            Dict with statusCode, statusMessage and, when present, data
        """
        report = {"statusCode": self.status_code, "statusMessage": self.message}
        if self.data is not None:
            report["data"] = self.data
        return report


@dataclass(frozen=True)
class MissingInput(ExplanationError):
    """A required request field is absent or empty."""
    
    status_code: int = 400
    message: str = "Required input is missing"
    
    kind = "MissingInput"


@dataclass(frozen=True)
class MissingCredential(ExplanationError):
    """No API key in the request and none configured."""
    
    status_code: int = 401
    message: str = (
        "OpenRouter API key is required. "
        "Please provide one or configure it on the server."
    )
    
    kind = "MissingCredential"


@dataclass(frozen=True)
class ProviderError(ExplanationError):
    """The provider call failed; status is forwarded from the provider."""
    
    status_code: int = 500
    message: str = "Failed to get explanation from OpenRouter"
    
    kind = "ProviderError"


@dataclass(frozen=True)
class MalformedProviderResponse(ProviderError):
    """The provider answered 2xx but without a usable explanation."""
    
    message: str = "Provider returned no explanation"
    
    kind = "MalformedProviderResponse"
