"""Runtime configuration for the explanation pipeline."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "z-ai/glm-4.5v"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_SITE_URL = "http://localhost:3000"
DEFAULT_APP_TITLE = "MathSplainer"

# Environment variable names, first match wins
API_KEY_ENV_VARS = ["OPENROUTER_API_KEY"]
MODEL_ENV_VARS = ["OPENROUTER_MODEL"]
BASE_URL_ENV_VARS = ["OPENROUTER_BASE_URL"]
SITE_URL_ENV_VARS = ["MATHSPLAINER_SITE_URL", "NUXT_PUBLIC_SITE_URL"]
APP_TITLE_ENV_VARS = ["MATHSPLAINER_APP_TITLE"]


def _first_env(environ: Mapping[str, str], names: list[str]) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup.
    
    The default API key is only a fallback: a key sent with a request
    always wins (see ``normalizer.resolve_api_key``).
    """
    
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    site_url: str = DEFAULT_SITE_URL
    app_title: str = DEFAULT_APP_TITLE
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.
        
        Args:
            environ: Mapping to read from (default: ``os.environ``)
            
        Returns:
            Settings with defaults for anything not set
        """
        environ = os.environ if environ is None else environ
        
        settings = cls(
            api_key=_first_env(environ, API_KEY_ENV_VARS),
            model=_first_env(environ, MODEL_ENV_VARS) or DEFAULT_MODEL,
            base_url=(_first_env(environ, BASE_URL_ENV_VARS) or DEFAULT_BASE_URL).rstrip("/"),
            site_url=_first_env(environ, SITE_URL_ENV_VARS) or DEFAULT_SITE_URL,
            app_title=_first_env(environ, APP_TITLE_ENV_VARS) or DEFAULT_APP_TITLE,
        )
        
        logger.debug(
            f"Loaded settings: model={settings.model} base_url={settings.base_url} "
            f"default_key={'set' if settings.api_key else 'unset'}"
        )
        return settings
