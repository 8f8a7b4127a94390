"""Step-by-step math explanations from text or images."""

from .config import Settings
from .explainer import MathExplainer
from .translator import ExplanationResult

__version__ = "0.1.0"
__all__ = ["ExplanationResult", "MathExplainer", "Settings"]
