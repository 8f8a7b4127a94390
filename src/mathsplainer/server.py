"""HTTP API exposing the explanation pipeline."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import ExplanationError, MissingInput
from .explainer import MathExplainer, Outcome

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_body(request: Request) -> Any:
    """Parsed JSON body, or None when the body is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def _to_response(outcome: Outcome) -> JSONResponse:
    if isinstance(outcome, ExplanationError):
        return JSONResponse(status_code=outcome.status_code, content=outcome.to_report())
    return JSONResponse(content=outcome.to_dict())


def _explainer(request: Request) -> MathExplainer:
    return request.app.state.explainer


@router.post("/explain-math")
async def explain_math(request: Request):
    """Explain a text problem: ``{problem, apiKey?}``."""
    body = await _read_body(request)
    if body is None:
        return _to_response(MissingInput(message="Problem text is required"))
    
    outcome = await _explainer(request).explain_problem(body)
    return _to_response(outcome)


@router.post("/explain-math-image")
async def explain_math_image(request: Request):
    """Explain an image problem: ``{imageBase64, apiKey?, additionalContext?}``."""
    body = await _read_body(request)
    if body is None:
        return _to_response(MissingInput(message="Image data is required"))
    
    outcome = await _explainer(request).explain_image(body)
    return _to_response(outcome)


def create_app(
    settings: Optional[Settings] = None,
    explainer: Optional[MathExplainer] = None,
) -> FastAPI:
    """Build the FastAPI application.
    
    Routes are served at the root and again under ``/api``, the prefix the
    web front end posts to.
    
    Args:
        settings: Process settings (default: read from environment)
        explainer: Pipeline instance (default: built from settings)
        
    Returns:
        Configured FastAPI app
    """
    app = FastAPI(title="MathSplainer")
    app.state.explainer = explainer or MathExplainer(settings or Settings.from_env())
    
    app.include_router(router)
    app.include_router(router, prefix="/api")
    
    return app


def launch_server(host: str = "127.0.0.1", port: int = 3001, verbose: bool = False):
    """Run the API with uvicorn.
    
    Args:
        host: Interface to bind
        port: Port to listen on
        verbose: Enable debug logging
    """
    import uvicorn
    
    app = create_app()
    
    logger.info(f"Serving MathSplainer API on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="debug" if verbose else "info")
