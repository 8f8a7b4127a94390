"""CLI interface for math explanations."""

import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Coroutine

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import Settings
from .errors import ExplanationError
from .explainer import MathExplainer, Outcome

console = Console()


def setup_logging(verbose: bool = False):
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_time=False)],
    )


def _load_settings(model: str | None) -> Settings:
    load_dotenv()
    settings = Settings.from_env()
    if model:
        settings = dataclasses.replace(settings, model=model)
    return settings


def _run(pending: Coroutine[Any, Any, Outcome]) -> Outcome:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Explaining...", total=None)
        return asyncio.run(pending)


def _display_outcome(outcome: Outcome, output: Path | None):
    """Print the explanation, or the error and exit."""
    if isinstance(outcome, ExplanationError):
        console.print(f"\n[red]Error {outcome.status_code}: {escape(outcome.message)}[/red]")
        sys.exit(1)
    
    console.print(Panel(Markdown(outcome.explanation), title="Explanation", border_style="green"))
    
    usage = outcome.usage if isinstance(outcome.usage, dict) else {}
    console.print(f"[dim]Model: {outcome.model}[/dim]")
    if usage:
        console.print(f"[dim]Tokens: {usage.get('total_tokens', 0):,} "
                     f"(prompt: {usage.get('prompt_tokens', 0):,}, "
                     f"completion: {usage.get('completion_tokens', 0):,})[/dim]")
    
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(outcome.explanation + "\n")
        console.print(f"\n[green]Saved to {output}[/green]")


@click.group()
def cli():
    """Step-by-step math explanations powered by OpenRouter.

    Examples:

        mathsplainer explain "Solve 2x + 3 = 7"

        mathsplainer image worksheet.png --context "only question 3"

        mathsplainer serve --port 3001
    """


@cli.command()
@click.argument("problem", type=str)
@click.option("--api-key", "-k", type=str, default=None, help="OpenRouter API key (overrides OPENROUTER_API_KEY)")
@click.option("--model", "-m", type=str, default=None, help="Model identifier")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Save explanation to file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def explain(problem: str, api_key: str | None, model: str | None, output: Path | None, verbose: bool):
    """Explain a math problem given as text."""
    setup_logging(verbose)
    
    explainer = MathExplainer(_load_settings(model))
    outcome = _run(explainer.explain_problem({"problem": problem, "apiKey": api_key}))
    _display_outcome(outcome, output)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--context", "-c", type=str, default=None, help="Additional context for the problem")
@click.option("--quality", "-q", type=click.Choice(["quick", "normal", "detailed", "full"]), default="normal", help="Image quality preset")
@click.option("--api-key", "-k", type=str, default=None, help="OpenRouter API key (overrides OPENROUTER_API_KEY)")
@click.option("--model", "-m", type=str, default=None, help="Model identifier")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Save explanation to file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def image(
    path: Path,
    context: str | None,
    quality: str,
    api_key: str | None,
    model: str | None,
    output: Path | None,
    verbose: bool,
):
    """Explain a math problem from a photo or screenshot."""
    setup_logging(verbose)
    
    from .image_processor import ImageProcessor
    
    try:
        data_uri = ImageProcessor(quality=quality).to_data_uri(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)
    
    explainer = MathExplainer(_load_settings(model))
    body = {"imageBase64": data_uri, "apiKey": api_key, "additionalContext": context}
    outcome = _run(explainer.explain_image(body))
    _display_outcome(outcome, output)


@cli.command()
@click.option("--host", type=str, default="127.0.0.1", help="Interface to bind")
@click.option("--port", "-p", type=int, default=3001, help="Port to listen on")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def serve(host: str, port: int, verbose: bool):
    """Run the HTTP API."""
    load_dotenv()
    setup_logging(verbose)
    
    from .server import launch_server
    
    launch_server(host=host, port=port, verbose=verbose)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
