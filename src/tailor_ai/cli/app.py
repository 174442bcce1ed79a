"""Typer CLI wiring tailor-ai services."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from pydantic import BaseModel

from tailor_ai.domain import OutputFormat, ProviderConfig, ProviderRequest
from tailor_ai.orchestration import (
    ModelContract,
    ProcessorError,
    build_cover_letter_prompt,
    build_job_extraction_prompt,
    build_resume_refinement_prompt,
)
from tailor_ai.providers import AIProvider, ProviderConfigurationError, ProviderFailure
from tailor_ai.schemas import ExtractedJobPosting, GeneratedCoverLetter, RefinedResume

from .deps import get_container

app = typer.Typer(help="tailor-ai command-line interface")


def _resolve_provider(name: str | None) -> AIProvider:
    registry = get_container().provider_registry
    try:
        return registry.require(name) if name else registry.get_default_provider()
    except ProviderConfigurationError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc


@app.command("show-settings")
def show_settings() -> None:
    """Print the resolved application settings."""

    container = get_container()
    settings = container.settings
    typer.echo("Environment:\t" + settings.environment)
    typer.echo("Default provider:\t" + settings.default_provider)
    typer.echo("Log level:\t" + settings.log_level)
    typer.echo(
        "Validation retry:\t"
        f"{settings.retry_on_validation_failure} (max {settings.max_validation_retries})"
    )
    typer.echo(f"Sanitize output:\t{settings.sanitize_output}")
    for name in container.provider_registry.list_providers():
        config = container.provider_registry.require(name).get_config()
        typer.echo(
            f"{name}:\tpath={config.executable_path} timeout_ms={config.timeout_ms} "
            f"max_retries={config.max_retries} model={config.model or '-'}"
        )


@app.command("status")
def status() -> None:
    """Report availability of every registered backend CLI."""

    registry = get_container().provider_registry
    statuses = asyncio.run(registry.check_all_availability())
    for entry in statuses:
        marker = "*" if entry.backend == registry.default_provider else " "
        if entry.available:
            typer.echo(f"{marker} {entry.backend}\tavailable\t{entry.version or 'unknown version'}")
        else:
            typer.echo(f"{marker} {entry.backend}\tunavailable\t{entry.error}")


@app.command("run")
def run(
    prompt: str,
    provider: str | None = typer.Option(None, help="Backend to use instead of the default"),
    as_json: bool = typer.Option(False, "--json", help="Request and print parsed JSON"),
    timeout_ms: int | None = typer.Option(None, min=0, help="Override the backend timeout"),
) -> None:
    """Send one prompt to a backend and print its answer."""

    selected = _resolve_provider(provider)
    config: ProviderConfig = selected.get_config()
    if timeout_ms is not None:
        config = config.model_copy(update={"timeout_ms": timeout_ms})
    request = ProviderRequest(
        prompt=prompt,
        output_format=OutputFormat.JSON if as_json else OutputFormat.TEXT,
    )

    response = asyncio.run(selected.execute_with_retry(request, config=config))
    if isinstance(response, ProviderFailure):
        typer.echo(f"Error [{response.error.code.value}]: {response.error.message}")
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(json.dumps(response.data, indent=2, ensure_ascii=False))
    else:
        typer.echo(response.raw_text)


def _process_and_print(prompt: str, model: type[BaseModel], provider: str | None) -> None:
    container = get_container()
    try:
        result = asyncio.run(
            container.orchestrator.process(prompt, ModelContract(model), provider_name=provider)
        )
    except ProcessorError as exc:
        typer.echo(f"Error [{exc.code.value}]: {exc.message}")
        raise typer.Exit(code=1) from exc
    typer.echo(result.model_dump_json(indent=2))


@app.command("extract-job")
def extract_job(
    posting: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    provider: str | None = typer.Option(None, help="Backend to use instead of the default"),
) -> None:
    """Extract structured fields from a job posting file."""

    prompt = build_job_extraction_prompt(posting.read_text(encoding="utf-8"))
    _process_and_print(prompt, ExtractedJobPosting, provider)


@app.command("refine-resume")
def refine_resume(
    resume: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    posting: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    provider: str | None = typer.Option(None, help="Backend to use instead of the default"),
) -> None:
    """Tailor a JSON resume to a job posting file."""

    prompt = build_resume_refinement_prompt(
        resume.read_text(encoding="utf-8"), posting.read_text(encoding="utf-8")
    )
    _process_and_print(prompt, RefinedResume, provider)


@app.command("cover-letter")
def cover_letter(
    resume: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    posting: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    provider: str | None = typer.Option(None, help="Backend to use instead of the default"),
    tone: str = typer.Option("formal", help="formal, conversational or enthusiastic"),
) -> None:
    """Write a cover letter for a JSON resume and a job posting file."""

    prompt = build_cover_letter_prompt(
        resume.read_text(encoding="utf-8"),
        posting.read_text(encoding="utf-8"),
        tone=tone,
    )
    _process_and_print(prompt, GeneratedCoverLetter, provider)



__all__ = ["app"]
