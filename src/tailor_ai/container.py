"""Service container wiring application components."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tailor_ai.config import AppSettings
from tailor_ai.domain import ProviderConfig
from tailor_ai.orchestration import ProcessingOrchestrator, ProcessorSettings
from tailor_ai.providers import BackendPlugin, CliProvider, ProviderRegistry
from tailor_ai.providers.anthropic import CLAUDE_PLUGIN
from tailor_ai.providers.gemini import GEMINI_PLUGIN
from tailor_ai.providers.openai import CODEX_PLUGIN
from tailor_ai.runtime import CliRuntime

BUILTIN_PLUGINS: tuple[BackendPlugin, ...] = (CLAUDE_PLUGIN, CODEX_PLUGIN, GEMINI_PLUGIN)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContainer:
    """Aggregates the services shared by one application instance."""

    settings: AppSettings
    provider_registry: ProviderRegistry
    orchestrator: ProcessingOrchestrator
    cli_runtime: CliRuntime


def configure_logging(level: str) -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        logger.warning("Unknown log level %r; using INFO", level)
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_default_registry(
    settings: AppSettings,
    *,
    runtime: CliRuntime | None = None,
) -> ProviderRegistry:
    """Register the built-in backends with any configured overrides applied."""

    shared_runtime = runtime or CliRuntime()
    registry = ProviderRegistry(default_provider=settings.default_provider)
    for plugin in BUILTIN_PLUGINS:
        name = plugin.kind.value
        config = ProviderConfig.model_validate(
            {**plugin.default_config.model_dump(), **settings.backend(name).overrides()}
        )
        registry.register_provider(
            name,
            CliProvider(plugin, config=config, runtime=shared_runtime),
            override=True,
        )
    if registry.get_provider(settings.default_provider) is None:
        logger.warning(
            "Default provider %s is not registered; available: %s",
            settings.default_provider,
            registry.list_providers(),
        )
    return registry


def build_container(settings: AppSettings | None = None) -> ServiceContainer:
    """Construct the primary service container."""

    resolved_settings = settings or AppSettings.from_env()
    cli_runtime = CliRuntime()
    registry = build_default_registry(resolved_settings, runtime=cli_runtime)
    orchestrator = ProcessingOrchestrator(
        registry,
        ProcessorSettings(
            retry_on_validation_failure=resolved_settings.retry_on_validation_failure,
            max_validation_retries=resolved_settings.max_validation_retries,
            sanitize_output=resolved_settings.sanitize_output,
        ),
    )
    return ServiceContainer(
        settings=resolved_settings,
        provider_registry=registry,
        orchestrator=orchestrator,
        cli_runtime=cli_runtime,
    )


__all__ = [
    "BUILTIN_PLUGINS",
    "ServiceContainer",
    "build_container",
    "build_default_registry",
    "configure_logging",
]
