"""Processing orchestrator: the entry point application code calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tailor_ai.domain import (
    OutputFormat,
    ProcessorErrorCode,
    ProviderConfig,
    ProviderRequest,
    ProviderStatus,
)
from tailor_ai.providers import (
    AIProvider,
    ProviderConfigurationError,
    ProviderFailure,
    ProviderRegistry,
)
from tailor_ai.utils.sanitize import sanitize_ai_response

from .contracts import ShapeContract
from .exceptions import ProcessorError, ShapeValidationError, map_provider_error

T = TypeVar("T")

Sanitizer = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ProcessorSettings:
    """Cross-cutting policy applied by :class:`ProcessingOrchestrator`."""

    retry_on_validation_failure: bool = True
    max_validation_retries: int = 1
    sanitize_output: bool = True


class ProcessingOrchestrator:
    """Selects a provider, executes prompts and enforces the result shape.

    Provider failures are mapped and raised on first occurrence; only shape
    validation failures trigger a fresh generation here. Transient process
    failures are retried inside the provider's ``execute_with_retry``.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        settings: ProcessorSettings | None = None,
        *,
        sanitizer: Sanitizer = sanitize_ai_response,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or ProcessorSettings()
        self._sanitizer = sanitizer
        self._logger = logger or logging.getLogger(__name__)

    @property
    def settings(self) -> ProcessorSettings:
        return self._settings

    async def check_availability(self, provider_name: str | None = None) -> ProviderStatus:
        provider = self._resolve_provider(provider_name)
        return await provider.get_status()

    async def process(
        self,
        prompt: str,
        contract: ShapeContract[T],
        *,
        provider_name: str | None = None,
        override_timeout_ms: int | None = None,
        retry_on_validation_failure: bool | None = None,
        max_validation_retries: int | None = None,
        sanitize: bool | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """Run ``prompt`` and return data accepted by ``contract``.

        Raises :class:`ProcessorError` for every failure.
        """

        try:
            return await self._process(
                prompt,
                contract,
                provider_name=provider_name,
                override_timeout_ms=override_timeout_ms,
                retry_on_validation_failure=retry_on_validation_failure,
                max_validation_retries=max_validation_retries,
                sanitize=sanitize,
                cancel_event=cancel_event,
            )
        except ProcessorError:
            raise
        except Exception as exc:
            self._logger.exception("Unexpected failure while processing prompt")
            raise ProcessorError(
                ProcessorErrorCode.UNKNOWN,
                f"Unexpected error during processing: {exc}",
                {"original_error": repr(exc)},
            ) from exc

    async def _process(
        self,
        prompt: str,
        contract: ShapeContract[T],
        *,
        provider_name: str | None,
        override_timeout_ms: int | None,
        retry_on_validation_failure: bool | None,
        max_validation_retries: int | None,
        sanitize: bool | None,
        cancel_event: asyncio.Event | None,
    ) -> T:
        provider = self._resolve_provider(provider_name)
        if not await provider.is_available():
            raise ProcessorError(
                ProcessorErrorCode.CLI_NOT_AVAILABLE,
                f"{provider.name} CLI is not available. "
                "Please ensure it is installed and accessible in PATH.",
                {"backend": provider.name},
            )

        config = self._effective_config(provider, override_timeout_ms)
        enable_retry = (
            self._settings.retry_on_validation_failure
            if retry_on_validation_failure is None
            else retry_on_validation_failure
        )
        retries = max(
            0,
            self._settings.max_validation_retries
            if max_validation_retries is None
            else max_validation_retries,
        )
        attempts = retries + 1 if enable_retry else 1
        request = ProviderRequest(prompt=prompt, output_format=OutputFormat.JSON)

        errors: list[str] = []
        raw_data: Any = None
        for attempt in range(1, attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise ProcessorError(
                    ProcessorErrorCode.CANCELLED,
                    "Processing was cancelled",
                    {"backend": provider.name, "attempt": attempt},
                )

            response = await provider.execute_with_retry(
                request,
                config=config,
                cancel_event=cancel_event,
            )
            if isinstance(response, ProviderFailure):
                if cancel_event is not None and cancel_event.is_set():
                    raise ProcessorError(
                        ProcessorErrorCode.CANCELLED,
                        response.error.message,
                        {"backend": provider.name, "attempt": attempt},
                    ) from response.error
                raise map_provider_error(response.error) from response.error

            raw_data = response.data
            try:
                result = contract.validate(raw_data)
            except ShapeValidationError as exc:
                errors = exc.errors
            except Exception as exc:
                raise ProcessorError(
                    ProcessorErrorCode.VALIDATION_FAILED,
                    f"Schema validation failed: {exc}",
                    {"original_error": repr(exc), "raw_data": raw_data, "backend": provider.name},
                ) from exc
            else:
                return self._finish(result, sanitize)

            self._logger.warning(
                "Attempt %d/%d on %s failed validation (%d issues)",
                attempt,
                attempts,
                provider.name,
                len(errors),
            )

        raise ProcessorError(
            ProcessorErrorCode.VALIDATION_FAILED,
            f"Response failed schema validation: {'; '.join(errors)}",
            {
                "validation_errors": errors,
                "raw_data": raw_data,
                "attempts": attempts,
                "backend": provider.name,
            },
        )

    def _resolve_provider(self, provider_name: str | None) -> AIProvider:
        try:
            if provider_name is None:
                return self._registry.get_default_provider()
            return self._registry.require(provider_name)
        except ProviderConfigurationError as exc:
            raise ProcessorError(
                ProcessorErrorCode.CLI_NOT_AVAILABLE,
                str(exc),
                {"provider": provider_name or self._registry.default_provider},
            ) from exc

    @staticmethod
    def _effective_config(provider: AIProvider, override_timeout_ms: int | None) -> ProviderConfig:
        # Per-call copy; the provider's stored config is never touched.
        config = provider.get_config()
        if override_timeout_ms is None:
            return config
        return ProviderConfig.model_validate(
            {**config.model_dump(), "timeout_ms": override_timeout_ms}
        )

    def _finish(self, result: T, sanitize: bool | None) -> T:
        enabled = self._settings.sanitize_output if sanitize is None else sanitize
        if not enabled:
            return result
        return self._sanitizer(result)


__all__ = ["ProcessingOrchestrator", "ProcessorSettings"]
