"""Provider contract and the CLI-backed provider implementation."""

from __future__ import annotations

import asyncio
import logging
import re
import signal
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from tailor_ai.domain import (
    BackendKind,
    OutputFormat,
    ProviderConfig,
    ProviderErrorCode,
    ProviderRequest,
    ProviderStatus,
    RunState,
)
from tailor_ai.runtime import CliExecutionOutcome, CliRuntime

from .discovery import resolve_executable, spawn_env
from .exceptions import ParseError, ProviderError
from .models import ProviderFailure, ProviderResponse, ProviderSuccess
from .parser import Envelope, ResponseParser

RETRYABLE_CODES = frozenset(
    {
        ProviderErrorCode.TIMEOUT,
        ProviderErrorCode.CANCELLED,
        ProviderErrorCode.RATE_LIMITED,
    }
)
BASE_BACKOFF_MS = 1_000
MAX_BACKOFF_MS = 10_000
VERSION_TIMEOUT_MS = 10_000
ERROR_PREVIEW_CHARS = 500

_RATE_LIMIT_PATTERN = re.compile(
    r"429 Too Many Requests|rate limit exceeded|rate_limit_error|RESOURCE_EXHAUSTED"
    r"|quota exceeded|usage limit reached",
    re.IGNORECASE,
)
_AUTH_PATTERN = re.compile(
    r"invalid api key|please run /login|not logged in|authentication_error|401 Unauthorized",
    re.IGNORECASE,
)

Sleeper = Callable[[float], Awaitable[Any]]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BackendInvocation:
    """Arguments (excluding the executable) and stdin for one backend call."""

    args: tuple[str, ...]
    stdin_payload: str | None = None


InvocationBuilder = Callable[[ProviderConfig, ProviderRequest], BackendInvocation]


@dataclass(slots=True, frozen=True)
class BackendPlugin:
    """Declarative description of a backend CLI."""

    kind: BackendKind
    display_name: str
    default_config: ProviderConfig
    build_invocation: InvocationBuilder
    envelope: Envelope | None = None
    version_args: tuple[str, ...] = ("--version",)
    describe_version: Callable[[ProviderConfig], str | None] | None = None


@runtime_checkable
class AIProvider(Protocol):
    """Capability set shared by every provider."""

    @property
    def name(self) -> str: ...

    async def execute(
        self,
        request: ProviderRequest,
        *,
        config: ProviderConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProviderResponse: ...

    async def execute_with_retry(
        self,
        request: ProviderRequest,
        retries: int | None = None,
        *,
        config: ProviderConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProviderResponse: ...

    async def is_available(self) -> bool: ...

    async def get_status(self) -> ProviderStatus: ...

    def get_config(self) -> ProviderConfig: ...

    def update_config(self, **changes: Any) -> ProviderConfig: ...


def backoff_delay_ms(max_retries: int, retries_left: int) -> float:
    """Exponential backoff before the next retry, capped at ten seconds."""

    return min(BASE_BACKOFF_MS * 2 ** (max_retries - retries_left), MAX_BACKOFF_MS)


def classify_exit_failure(stderr: str) -> ProviderErrorCode:
    """Map the stderr of a failed run onto a provider error code.

    Only the messages the CLIs print for throttling and missing credentials
    are recognised; stdout is model output and is never inspected.
    """

    if _RATE_LIMIT_PATTERN.search(stderr):
        return ProviderErrorCode.RATE_LIMITED
    if _AUTH_PATTERN.search(stderr):
        return ProviderErrorCode.AUTH_FAILED
    return ProviderErrorCode.PROVIDER_ERROR


def _signal_name(number: int | None) -> str:
    if number is None:
        return "unknown"
    try:
        return signal.Signals(number).name
    except ValueError:
        return str(number)


class CliProvider:
    """Provider that drives one backend CLI through :class:`CliRuntime`."""

    def __init__(
        self,
        plugin: BackendPlugin,
        *,
        config: ProviderConfig | None = None,
        runtime: CliRuntime | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._plugin = plugin
        self._config = config or plugin.default_config
        self._runtime = runtime or CliRuntime()
        self._parser = ResponseParser(plugin.envelope)
        self._sleep = sleep

    @property
    def name(self) -> str:
        return self._plugin.kind.value

    @property
    def plugin(self) -> BackendPlugin:
        return self._plugin

    def get_config(self) -> ProviderConfig:
        return self._config

    def update_config(self, **changes: Any) -> ProviderConfig:
        """Shallow-merge ``changes`` into the config; the result is re-validated."""

        merged = {**self._config.model_dump(), **changes}
        self._config = ProviderConfig.model_validate(merged)
        return self._config

    async def execute(
        self,
        request: ProviderRequest,
        *,
        config: ProviderConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProviderResponse:
        effective = config or self._config
        invocation = self._plugin.build_invocation(effective, request)
        executable = resolve_executable(effective.executable_path)
        logger.info(
            "Running %s CLI (format=%s, prompt_chars=%d, timeout=%sms)",
            self._plugin.display_name,
            request.output_format.value,
            len(request.prompt),
            effective.timeout_ms,
        )
        outcome = await self._runtime.run(
            [executable, *invocation.args],
            stdin_payload=invocation.stdin_payload,
            timeout_ms=effective.timeout_ms,
            cancel_event=cancel_event,
            env=spawn_env(),
        )
        logger.debug(
            "%s CLI finished: state=%s exit=%s duration=%sms",
            self._plugin.display_name,
            outcome.state.value,
            outcome.exit_code,
            outcome.duration_ms,
        )
        return self._to_response(outcome, request, effective)

    async def execute_with_retry(
        self,
        request: ProviderRequest,
        retries: int | None = None,
        *,
        config: ProviderConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProviderResponse:
        effective = config or self._config
        remaining = effective.max_retries if retries is None else retries
        while True:
            response = await self.execute(request, config=effective, cancel_event=cancel_event)
            if isinstance(response, ProviderSuccess):
                return response
            if response.error.code not in RETRYABLE_CODES or remaining <= 0:
                return response
            if cancel_event is not None and cancel_event.is_set():
                return response
            delay_ms = backoff_delay_ms(effective.max_retries, remaining)
            logger.info(
                "%s failed with %s; retrying in %sms (%d left)",
                self._plugin.display_name,
                response.error.code.value,
                delay_ms,
                remaining,
            )
            await self._sleep(delay_ms / 1000)
            remaining -= 1

    async def is_available(self) -> bool:
        status = await self.get_status()
        return status.available

    async def get_status(self) -> ProviderStatus:
        config = self._config
        outcome = await self._runtime.run(
            [resolve_executable(config.executable_path), *self._plugin.version_args],
            timeout_ms=VERSION_TIMEOUT_MS,
            env=spawn_env(),
        )
        if outcome.state is RunState.SPAWN_FAILED:
            if isinstance(outcome.spawn_error, FileNotFoundError):
                error = f"CLI not found at '{config.executable_path}'"
            else:
                error = str(outcome.spawn_error)
            return ProviderStatus(backend=self.name, available=False, error=error)
        if outcome.state is RunState.TIMED_OUT:
            return ProviderStatus(
                backend=self.name,
                available=False,
                error=f"Version check timed out after {VERSION_TIMEOUT_MS}ms",
            )
        if not outcome.succeeded:
            return ProviderStatus(
                backend=self.name,
                available=False,
                error=f"CLI exited with code {outcome.exit_code}",
            )

        version = outcome.stdout.strip() or None
        if version is None and self._plugin.describe_version is not None:
            version = self._plugin.describe_version(config)
        return ProviderStatus(backend=self.name, available=True, version=version)

    def _failure(
        self,
        code: ProviderErrorCode,
        message: str,
        **details: Any,
    ) -> ProviderFailure:
        return ProviderFailure(ProviderError(code, self.name, message, details))

    def _to_response(
        self,
        outcome: CliExecutionOutcome,
        request: ProviderRequest,
        config: ProviderConfig,
    ) -> ProviderResponse:
        display = self._plugin.display_name

        if outcome.state is RunState.SPAWN_FAILED:
            if isinstance(outcome.spawn_error, FileNotFoundError):
                message = f"{display} CLI not found at '{config.executable_path}'"
            else:
                message = f"Unable to start {display} CLI: {outcome.spawn_error}"
            return self._failure(
                ProviderErrorCode.PROVIDER_NOT_AVAILABLE,
                message,
                executable_path=config.executable_path,
                original_error=str(outcome.spawn_error),
            )

        if outcome.state is RunState.TIMED_OUT:
            return self._failure(
                ProviderErrorCode.TIMEOUT,
                f"{display} CLI timed out after {config.timeout_ms}ms",
                timeout_ms=config.timeout_ms,
            )

        if outcome.state is RunState.SIGNALED:
            if outcome.cancelled:
                message = f"{display} CLI run was cancelled"
            else:
                message = f"Process killed by signal: {_signal_name(outcome.signal)}"
            return self._failure(
                ProviderErrorCode.CANCELLED,
                message,
                signal=outcome.signal,
                cancelled=outcome.cancelled,
            )

        if outcome.exit_code != 0:
            output = outcome.stderr.strip() or outcome.stdout.strip() or "Unknown error"
            code = classify_exit_failure(outcome.stderr)
            return self._failure(
                code,
                f"CLI exited with code {outcome.exit_code}: {output[:ERROR_PREVIEW_CHARS]}",
                exit_code=outcome.exit_code,
                stderr=outcome.stderr[:ERROR_PREVIEW_CHARS],
                stdout=outcome.stdout[:ERROR_PREVIEW_CHARS],
            )

        raw_text = outcome.stdout.strip()
        if request.output_format is not OutputFormat.JSON:
            return ProviderSuccess(raw_text=raw_text)
        try:
            data = self._parser.parse(raw_text)
        except ParseError as exc:
            return self._failure(
                ProviderErrorCode.INVALID_JSON,
                f"Failed to parse JSON: {exc}",
                raw_response=raw_text[:ERROR_PREVIEW_CHARS],
            )
        return ProviderSuccess(raw_text=raw_text, data=data)


__all__ = [
    "AIProvider",
    "BackendInvocation",
    "BackendPlugin",
    "CliProvider",
    "RETRYABLE_CODES",
    "backoff_delay_ms",
    "classify_exit_failure",
]
