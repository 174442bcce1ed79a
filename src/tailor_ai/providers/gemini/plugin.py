"""Backend plugin for the Gemini CLI."""

from __future__ import annotations

from typing import Any

from tailor_ai.domain import BackendKind, OutputFormat, ProviderConfig, ProviderRequest
from tailor_ai.providers.base import BackendInvocation, BackendPlugin


class GeminiEnvelope:
    """``gemini --output-format json`` reports the answer under ``response`` (older builds: ``result``)."""

    def unwrap(self, value: Any) -> str | None:
        if not isinstance(value, dict):
            return None
        for key in ("response", "result"):
            inner = value.get(key)
            if isinstance(inner, str):
                return inner
        return None

    def unwrap_stream(self, text: str) -> str | None:
        _ = text
        return None


def build_gemini_invocation(config: ProviderConfig, request: ProviderRequest) -> BackendInvocation:
    """``gemini -p <prompt> [-m M] [--output-format json]``."""

    args = ["-p", request.prompt]
    if config.model:
        args.extend(["-m", config.model])
    if request.output_format is OutputFormat.JSON:
        args.extend(["--output-format", "json"])
    return BackendInvocation(args=tuple(args))


def _describe_model(config: ProviderConfig) -> str | None:
    return f"Model: {config.model}" if config.model else None


GEMINI_PLUGIN = BackendPlugin(
    kind=BackendKind.GEMINI,
    display_name="Gemini",
    default_config=ProviderConfig(
        timeout_ms=60_000,
        max_retries=1,
        executable_path="gemini",
        model="gemini-2.5-flash",
    ),
    build_invocation=build_gemini_invocation,
    envelope=GeminiEnvelope(),
    describe_version=_describe_model,
)

__all__ = ["GEMINI_PLUGIN", "GeminiEnvelope", "build_gemini_invocation"]
