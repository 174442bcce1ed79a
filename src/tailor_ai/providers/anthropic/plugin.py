"""Backend plugin for the Claude CLI."""

from __future__ import annotations

import json
from typing import Any

from tailor_ai.domain import BackendKind, OutputFormat, ProviderConfig, ProviderRequest
from tailor_ai.providers.base import BackendInvocation, BackendPlugin


class ClaudeEnvelope:
    """``claude --output-format json`` wraps the answer as ``{"type": "result", "result": ...}``."""

    def unwrap(self, value: Any) -> str | None:
        if not isinstance(value, dict):
            return None
        if value.get("type") != "result" or "result" not in value:
            return None
        result = value["result"]
        if isinstance(result, str):
            return result
        return json.dumps(result)

    def unwrap_stream(self, text: str) -> str | None:
        _ = text
        return None


def build_claude_invocation(config: ProviderConfig, request: ProviderRequest) -> BackendInvocation:
    """``claude --print [--output-format json]`` with the prompt on stdin."""

    _ = config
    args = ["--print"]
    if request.output_format is OutputFormat.JSON:
        args.extend(["--output-format", "json"])
    return BackendInvocation(args=tuple(args), stdin_payload=request.prompt)


CLAUDE_PLUGIN = BackendPlugin(
    kind=BackendKind.CLAUDE,
    display_name="Claude",
    default_config=ProviderConfig(timeout_ms=120_000, max_retries=0, executable_path="claude"),
    build_invocation=build_claude_invocation,
    envelope=ClaudeEnvelope(),
)

__all__ = ["CLAUDE_PLUGIN", "ClaudeEnvelope", "build_claude_invocation"]
