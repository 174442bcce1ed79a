"""Backend plugin for the OpenAI Codex CLI."""

from __future__ import annotations

import json
from typing import Any

from tailor_ai.domain import BackendKind, OutputFormat, ProviderConfig, ProviderRequest
from tailor_ai.providers.base import BackendInvocation, BackendPlugin


class CodexEnvelope:
    """Codex has no result wrapper, but ``--json`` may emit a JSON-lines event stream.

    The final ``agent_message`` of the stream carries the model's answer.
    """

    def unwrap(self, value: Any) -> str | None:
        if isinstance(value, dict):
            return _extract_agent_text([value])
        return None

    def unwrap_stream(self, text: str) -> str | None:
        events = _parse_event_stream(text)
        if not events:
            return None
        return _extract_agent_text(events)


def _parse_event_stream(output: str) -> list[dict[str, Any]]:
    events: list[dict[str, Any]] = []
    for line in output.splitlines():
        candidate = line.strip()
        if not candidate:
            continue
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            events.append(parsed)
    return events


def _extract_agent_text(events: list[dict[str, Any]]) -> str | None:
    for event in reversed(events):
        if event.get("type") != "item.completed":
            continue
        item = event.get("item")
        if not isinstance(item, dict):
            continue
        if item.get("type") != "agent_message":
            continue
        text = item.get("text")
        if isinstance(text, str):
            return text
        content = item.get("content")
        if isinstance(content, list):
            parts = [
                part["text"]
                for part in content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            ]
            if parts:
                return "".join(parts)
    return None


def build_codex_invocation(config: ProviderConfig, request: ProviderRequest) -> BackendInvocation:
    """``codex [--model M] [--json] <prompt>``; the prompt is always the last argument."""

    args: list[str] = []
    if config.model:
        args.extend(["--model", config.model])
    if request.output_format is OutputFormat.JSON:
        args.append("--json")
    args.append(request.prompt)
    return BackendInvocation(args=tuple(args))


CODEX_PLUGIN = BackendPlugin(
    kind=BackendKind.CODEX,
    display_name="Codex",
    default_config=ProviderConfig(
        timeout_ms=120_000,
        max_retries=0,
        executable_path="codex",
        model="o3-mini",
    ),
    build_invocation=build_codex_invocation,
    envelope=CodexEnvelope(),
)

__all__ = ["CODEX_PLUGIN", "CodexEnvelope", "build_codex_invocation"]
