"""Codex backend exports."""

from .plugin import CODEX_PLUGIN, CodexEnvelope, build_codex_invocation

__all__ = ["CODEX_PLUGIN", "CodexEnvelope", "build_codex_invocation"]
