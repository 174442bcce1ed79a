"""Claude backend exports."""

from .plugin import CLAUDE_PLUGIN, ClaudeEnvelope, build_claude_invocation

__all__ = ["CLAUDE_PLUGIN", "ClaudeEnvelope", "build_claude_invocation"]
