"""Gemini backend exports."""

from .plugin import GEMINI_PLUGIN, GeminiEnvelope, build_gemini_invocation

__all__ = ["GEMINI_PLUGIN", "GeminiEnvelope", "build_gemini_invocation"]
