"""Utility helpers."""

from .sanitize import sanitize_ai_response, sanitize_text, sanitize_value
from .time import utc_now

__all__ = ["sanitize_ai_response", "sanitize_text", "sanitize_value", "utc_now"]
