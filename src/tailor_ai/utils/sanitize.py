"""Clean up text produced by AI models.

Removes invisible characters, normalizes whitespace and strips markdown that
models add to plain-text fields, while keeping paragraph breaks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

_ZERO_WIDTH = re.compile("[\u200b-\u200f\u2060-\u2064\ufeff]")
_UNUSUAL_SPACES = re.compile("[\u00a0\u1680\u2000-\u200a\u202f\u205f\u3000]")
# C0 and C1 controls except tab, newline and carriage return.
_CONTROL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_CODE_BLOCK = re.compile(r"```[^\n]*\n?(.*?)```", re.DOTALL)
_BOLD = re.compile(r"(\*\*|__)(.+?)\1")
_ITALIC = re.compile(r"(?<![a-zA-Z0-9])([*_])(?!\s)(.+?)(?<!\s)\1(?![a-zA-Z0-9])")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_HEADER = re.compile(r"^#{1,6}\s+", re.MULTILINE)
_STRIKETHROUGH = re.compile(r"~~(.+?)~~")
_BLOCKQUOTE = re.compile(r"^>\s*", re.MULTILINE)
_HORIZONTAL_RULE = re.compile(r"^[-*_]{3,}\s*$", re.MULTILINE)


@dataclass(frozen=True, slots=True)
class SanitizeOptions:
    remove_zero_width: bool = True
    remove_invisible: bool = True
    normalize_spaces: bool = True
    normalize_line_endings: bool = True
    collapse_spaces: bool = True
    normalize_blank_lines: bool = True
    trim_lines: bool = False
    strip_markdown: bool = False
    trim: bool = True


DEFAULT_OPTIONS = SanitizeOptions()
AI_RESPONSE_OPTIONS = replace(DEFAULT_OPTIONS, trim_lines=True, strip_markdown=True)


def strip_markdown(text: str) -> str:
    """Remove markdown formatting, keeping the underlying content."""

    result = _CODE_BLOCK.sub(lambda match: match.group(1).strip(), text)
    result = _BOLD.sub(r"\2", result)
    result = _ITALIC.sub(r"\2", result)
    result = _INLINE_CODE.sub(r"\1", result)
    result = _LINK.sub(r"\1", result)
    result = _HEADER.sub("", result)
    result = _STRIKETHROUGH.sub(r"\1", result)
    result = _BLOCKQUOTE.sub("", result)
    return _HORIZONTAL_RULE.sub("", result)


def sanitize_text(text: str, options: SanitizeOptions = DEFAULT_OPTIONS) -> str:
    result = text
    if options.remove_zero_width:
        result = _ZERO_WIDTH.sub("", result)
    if options.normalize_line_endings:
        result = result.replace("\r\n", "\n").replace("\r", "\n")
    if options.remove_invisible:
        result = _CONTROL_CHARS.sub("", result)
    if options.normalize_spaces:
        result = _UNUSUAL_SPACES.sub(" ", result)
    if options.strip_markdown:
        result = strip_markdown(result)
    if options.collapse_spaces:
        result = re.sub(r"(?<=\S) {2,}", " ", result)
    if options.trim_lines:
        result = "\n".join(line.strip() for line in result.split("\n"))
    if options.normalize_blank_lines:
        result = re.sub(r"\n{3,}", "\n\n", result)
    if options.trim:
        result = result.strip()
    return result


def sanitize_value(value: T, options: SanitizeOptions = DEFAULT_OPTIONS) -> T:
    """Recursively sanitize every string inside ``value``.

    Pydantic models are rebuilt from their sanitized dump so validators run again.
    """

    if isinstance(value, str):
        return sanitize_text(value, options)  # type: ignore[return-value]
    if isinstance(value, BaseModel):
        cleaned = sanitize_value(value.model_dump(by_alias=True), options)
        return type(value).model_validate(cleaned)
    if isinstance(value, dict):
        return {key: sanitize_value(item, options) for key, item in value.items()}  # type: ignore[return-value]
    if isinstance(value, list):
        return [sanitize_value(item, options) for item in value]  # type: ignore[return-value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(item, options) for item in value)  # type: ignore[return-value]
    return value


def sanitize_ai_response(value: Any) -> Any:
    """Sanitize a validated AI result with settings suited to resume content."""

    return sanitize_value(value, AI_RESPONSE_OPTIONS)


__all__ = [
    "AI_RESPONSE_OPTIONS",
    "DEFAULT_OPTIONS",
    "SanitizeOptions",
    "sanitize_ai_response",
    "sanitize_text",
    "sanitize_value",
]
