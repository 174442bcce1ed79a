"""Recover JSON values from raw backend output.

Backends wrap their answers in different ways: plain JSON, a CLI envelope
object holding the model text, markdown code fences, or JSON surrounded by
prose. ``ResponseParser`` walks an ordered ladder of strategies and only the
envelope recognition differs per backend.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

from .exceptions import ParseError

PREVIEW_CHARS = 200
MAX_OBJECT_CANDIDATES = 50

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)


@runtime_checkable
class Envelope(Protocol):
    """Recognizes a backend-specific wrapper around the model's answer."""

    def unwrap(self, value: Any) -> str | None:
        """Return the inner text when ``value`` is this backend's envelope."""
        ...

    def unwrap_stream(self, text: str) -> str | None:
        """Return the inner text when ``text`` is a multi-record event stream."""
        ...


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Bounded prefix of ``text`` for error messages."""

    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def extract_fenced_block(text: str) -> str | None:
    """Return the trimmed content of the first markdown code fence."""

    match = _FENCE_PATTERN.search(text)
    if match is None:
        return None
    content = match.group(1).strip()
    return content or None


def iter_balanced_objects(text: str) -> Iterator[str]:
    """Yield balanced ``{...}`` substrings, starting from each opening brace.

    Brace matching skips over JSON string literals, but this is still a
    heuristic: it can pick the wrong object in text containing several.
    """

    start = text.find("{")
    emitted = 0
    while start != -1 and emitted < MAX_OBJECT_CANDIDATES:
        end = _match_closing_brace(text, start)
        if end is not None:
            emitted += 1
            yield text[start : end + 1]
        start = text.find("{", start + 1)


def _match_closing_brace(text: str, start: int) -> int | None:
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


class ResponseParser:
    """Layered JSON recovery for one backend."""

    def __init__(self, envelope: Envelope | None = None, *, preview_chars: int = PREVIEW_CHARS) -> None:
        self._envelope = envelope
        self._preview_chars = preview_chars

    def parse(self, raw: str) -> Any:
        text = raw.strip()
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            if self._envelope is not None:
                inner = self._envelope.unwrap_stream(text)
                if inner is not None:
                    return self._recover(inner.strip(), try_direct=True)
            return self._recover(text, try_direct=False)

        if self._envelope is not None:
            inner = self._envelope.unwrap(value)
            if inner is not None:
                return self._recover(inner.strip(), try_direct=True)
        return value

    def _recover(self, text: str, *, try_direct: bool) -> Any:
        if try_direct:
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                pass

        fenced = extract_fenced_block(text)
        if fenced is not None:
            try:
                return json.loads(fenced)
            except json.JSONDecodeError:
                pass

        for candidate in iter_balanced_objects(text):
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                continue

        snippet = preview(text, self._preview_chars)
        msg = f"Unable to parse response as JSON: {snippet}"
        raise ParseError(msg, snippet)


__all__ = [
    "Envelope",
    "ResponseParser",
    "extract_fenced_block",
    "iter_balanced_objects",
    "preview",
]
