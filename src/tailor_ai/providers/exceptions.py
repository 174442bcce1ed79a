"""Provider integration-specific exceptions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tailor_ai.domain import ProviderErrorCode


class ProviderError(RuntimeError):
    """Uniform failure raised or returned by a provider."""

    def __init__(
        self,
        code: ProviderErrorCode,
        backend: str,
        message: str,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.backend = backend
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def __repr__(self) -> str:
        return f"ProviderError(code={self.code.value}, backend={self.backend!r}, message={self.message!r})"


class ParseError(ValueError):
    """Raised when no JSON value could be recovered from backend output."""

    def __init__(self, message: str, preview: str) -> None:
        super().__init__(message)
        self.preview = preview


class ProviderConfigurationError(LookupError):
    """Raised when a registry lookup or selection refers to an unknown provider."""
