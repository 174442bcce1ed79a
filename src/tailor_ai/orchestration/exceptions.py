"""Exceptions surfaced by the processing orchestrator."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from tailor_ai.domain import ProcessorErrorCode, ProviderErrorCode
from tailor_ai.providers import ProviderError


class ProcessorError(RuntimeError):
    """Typed failure returned to application code."""

    def __init__(
        self,
        code: ProcessorErrorCode,
        message: str,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def __repr__(self) -> str:
        return f"ProcessorError(code={self.code.value}, message={self.message!r})"


class ShapeValidationError(ValueError):
    """Raised by a shape contract when data does not have the expected structure."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Shape validation failed")


_CODE_MAP = {
    ProviderErrorCode.PROVIDER_NOT_AVAILABLE: ProcessorErrorCode.CLI_NOT_AVAILABLE,
    ProviderErrorCode.AUTH_FAILED: ProcessorErrorCode.CLI_NOT_AVAILABLE,
    ProviderErrorCode.TIMEOUT: ProcessorErrorCode.TIMEOUT,
    ProviderErrorCode.INVALID_JSON: ProcessorErrorCode.PARSE_FAILED,
}


def map_provider_error(error: ProviderError) -> ProcessorError:
    """Translate a provider failure into the processor taxonomy."""

    code = _CODE_MAP.get(error.code, ProcessorErrorCode.EXECUTION_FAILED)
    message = error.message
    if error.code is ProviderErrorCode.RATE_LIMITED:
        message = f"Rate limited: {message}"
    details = {
        **error.details,
        "backend": error.backend,
        "provider_code": error.code.value,
    }
    return ProcessorError(code, message, details)


__all__ = ["ProcessorError", "ShapeValidationError", "map_provider_error"]
