"""Shared models for provider integrations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias

from .exceptions import ProviderError


@dataclass(slots=True, frozen=True)
class ProviderSuccess:
    """Successful provider execution.

    ``data`` is only populated for JSON requests whose output was parsed.
    """

    success: ClassVar[bool] = True

    raw_text: str
    data: Any = None


@dataclass(slots=True, frozen=True)
class ProviderFailure:
    """Failed provider execution carrying a uniform error."""

    success: ClassVar[bool] = False

    error: ProviderError


ProviderResponse: TypeAlias = ProviderSuccess | ProviderFailure


__all__ = ["ProviderFailure", "ProviderResponse", "ProviderSuccess"]
