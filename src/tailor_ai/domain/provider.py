"""Provider request, configuration and status models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .enums import OutputFormat


class DomainModel(BaseModel):
    """Frozen value object; unknown fields are rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ProviderRequest(DomainModel):
    """A single prompt submission. Immutable and used once."""

    prompt: str
    output_format: OutputFormat = OutputFormat.TEXT


class ProviderConfig(DomainModel):
    """Execution settings owned by one provider instance.

    Instances are frozen: ``update_config`` swaps in a new value and callers
    holding an older instance keep a consistent snapshot.
    """

    timeout_ms: int = Field(default=120_000, ge=0)
    max_retries: int = Field(default=0, ge=0)
    executable_path: str
    model: str | None = None


class ProviderStatus(DomainModel):
    """Availability report for a backend, computed on demand."""

    backend: str
    available: bool
    version: str | None = None
    error: str | None = None
