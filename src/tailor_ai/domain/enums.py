"""Enumerations used across the tailor-ai domain layer."""

from __future__ import annotations

from enum import StrEnum


class BackendKind(StrEnum):
    """Identifiers for the supported AI command-line backends."""

    CLAUDE = "claude"
    CODEX = "codex"
    GEMINI = "gemini"


class OutputFormat(StrEnum):
    """Output format requested from a backend."""

    TEXT = "text"
    JSON = "json"


class ProviderErrorCode(StrEnum):
    """Failure codes produced by a provider."""

    PROVIDER_NOT_AVAILABLE = "PROVIDER_NOT_AVAILABLE"
    AUTH_FAILED = "AUTH_FAILED"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INVALID_JSON = "INVALID_JSON"
    RATE_LIMITED = "RATE_LIMITED"


class ProcessorErrorCode(StrEnum):
    """Failure codes surfaced to callers of the processing orchestrator."""

    CLI_NOT_AVAILABLE = "CLI_NOT_AVAILABLE"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PARSE_FAILED = "PARSE_FAILED"
    CANCELLED = "CANCELLED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


class RunState(StrEnum):
    """States of a single subprocess invocation."""

    IDLE = "idle"
    SPAWNING = "spawning"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    SIGNALED = "signaled"
    SPAWN_FAILED = "spawn_failed"
