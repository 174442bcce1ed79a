"""Lightweight application configuration loader."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tailor_ai.domain import BackendKind

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no"}


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: must not be negative", name, raw)
        return default
    return value


@dataclass(frozen=True)
class BackendSettings:
    """Per-backend overrides; ``None`` keeps the backend's built-in default."""

    executable_path: str | None = None
    timeout_ms: int | None = None
    max_retries: int | None = None
    model: str | None = None

    @classmethod
    def from_env(cls, name: str) -> BackendSettings:
        prefix = f"TAILOR_{name.upper()}_"
        return cls(
            executable_path=os.getenv(f"{prefix}PATH") or None,
            timeout_ms=_env_int(f"{prefix}TIMEOUT_MS", None),
            max_retries=_env_int(f"{prefix}MAX_RETRIES", None),
            model=os.getenv(f"{prefix}MODEL") or None,
        )

    def overrides(self) -> dict[str, Any]:
        values = {
            "executable_path": self.executable_path,
            "timeout_ms": self.timeout_ms,
            "max_retries": self.max_retries,
            "model": self.model,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class AppSettings:
    """Immutable configuration sourced from environment variables."""

    environment: str = "development"
    default_provider: str = "claude"
    log_level: str = "INFO"
    max_validation_retries: int = 1
    retry_on_validation_failure: bool = True
    sanitize_output: bool = True
    backends: Mapping[str, BackendSettings] = field(default_factory=dict)

    def backend(self, name: str) -> BackendSettings:
        return self.backends.get(name, BackendSettings())

    @classmethod
    def from_env(cls) -> AppSettings:
        return cls(
            environment=os.getenv("TAILOR_ENV", cls.environment),
            default_provider=os.getenv("TAILOR_DEFAULT_PROVIDER", cls.default_provider),
            log_level=os.getenv("TAILOR_LOG_LEVEL", cls.log_level).upper(),
            max_validation_retries=_env_int(
                "TAILOR_MAX_VALIDATION_RETRIES", cls.max_validation_retries
            ),
            retry_on_validation_failure=_env_bool(
                "TAILOR_RETRY_ON_VALIDATION_FAILURE", cls.retry_on_validation_failure
            ),
            sanitize_output=_env_bool("TAILOR_SANITIZE_OUTPUT", cls.sanitize_output),
            backends={kind.value: BackendSettings.from_env(kind.value) for kind in BackendKind},
        )


__all__ = ["AppSettings", "BackendSettings"]
