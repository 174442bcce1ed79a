"""Provider layer public exports."""

from .base import (
    RETRYABLE_CODES,
    AIProvider,
    BackendInvocation,
    BackendPlugin,
    CliProvider,
    backoff_delay_ms,
    classify_exit_failure,
)
from .exceptions import ParseError, ProviderConfigurationError, ProviderError
from .models import ProviderFailure, ProviderResponse, ProviderSuccess
from .parser import Envelope, ResponseParser
from .registry import ProviderRegistry

__all__ = [
    "AIProvider",
    "BackendInvocation",
    "BackendPlugin",
    "CliProvider",
    "Envelope",
    "ParseError",
    "ProviderConfigurationError",
    "ProviderError",
    "ProviderFailure",
    "ProviderRegistry",
    "ProviderResponse",
    "ProviderSuccess",
    "RETRYABLE_CODES",
    "ResponseParser",
    "backoff_delay_ms",
    "classify_exit_failure",
]
