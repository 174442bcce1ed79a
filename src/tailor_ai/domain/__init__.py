"""Domain models and enumerations."""

from .enums import (
    BackendKind,
    OutputFormat,
    ProcessorErrorCode,
    ProviderErrorCode,
    RunState,
)
from .provider import DomainModel, ProviderConfig, ProviderRequest, ProviderStatus

__all__ = [
    "BackendKind",
    "DomainModel",
    "OutputFormat",
    "ProcessorErrorCode",
    "ProviderConfig",
    "ProviderErrorCode",
    "ProviderRequest",
    "ProviderStatus",
    "RunState",
]
