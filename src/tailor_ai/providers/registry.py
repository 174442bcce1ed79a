"""Provider registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from tailor_ai.domain import ProviderConfig, ProviderStatus

from .base import AIProvider
from .exceptions import ProviderConfigurationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderRegistry:
    """Runtime registry mapping provider names to providers.

    Registration order is preserved and drives the availability fallback scan.
    """

    default_provider: str = "claude"
    _providers: dict[str, AIProvider] = field(default_factory=dict)

    def register_provider(self, name: str, provider: AIProvider, *, override: bool = False) -> None:
        if not override and name in self._providers:
            msg = f"Provider {name} already registered"
            raise ValueError(msg)
        self._providers[name] = provider
        logger.debug("Registered provider %s", name)

    def get_provider(self, name: str) -> AIProvider | None:
        return self._providers.get(name)

    def require(self, name: str) -> AIProvider:
        provider = self._providers.get(name)
        if provider is None:
            msg = f"Provider '{name}' not registered. Available: {self.list_providers()}"
            raise ProviderConfigurationError(msg)
        return provider

    def get_default_provider(self) -> AIProvider:
        provider = self._providers.get(self.default_provider)
        if provider is None:
            msg = f"Default provider '{self.default_provider}' not found"
            raise ProviderConfigurationError(msg)
        return provider

    def set_default_provider(self, name: str) -> None:
        if name not in self._providers:
            msg = f"Provider '{name}' not registered"
            raise ProviderConfigurationError(msg)
        self.default_provider = name

    def list_providers(self) -> list[str]:
        return list(self._providers)

    def update_provider_config(self, name: str, **changes: Any) -> ProviderConfig:
        return self.require(name).update_config(**changes)

    async def check_all_availability(self) -> list[ProviderStatus]:
        statuses: list[ProviderStatus] = []
        for provider in self._providers.values():
            statuses.append(await provider.get_status())
        return statuses

    async def get_first_available(self) -> AIProvider | None:
        """Default provider first, then the others in registration order."""

        default = self.get_default_provider()
        if await default.is_available():
            return default

        for name, provider in self._providers.items():
            if name == self.default_provider:
                continue
            if await provider.is_available():
                logger.info(
                    "Default provider %s unavailable; falling back to %s",
                    self.default_provider,
                    name,
                )
                return provider
        logger.warning("No registered provider is available")
        return None


__all__ = ["ProviderRegistry"]
