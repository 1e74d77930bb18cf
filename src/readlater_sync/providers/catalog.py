"""Provider catalog: which providers exist and which are active for a run."""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Mapping

from readlater_sync.models import ProviderConfig
from readlater_sync.providers.base import InteractiveProvider, Provider, TokenProvider
from readlater_sync.providers.sources import INTERACTIVE_SOURCES, TOKEN_SOURCES

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ProviderConfig], Provider]


class ProviderCatalog:
    """Maps provider ids to factories and their persisted configuration.

    Registration order is run order.
    """

    def __init__(self, provider_configs: Mapping[str, ProviderConfig] | None = None):
        self.provider_configs: Mapping[str, ProviderConfig] = (
            provider_configs if provider_configs is not None else {}
        )
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, provider_id: str, factory: ProviderFactory) -> None:
        if provider_id in self._factories:
            raise ValueError(f"Provider already registered: {provider_id}")
        self._factories[provider_id] = factory

    def active_providers(self) -> list[Provider]:
        """One provider per registered id whose config is present and enabled."""
        providers = []
        for provider_id, factory in self._factories.items():
            config = self.provider_configs.get(provider_id)
            if config is None or not config.enabled:
                continue
            providers.append(factory(config))

        unknown = set(self.provider_configs) - set(self._factories)
        for provider_id in sorted(unknown):
            logger.warning("Ignoring settings for unknown provider: %s", provider_id)

        return providers

    def lookup(self, provider_id: str) -> Provider | None:
        """Instantiate one provider whether or not it is enabled."""
        factory = self._factories.get(provider_id)
        if factory is None:
            return None
        config = self.provider_configs.get(provider_id) or ProviderConfig()
        return factory(config)

    def list_all_ids(self) -> list[str]:
        return list(self._factories)


def build_catalog(
    provider_configs: Mapping[str, ProviderConfig],
    headless: bool = True,
) -> ProviderCatalog:
    """Catalog with every built-in source registered."""
    catalog = ProviderCatalog(provider_configs)
    for provider_id, source in INTERACTIVE_SOURCES.items():
        catalog.register(provider_id, partial(InteractiveProvider, source, headless=headless))
    for provider_id, source in TOKEN_SOURCES.items():
        catalog.register(provider_id, partial(TokenProvider, source))
    return catalog
