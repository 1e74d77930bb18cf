"""Content providers and the catalog that selects them."""

from readlater_sync.providers.base import (
    InteractiveProvider,
    Provider,
    TokenProvider,
    stamp_articles,
)
from readlater_sync.providers.catalog import ProviderCatalog, build_catalog

__all__ = [
    "InteractiveProvider",
    "Provider",
    "ProviderCatalog",
    "TokenProvider",
    "build_catalog",
    "stamp_articles",
]
