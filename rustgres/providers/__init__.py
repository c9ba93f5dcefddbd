"""Catalog provider registry and factory."""
import logging
from typing import Dict, List, Type

from rustgres.providers.base import CatalogProvider
from rustgres.providers.ddl import DdlProvider
from rustgres.providers.postgres import PostgresProvider

logger = logging.getLogger(__name__)


class UnsupportedProviderError(ValueError):
    """Raised when an unknown catalog provider is requested."""


# Registry of available catalog providers
# Format: provider kind -> provider class
CATALOG_PROVIDERS: Dict[str, Type[CatalogProvider]] = {
    'postgres': PostgresProvider,
    'ddl': DdlProvider,
}


def get_provider(kind: str) -> CatalogProvider:
    """Get a catalog provider instance by kind.

    Args:
        kind: Provider kind (postgres, ddl)

    Returns:
        CatalogProvider instance, not yet connected

    Raises:
        UnsupportedProviderError: If the kind is not recognized
    """
    kind_lower = kind.lower()

    if kind_lower not in CATALOG_PROVIDERS:
        raise UnsupportedProviderError(
            f"Unsupported catalog provider: '{kind}'. "
            f"Supported types: {', '.join(CATALOG_PROVIDERS.keys())}"
        )

    logger.debug("Creating catalog provider: %s", kind_lower)
    return CATALOG_PROVIDERS[kind_lower]()


def list_providers() -> List[str]:
    """Get list of supported provider kinds."""
    return list(CATALOG_PROVIDERS.keys())


__all__ = [
    'CatalogProvider',
    'DdlProvider',
    'PostgresProvider',
    'UnsupportedProviderError',
    'get_provider',
    'list_providers',
]
