"""Abstract base class for catalog providers."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

from rustgres.models.schema import CatalogColumn

TableKey = Tuple[str, str]


class CatalogProvider(ABC):
    """Source of raw column metadata.

    Implementations own their connection and raise CatalogProviderError when
    the catalog cannot be read. The generator never retries.
    """

    @abstractmethod
    def connect(self, config: Dict[str, Any]) -> None:
        """Open the catalog.

        Args:
            config: Provider-specific configuration.
                For postgres: {host, port, user, password, database}
                For ddl: {path} or {sql}

        Raises:
            CatalogProviderError: If the catalog cannot be opened
        """

    @abstractmethod
    def list_tables(self, schema: str, include_views: bool = False) -> List[str]:
        """List table names in a schema, sorted by name.

        Args:
            schema: Schema name
            include_views: Also list views

        Returns:
            Table names. Empty list if the schema has no tables.
        """

    @abstractmethod
    def fetch_columns(
        self,
        tables: Sequence[TableKey]
    ) -> Dict[TableKey, List[CatalogColumn]]:
        """Fetch column rows for a batch of tables.

        Args:
            tables: (schema, table) pairs

        Returns:
            Mapping from (schema, table) to its column rows in ordinal order.
            Tables that do not exist are absent from the mapping.
        """

    @abstractmethod
    def close(self) -> None:
        """Close the catalog.

        Should be idempotent (safe to call multiple times).
        """

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
