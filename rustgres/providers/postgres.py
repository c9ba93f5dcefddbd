"""PostgreSQL catalog provider."""
import logging
from typing import Any, Dict, List, Sequence

import psycopg
from psycopg.rows import dict_row

from rustgres.core.errors import CatalogProviderError
from rustgres.models.schema import CatalogColumn
from rustgres.providers.base import CatalogProvider, TableKey

logger = logging.getLogger(__name__)

TABLES_QUERY = """
SELECT table_name
FROM information_schema.tables
WHERE table_schema = %s
  AND table_type = ANY(%s)
ORDER BY table_name
"""

# udt_name carries the short type name (int4, varchar, _int4 for arrays);
# data_type only says ARRAY / USER-DEFINED for those.
COLUMNS_QUERY = """
SELECT
    table_schema,
    table_name,
    column_name,
    udt_name,
    is_nullable,
    ordinal_position,
    column_default
FROM information_schema.columns
WHERE table_schema = ANY(%s)
  AND table_name = ANY(%s)
ORDER BY table_schema, table_name, ordinal_position
"""


class PostgresProvider(CatalogProvider):
    """Reads column metadata from information_schema over psycopg."""

    def __init__(self):
        """Initialize PostgreSQL provider."""
        self.conn = None

    def connect(self, config: Dict[str, Any]) -> None:
        """Open a read-only session against the database.

        Args:
            config: Connection configuration with keys:
                - host: Server host
                - port: Server port
                - user: Username
                - password: Password
                - database: Database name

        Raises:
            CatalogProviderError: If connection fails
        """
        params = {
            'host': config.get('host'),
            'port': config.get('port'),
            'user': config.get('user'),
            'password': config.get('password'),
            'dbname': config.get('database'),
        }
        params = {k: v for k, v in params.items() if v not in (None, '')}

        try:
            self.conn = psycopg.connect(**params, row_factory=dict_row)
            logger.info("Connected to PostgreSQL database %s", params.get('dbname'))
        except psycopg.Error as e:
            logger.error("Failed to connect to PostgreSQL: %s", e)
            raise CatalogProviderError(f"Failed to connect to PostgreSQL database: {e}") from e

    def list_tables(self, schema: str, include_views: bool = False) -> List[str]:
        """List base tables (and optionally views) in a schema."""
        table_types = ['BASE TABLE']
        if include_views:
            table_types.append('VIEW')

        rows = self._query(TABLES_QUERY, (schema, table_types))
        tables = [row['table_name'] for row in rows]
        logger.info("Found %d tables in schema %s", len(tables), schema)
        return tables

    def fetch_columns(
        self,
        tables: Sequence[TableKey]
    ) -> Dict[TableKey, List[CatalogColumn]]:
        """Fetch column rows for all requested tables in one query."""
        if not tables:
            return {}

        wanted = set(tables)
        schemas = sorted({schema for schema, _ in wanted})
        names = sorted({table for _, table in wanted})

        result: Dict[TableKey, List[CatalogColumn]] = {}
        for row in self._query(COLUMNS_QUERY, (schemas, names)):
            key = (row['table_schema'], row['table_name'])
            # ANY() on both columns matches the cross product
            if key not in wanted:
                continue
            result.setdefault(key, []).append(CatalogColumn(
                schema_name=row['table_schema'],
                table_name=row['table_name'],
                column_name=row['column_name'],
                source_type_name=row['udt_name'],
                is_nullable=(row['is_nullable'] == 'YES'),
                ordinal_position=row['ordinal_position'],
                default_expression=row['column_default']
            ))

        logger.debug("Fetched columns for %d tables", len(result))
        return result

    def _query(self, query: str, params: tuple) -> List[Dict[str, Any]]:
        if not self.conn:
            raise CatalogProviderError("Not connected to PostgreSQL. Call connect() first.")
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()
        except psycopg.Error as e:
            logger.error("Catalog query failed: %s", e)
            raise CatalogProviderError(f"Failed to query catalog: {e}") from e

    def close(self) -> None:
        """Close PostgreSQL connection."""
        if self.conn:
            try:
                self.conn.close()
                logger.info("Closed PostgreSQL connection")
            except psycopg.Error as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self.conn = None
