"""Catalog provider backed by CREATE TABLE statements."""
import logging
from typing import Any, Dict, List, Optional, Sequence, Set

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from rustgres.core.errors import CatalogProviderError
from rustgres.core.types import normalize_type_name
from rustgres.models.schema import CatalogColumn
from rustgres.providers.base import CatalogProvider, TableKey

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = 'public'
SERIAL_TYPES = {'smallserial', 'serial', 'bigserial', 'serial2', 'serial4', 'serial8'}


class DdlProvider(CatalogProvider):
    """Serves a DDL script as if it were a live catalog.

    Identifiers follow PostgreSQL rules: unquoted names fold to lowercase,
    quoted names keep their case, a table without a schema lives in
    ``public``.
    """

    def __init__(self, dialect: str = 'postgres'):
        """Initialize DDL provider."""
        self.dialect = dialect
        self.tables: Optional[Dict[TableKey, List[CatalogColumn]]] = None

    def connect(self, config: Dict[str, Any]) -> None:
        """Parse the DDL script.

        Args:
            config: Either ``{'path': <file>}`` or ``{'sql': <text>}``

        Raises:
            CatalogProviderError: If the file cannot be read or parsed
        """
        sql = config.get('sql')
        path = config.get('path')
        if sql is None:
            if not path:
                raise CatalogProviderError("DDL provider requires a 'path' or 'sql' setting")
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    sql = f.read()
            except OSError as e:
                raise CatalogProviderError(f"Error reading DDL file: {path}\n{e}") from e

        self.tables = parse_ddl_to_catalog(sql, dialect=self.dialect)
        logger.info("Loaded %d tables from DDL", len(self.tables))

    def list_tables(self, schema: str, include_views: bool = False) -> List[str]:
        """List tables defined for a schema. DDL scripts carry no views."""
        return sorted(table for s, table in self._catalog() if s == schema)

    def fetch_columns(
        self,
        tables: Sequence[TableKey]
    ) -> Dict[TableKey, List[CatalogColumn]]:
        """Return the parsed rows of every requested table that exists."""
        catalog = self._catalog()
        return {key: list(catalog[key]) for key in tables if key in catalog}

    def _catalog(self) -> Dict[TableKey, List[CatalogColumn]]:
        if self.tables is None:
            raise CatalogProviderError("DDL not loaded. Call connect() first.")
        return self.tables

    def close(self) -> None:
        """Release the parsed catalog."""
        self.tables = None


def parse_ddl_to_catalog(
    ddl_sql: str,
    dialect: str = 'postgres'
) -> Dict[TableKey, List[CatalogColumn]]:
    """Parse CREATE TABLE statements into catalog rows.

    Statements other than CREATE TABLE are skipped. A later CREATE TABLE for
    the same name replaces the earlier one.

    Args:
        ddl_sql: DDL SQL text (one or more statements)
        dialect: SQL dialect for parsing (default: 'postgres')

    Returns:
        Mapping from (schema, table) to column rows, in statement order.

    Raises:
        CatalogProviderError: If the script is not valid SQL
    """
    try:
        statements = sqlglot.parse(ddl_sql, read=dialect)
    except SqlglotError as e:
        raise CatalogProviderError(f"Failed to parse DDL: {e}") from e

    catalog: Dict[TableKey, List[CatalogColumn]] = {}
    for stmt in statements:
        if not isinstance(stmt, exp.Create):
            if stmt is not None:
                logger.debug("Skipping unsupported statement type: %s", type(stmt).__name__)
            continue

        schema_def = stmt.this
        if str(stmt.args.get('kind', '')).upper() != 'TABLE' or not isinstance(schema_def, exp.Schema):
            logger.debug("Skipping CREATE %s statement", stmt.args.get('kind'))
            continue

        key = _table_key(schema_def.this)
        columns = _extract_columns(schema_def, key, dialect)
        if not columns:
            logger.warning("CREATE TABLE %s.%s has no columns", *key)
            continue
        catalog[key] = columns

    return catalog


def _fold(identifier: Optional[exp.Expression]) -> str:
    """Apply PostgreSQL case folding to an identifier."""
    if identifier is None:
        return ''
    if isinstance(identifier, exp.Identifier) and identifier.quoted:
        return identifier.name
    return identifier.name.lower()


def _table_key(table: exp.Table) -> TableKey:
    schema_name = _fold(table.args.get('db')) or DEFAULT_SCHEMA
    return schema_name, _fold(table.this)


def _primary_key_columns(schema_def: exp.Schema) -> Set[str]:
    """Column names named in a table-level PRIMARY KEY (...) clause."""
    names: Set[str] = set()
    for constraint in schema_def.expressions:
        if isinstance(constraint, exp.ColumnDef):
            continue
        # bare PRIMARY KEY (...) or CONSTRAINT name PRIMARY KEY (...)
        for primary_key in constraint.find_all(exp.PrimaryKey):
            names.update(_fold(ident) for ident in primary_key.find_all(exp.Identifier))
    return names


def _extract_columns(
    schema_def: exp.Schema,
    key: TableKey,
    dialect: str
) -> List[CatalogColumn]:
    primary_key = _primary_key_columns(schema_def)
    columns = []

    for col_expr in schema_def.expressions:
        if not isinstance(col_expr, exp.ColumnDef):
            continue

        column_name = _fold(col_expr.this)
        data_type = col_expr.kind.sql(dialect=dialect) if col_expr.kind else 'text'

        is_nullable = column_name not in primary_key
        if normalize_type_name(data_type) in SERIAL_TYPES:
            is_nullable = False

        default_expression = None
        for constraint in col_expr.constraints:
            kind = constraint.kind if isinstance(constraint, exp.ColumnConstraint) else constraint
            if isinstance(kind, exp.NotNullColumnConstraint):
                is_nullable = bool(kind.args.get('allow_null'))
            elif isinstance(kind, exp.PrimaryKeyColumnConstraint):
                is_nullable = False
            elif isinstance(kind, exp.DefaultColumnConstraint):
                default_expression = kind.this.sql(dialect=dialect)

        columns.append(CatalogColumn(
            schema_name=key[0],
            table_name=key[1],
            column_name=column_name,
            source_type_name=data_type.lower(),
            is_nullable=is_nullable,
            ordinal_position=len(columns) + 1,
            default_expression=default_expression
        ))

    return columns
