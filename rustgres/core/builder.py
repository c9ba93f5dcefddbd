"""Schema model construction from raw catalog rows."""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from rustgres.core.errors import TableNotFoundError, UnsupportedTypeError
from rustgres.core.naming import IdentifierKind, resolve_collisions, sanitize, sanitize_all
from rustgres.core.types import TypeMapper
from rustgres.models.schema import (
    CatalogColumn,
    ColumnDescriptor,
    SchemaModel,
    TableDescriptor,
    TableRequest,
)
from rustgres.providers.base import CatalogProvider

logger = logging.getLogger(__name__)


class SchemaModelBuilder:
    """Turns catalog rows into a SchemaModel.

    Every table is built from its own rows only; the final order comes from
    the request list, never from the order the provider returned rows in.
    """

    def __init__(
        self,
        mapper: Optional[TypeMapper] = None,
        unique_type_names: bool = True
    ):
        self.mapper = mapper or TypeMapper()
        # structs share one namespace only when rendered into a single file
        self.unique_type_names = unique_type_names

    def build(
        self,
        requests: Sequence[TableRequest],
        provider: CatalogProvider
    ) -> SchemaModel:
        """Fetch the requested tables and resolve their types and names.

        Args:
            requests: Tables to generate, in output order
            provider: Connected catalog provider

        Returns:
            SchemaModel with one TableDescriptor per request

        Raises:
            TableNotFoundError: If a requested table has no catalog rows
            UnsupportedTypeError: If a column type has no Rust mapping
            CatalogProviderError: Propagated unchanged from the provider
        """
        rows = provider.fetch_columns([req.key for req in requests])
        logger.debug("Fetched columns for %d of %d requested tables", len(rows), len(requests))

        return self.build_from_rows(requests, rows)

    def build_from_rows(
        self,
        requests: Sequence[TableRequest],
        rows: Dict[Tuple[str, str], List[CatalogColumn]]
    ) -> SchemaModel:
        """Build the model from rows already grouped by (schema, table)."""
        tables = []
        for req in requests:
            table_rows = rows.get(req.key)
            if not table_rows:
                raise TableNotFoundError(req.schema_name, req.table_name)
            tables.append(self.build_table(req, table_rows))

        if self.unique_type_names:
            type_names = resolve_collisions(
                [t.target_type_name for t in tables], IdentifierKind.TYPE
            )
            tables = [
                t if t.target_type_name == name
                else t.model_copy(update={'target_type_name': name})
                for t, name in zip(tables, type_names)
            ]

        logger.info("Built schema model with %d tables", len(tables))
        return SchemaModel(tables=tuple(tables))

    def build_table(
        self,
        request: TableRequest,
        rows: Sequence[CatalogColumn]
    ) -> TableDescriptor:
        """Build one table descriptor; fails on the first unmapped column."""
        ordered = sorted(rows, key=lambda r: r.ordinal_position)
        field_names = sanitize_all([r.column_name for r in ordered], IdentifierKind.FIELD)

        columns = []
        for row, field_name in zip(ordered, field_names):
            try:
                target = self.mapper.map(row.source_type_name, row.is_nullable)
            except UnsupportedTypeError as e:
                logger.error(
                    "Column %s.%s.%s has unsupported type %s",
                    request.schema_name, request.table_name, row.column_name,
                    row.source_type_name
                )
                raise e.for_column(
                    request.schema_name, request.table_name, row.column_name
                ) from e

            columns.append(ColumnDescriptor(
                name=field_name,
                column_name=row.column_name,
                source_type_name=row.source_type_name,
                is_nullable=row.is_nullable,
                ordinal_position=row.ordinal_position,
                default_expression=row.default_expression,
                target_type=target
            ))

        logger.debug("Mapped %d columns for %s.%s", len(columns),
                     request.schema_name, request.table_name)

        return TableDescriptor(
            schema_name=request.schema_name,
            table_name=request.table_name,
            output_key=sanitize(request.output_key, IdentifierKind.FIELD),
            target_type_name=sanitize(request.table_name, IdentifierKind.TYPE),
            columns=tuple(columns)
        )

