"""Catalog and schema model types."""
from rustgres.models.schema import (
    CatalogColumn,
    ColumnDescriptor,
    OutputUnit,
    SchemaModel,
    TableDescriptor,
    TableRequest,
    TargetType,
)

__all__ = [
    'CatalogColumn',
    'ColumnDescriptor',
    'OutputUnit',
    'SchemaModel',
    'TableDescriptor',
    'TableRequest',
    'TargetType',
]
