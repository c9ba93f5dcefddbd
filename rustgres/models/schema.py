"""Catalog rows and the normalized schema model."""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CatalogColumn(BaseModel):
    """Raw catalog metadata for one column, as reported by the database."""

    schema_name: str
    table_name: str
    column_name: str
    source_type_name: str
    is_nullable: bool
    ordinal_position: int
    default_expression: Optional[str] = None


class TargetType(BaseModel):
    """Resolved Rust type for a catalog type."""

    model_config = ConfigDict(frozen=True)

    expression: str
    imports: Tuple[str, ...] = ()
    supports_eq: bool = True
    nullable: bool = False


class ColumnDescriptor(BaseModel):
    """A column after type and name resolution."""

    model_config = ConfigDict(frozen=True)

    name: str
    column_name: str
    source_type_name: str
    is_nullable: bool
    ordinal_position: int
    default_expression: Optional[str] = None
    target_type: TargetType

    @property
    def is_renamed(self) -> bool:
        return self.name != self.column_name


class TableDescriptor(BaseModel):
    """A table after type and name resolution, columns in ordinal order."""

    model_config = ConfigDict(frozen=True)

    schema_name: str
    table_name: str
    output_key: str
    target_type_name: str
    columns: Tuple[ColumnDescriptor, ...] = Field(min_length=1)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


class SchemaModel(BaseModel):
    """Ordered collection of tables, in request order."""

    model_config = ConfigDict(frozen=True)

    tables: Tuple[TableDescriptor, ...] = ()


class TableRequest(BaseModel):
    """One requested table and the output key it is generated under."""

    model_config = ConfigDict(frozen=True)

    schema_name: str
    table_name: str
    output_key: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.schema_name, self.table_name)


class OutputUnit(BaseModel):
    """One rendered piece of source text destined for one file."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    contents: str
    imports: Tuple[str, ...] = ()
    body: str = ""
