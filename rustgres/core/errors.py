"""Error taxonomy for schema generation."""
from typing import Iterable, Optional


class GenerationError(Exception):
    """Base class for every failure that aborts a generation run."""


class BuildError(GenerationError):
    """Raised while building the schema model."""


class UnsupportedTypeError(BuildError):
    """Raised when a catalog type has no Rust mapping."""

    def __init__(
        self,
        type_name: str,
        schema: Optional[str] = None,
        table: Optional[str] = None,
        column: Optional[str] = None
    ):
        self.type_name = type_name
        self.schema = schema
        self.table = table
        self.column = column
        location = ""
        if table and column:
            location = f" (column {schema}.{table}.{column})"
        super().__init__(f"Unsupported column type '{type_name}'{location}")

    def for_column(self, schema: str, table: str, column: str) -> "UnsupportedTypeError":
        """Return a copy of this error that names the offending column."""
        return UnsupportedTypeError(self.type_name, schema, table, column)


class TableNotFoundError(BuildError):
    """Raised when a requested table has no rows in the catalog."""

    def __init__(self, schema: str, table: str):
        self.schema = schema
        self.table = table
        super().__init__(f"Table not found in catalog: {schema}.{table}")


class PathCollisionError(GenerationError):
    """Raised when two outputs would be written to the same path."""

    def __init__(self, path: str, keys: Iterable[str]):
        self.path = path
        self.keys = tuple(keys)
        super().__init__(
            f"Output path collision: {path} would be written by "
            f"{', '.join(repr(k) for k in self.keys)}"
        )


class CatalogProviderError(GenerationError):
    """Raised by catalog providers when the catalog cannot be read."""


class RequestError(GenerationError, ValueError):
    """Raised when a generation request is malformed."""
