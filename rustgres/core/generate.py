"""Generation run orchestration: requests -> model -> rendered files."""
import logging
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel

from rustgres.config.generator import GeneratorConfig
from rustgres.core.builder import SchemaModelBuilder
from rustgres.core.errors import RequestError
from rustgres.core.types import TypeMapper
from rustgres.models.schema import TableRequest
from rustgres.output.planner import DirectoryMode, OutputMode, SingleFileMode, plan
from rustgres.output.rust import RustRenderer
from rustgres.providers.base import CatalogProvider

logger = logging.getLogger(__name__)


class GenerationRequest(BaseModel):
    """What to generate and where.

    ``tables=None`` means the whole schema into one file; an explicit table
    list produces an index file plus one file per table.
    """

    schema_name: str = 'public'
    tables: Optional[List[TableRequest]] = None
    output_directory: str = 'src'
    output_file: str = 'schema.rs'
    include_views: bool = False

    @property
    def whole_schema(self) -> bool:
        return self.tables is None

    def output_mode(self) -> OutputMode:
        if self.whole_schema:
            return SingleFileMode(path=f"{self.output_directory}/{self.output_file}")
        return DirectoryMode(base_path=self.output_directory, index_file_name=self.output_file)


def parse_table_list(
    specs: Union[str, Iterable[str]],
    default_schema: str = 'public'
) -> List[TableRequest]:
    """Parse ``table:key`` mappings into ordered table requests.

    Supports:
    - ``profiles:profiles,users:users`` (comma-separated)
    - repeated arguments, each holding one or more mappings
    - ``schema.table:key`` for a table outside the default schema

    Raises:
        RequestError: If an entry is not in ``table:key`` form
    """
    if isinstance(specs, str):
        specs = [specs]

    requests = []
    for spec in specs:
        for entry in spec.split(','):
            entry = entry.strip()
            if not entry:
                continue

            parts = [p.strip() for p in entry.split(':')]
            if len(parts) != 2 or not all(parts):
                raise RequestError(
                    f"Invalid table mapping '{entry}'. "
                    f"Please provide a table file mapping in the format 'table:file'"
                )

            source, output_key = parts
            schema_name, _, table_name = source.rpartition('.')
            requests.append(TableRequest(
                schema_name=schema_name or default_schema,
                table_name=table_name,
                output_key=output_key
            ))

    return requests


def resolve_requests(
    request: GenerationRequest,
    provider: CatalogProvider
) -> List[TableRequest]:
    """Expand a whole-schema request into one TableRequest per table."""
    if not request.whole_schema:
        return list(request.tables)

    tables = provider.list_tables(request.schema_name, include_views=request.include_views)
    if not tables:
        logger.warning("No tables found in schema %s", request.schema_name)
    return [
        TableRequest(schema_name=request.schema_name, table_name=t, output_key=t)
        for t in tables
    ]


def generate(
    request: GenerationRequest,
    provider: CatalogProvider,
    config: Optional[GeneratorConfig] = None
) -> Dict[str, str]:
    """Run the full pipeline and return the planned files.

    Nothing is written here; the caller hands the result to the filesystem
    sink only after every stage succeeded.

    Args:
        request: Generation request
        provider: Connected catalog provider
        config: Code generation options

    Returns:
        Mapping from relative path to file contents
    """
    config = config or GeneratorConfig()

    table_requests = resolve_requests(request, provider)
    for req in table_requests:
        logger.info("Generating schema for table %s.%s", req.schema_name, req.table_name)

    builder = SchemaModelBuilder(
        TypeMapper(use_uuid=config.use_uuid),
        unique_type_names=request.whole_schema
    )
    model = builder.build(table_requests, provider)

    renderer = RustRenderer(derive_serde=config.derive_serde)
    units = renderer.render_tables(model)

    index_unit = None
    if not request.whole_schema:
        index_unit = renderer.render_index(units, relative_path=request.output_file)

    return plan(request.output_mode(), units, index_unit)
