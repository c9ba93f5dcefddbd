"""Command-line interface for rustgres-schema."""
import argparse
import logging
import sys

from rustgres.config.connection import (
    ConnectionConfigError,
    apply_overrides,
    load_connection_config,
    validate_connection_config,
)
from rustgres.config.generator import GeneratorConfig
from rustgres.core.errors import GenerationError
from rustgres.core.generate import GenerationRequest, generate, parse_table_list
from rustgres.output.writer import format_with_rustfmt, write_outputs
from rustgres.providers import get_provider

logger = logging.getLogger(__name__)


def _get_catalog_provider(args):
    """Create and connect the catalog provider selected by the arguments."""
    if args.from_ddl:
        provider = get_provider('ddl')
        provider.connect({'path': args.from_ddl})
        return provider

    config = load_connection_config(args.conn_file)
    config = apply_overrides(
        config,
        host=args.host,
        port=args.port,
        user=args.username,
        password=args.password,
        database=args.database
    )
    validate_connection_config(config)

    logger.info("Connecting to PostgreSQL database")
    provider = get_provider('postgres')
    provider.connect(config)
    return provider


def _build_request(args) -> GenerationRequest:
    tables = None
    if args.table_file:
        tables = parse_table_list(args.table_file, default_schema=args.schema)
        logger.debug("Table file mappings:")
        for req in tables:
            logger.debug("%s.%s -> %s", req.schema_name, req.table_name, req.output_key)

    return GenerationRequest(
        schema_name=args.schema,
        tables=tables,
        output_directory=args.output_directory,
        output_file=args.output,
        include_views=args.include_views
    )


def run_generate(args) -> int:
    """Execute one generation run.

    Every file is rendered and planned before anything is written, so a
    failing table leaves the output directory untouched.

    Returns:
        Process exit code
    """
    provider = None
    try:
        request = _build_request(args)
        config = GeneratorConfig(use_uuid=args.uuid)

        provider = _get_catalog_provider(args)
        files = generate(request, provider, config)

        if args.dry_run:
            for path in files:
                print(path)
            return 0

        written = write_outputs(files, root=args.root)
        if args.rustfmt:
            format_with_rustfmt(written)

        for path in written:
            print(path)
        return 0

    except (GenerationError, ConnectionConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if provider:
            provider.close()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rustgres-schema",
        description="Generate Rust structs from a PostgreSQL schema",
        epilog="Examples:\n"
               "  Whole schema: rustgres-schema --database app -o schema.rs\n"
               "  Table list:   rustgres-schema --database app --table-file profiles:profiles,users:users\n"
               "  From DDL:     rustgres-schema --from-ddl schema.sql --table-file users:users",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Sets the level of verbosity"
    )
    parser.add_argument(
        "--conn-file",
        help="Path to connection config file (default: ~/.rustgres/postgres.yaml)"
    )
    parser.add_argument("--host", help="Sets the PostgreSQL host (default: localhost)")
    parser.add_argument("--port", type=int, help="Sets the PostgreSQL port (default: 5432)")
    parser.add_argument("--username", help="Sets the PostgreSQL username")
    parser.add_argument("--password", help="Sets the PostgreSQL password")
    parser.add_argument("--database", help="Sets the PostgreSQL database")
    parser.add_argument(
        "--from-ddl", metavar="FILE",
        help="Read table definitions from a DDL file instead of a live database"
    )
    parser.add_argument(
        "-s", "--schema", default="public",
        help="Sets the PostgreSQL schema (default: public)"
    )
    parser.add_argument(
        "-i", "--include-views", action="store_true",
        help="Include PostgreSQL views in the generated schema"
    )
    parser.add_argument(
        "--table-file", action="append",
        help="Map a PostgreSQL table to a specific file. Format: 'table:file'. "
             "To map multiple tables separate with a comma. Example: 'users:users,posts:posts'"
    )
    parser.add_argument(
        "--uuid", action="store_true",
        help="Use uuid::Uuid for columns of type uuid"
    )
    parser.add_argument(
        "-d", "--output-directory", default="src",
        help="Sets the output directory (default: src)"
    )
    parser.add_argument(
        "-o", "--output", default="schema.rs",
        help="Sets the output file (default: schema.rs)"
    )
    parser.add_argument(
        "--root", default=".",
        help="Directory the output paths are relative to (default: current directory)"
    )
    parser.add_argument(
        "--rustfmt", action="store_true",
        help="Run rustfmt on the generated files"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the files that would be written without writing them"
    )
    return parser


def main(argv=None):
    """Parse command line arguments and run the generator."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    sys.exit(run_generate(args))


if __name__ == "__main__":
    main()
