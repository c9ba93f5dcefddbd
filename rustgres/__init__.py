"""rustgres-schema: generate Rust structs from PostgreSQL catalog metadata."""

__version__ = "0.2.0"
