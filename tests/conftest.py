"""Common test fixtures."""
# pylint: disable=redefined-outer-name
from pathlib import Path
from typing import Dict, List

import pytest

from rustgres.core.types import TypeMapper
from rustgres.models.schema import CatalogColumn, TableRequest
from rustgres.providers.base import CatalogProvider


class FakeProvider(CatalogProvider):
    """In-memory catalog serving canned rows."""

    def __init__(self, rows: List[CatalogColumn], reverse: bool = False):
        self.rows = rows
        self.reverse = reverse
        self.fetch_calls = []
        self.closed = False

    def connect(self, config):
        pass

    def list_tables(self, schema, include_views=False):
        return sorted({r.table_name for r in self.rows if r.schema_name == schema})

    def fetch_columns(self, tables):
        self.fetch_calls.append(list(tables))
        result: Dict = {}
        for row in self.rows:
            key = (row.schema_name, row.table_name)
            if key in tables:
                result.setdefault(key, []).append(row)
        if self.reverse:
            # simulate a provider that returns tables in a different order
            result = dict(reversed(list(result.items())))
        return result

    def close(self):
        self.closed = True


@pytest.fixture
def fixtures_dir():
    """Fixture for the directory containing test data files."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def mapper():
    """Default type mapper."""
    return TypeMapper()


@pytest.fixture
def column_factory():
    """Factory to create CatalogColumn instances for testing."""
    def _make_column(
        schema_name="public",
        table_name="profiles",
        column_name="id",
        source_type_name="int4",
        is_nullable=False,
        ordinal_position=1,
        default_expression=None
    ):
        return CatalogColumn(
            schema_name=schema_name,
            table_name=table_name,
            column_name=column_name,
            source_type_name=source_type_name,
            is_nullable=is_nullable,
            ordinal_position=ordinal_position,
            default_expression=default_expression
        )
    return _make_column


@pytest.fixture
def request_factory():
    """Factory to create TableRequest instances for testing."""
    def _make_request(table_name="profiles", output_key=None, schema_name="public"):
        return TableRequest(
            schema_name=schema_name,
            table_name=table_name,
            output_key=output_key or table_name
        )
    return _make_request


@pytest.fixture
def profiles_rows(column_factory):
    """Rows of the profiles table: id int4 not null, bio text null."""
    return [
        column_factory(column_name="id", source_type_name="int4",
                       is_nullable=False, ordinal_position=1),
        column_factory(column_name="bio", source_type_name="text",
                       is_nullable=True, ordinal_position=2),
    ]


@pytest.fixture
def users_rows(column_factory):
    """Rows of the users table."""
    return [
        column_factory(table_name="users", column_name="id", source_type_name="int8",
                       ordinal_position=1),
        column_factory(table_name="users", column_name="email", source_type_name="varchar",
                       ordinal_position=2),
        column_factory(table_name="users", column_name="created_at",
                       source_type_name="timestamptz", ordinal_position=3,
                       default_expression="now()"),
    ]


@pytest.fixture
def provider_factory():
    """Factory to create FakeProvider instances for testing."""
    def _make_provider(rows, reverse=False):
        return FakeProvider(rows, reverse=reverse)
    return _make_provider
