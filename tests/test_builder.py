"""Tests for the schema model builder."""
# pylint: disable=redefined-outer-name
import pytest
from pydantic import ValidationError

from rustgres.core.builder import SchemaModelBuilder
from rustgres.core.errors import CatalogProviderError, TableNotFoundError, UnsupportedTypeError
from rustgres.core.types import TypeMapper


@pytest.fixture
def builder():
    """Builder with the default type mapper."""
    return SchemaModelBuilder()


def test_build_profiles(builder, profiles_rows, provider_factory, request_factory):
    """Test building a table descriptor from catalog rows."""
    provider = provider_factory(profiles_rows)
    model = builder.build([request_factory("profiles")], provider)

    assert len(model.tables) == 1
    table = model.tables[0]
    assert table.schema_name == "public"
    assert table.table_name == "profiles"
    assert table.target_type_name == "Profiles"
    assert table.output_key == "profiles"
    assert [c.name for c in table.columns] == ["id", "bio"]
    assert table.columns[0].target_type.expression == "i32"
    assert table.columns[1].target_type.expression == "Option<String>"


def test_build_uses_single_batch_fetch(builder, profiles_rows, users_rows,
                                       provider_factory, request_factory):
    """Test all requested tables are fetched in one provider call."""
    provider = provider_factory(profiles_rows + users_rows)
    builder.build([request_factory("profiles"), request_factory("users")], provider)

    assert provider.fetch_calls == [[("public", "profiles"), ("public", "users")]]


def test_build_keeps_request_order(builder, profiles_rows, users_rows,
                                   provider_factory, request_factory):
    """Test table order follows the requests, not the provider's result order."""
    provider = provider_factory(profiles_rows + users_rows, reverse=True)
    model = builder.build([request_factory("profiles"), request_factory("users")], provider)

    assert [t.table_name for t in model.tables] == ["profiles", "users"]


def test_build_sorts_columns_by_ordinal(builder, column_factory, provider_factory,
                                        request_factory):
    """Test columns are ordered by ordinal position regardless of row order."""
    rows = [
        column_factory(column_name="c", ordinal_position=3),
        column_factory(column_name="a", ordinal_position=1),
        column_factory(column_name="b", ordinal_position=2),
    ]
    model = builder.build([request_factory()], provider_factory(rows))

    assert [c.name for c in model.tables[0].columns] == ["a", "b", "c"]


def test_build_table_not_found(builder, profiles_rows, provider_factory, request_factory):
    """Test a requested table without rows fails."""
    provider = provider_factory(profiles_rows)
    with pytest.raises(TableNotFoundError) as exc_info:
        builder.build([request_factory("profiles"), request_factory("missing")], provider)

    assert exc_info.value.schema == "public"
    assert exc_info.value.table == "missing"
    assert "public.missing" in str(exc_info.value)


def test_build_unsupported_type_names_column(builder, column_factory, provider_factory,
                                             request_factory):
    """Test an unmapped type aborts the build and names the column."""
    rows = [
        column_factory(column_name="id", ordinal_position=1),
        column_factory(column_name="mood", source_type_name="mood", ordinal_position=2),
    ]
    with pytest.raises(UnsupportedTypeError) as exc_info:
        builder.build([request_factory()], provider_factory(rows))

    error = exc_info.value
    assert error.type_name == "mood"
    assert error.table == "profiles"
    assert error.column == "mood"
    assert "public.profiles.mood" in str(error)


def test_build_resolves_column_collisions(builder, column_factory, provider_factory,
                                          request_factory):
    """Test columns that sanitize alike get distinct names in ordinal order."""
    rows = [
        column_factory(column_name="user-name", source_type_name="text", ordinal_position=2),
        column_factory(column_name="UserName", source_type_name="text", ordinal_position=1),
        column_factory(column_name="user_name", source_type_name="text", ordinal_position=3),
    ]
    table = builder.build([request_factory()], provider_factory(rows)).tables[0]

    assert [c.name for c in table.columns] == ["user_name", "user_name_2", "user_name_3"]
    assert [c.column_name for c in table.columns] == ["UserName", "user-name", "user_name"]
    assert table.columns[0].is_renamed
    assert not table.columns[2].is_renamed


def test_build_output_key_remapping(builder, profiles_rows, provider_factory, request_factory):
    """Test a table can be generated under a different output key."""
    model = builder.build([request_factory("profiles", "user_profiles")],
                          provider_factory(profiles_rows))

    table = model.tables[0]
    assert table.output_key == "user_profiles"
    assert table.target_type_name == "Profiles"


def test_build_unique_type_names(builder, column_factory, provider_factory, request_factory):
    """Test tables whose names sanitize alike get distinct struct names."""
    rows = [
        column_factory(table_name="user_profile"),
        column_factory(table_name="UserProfile"),
    ]
    model = builder.build(
        [request_factory("user_profile"), request_factory("UserProfile", "user_profile_2")],
        provider_factory(rows)
    )

    assert [t.target_type_name for t in model.tables] == ["UserProfile", "UserProfile2"]


def test_build_keeps_default_expression(builder, users_rows, provider_factory, request_factory):
    """Test default expressions are carried as informational metadata."""
    model = builder.build([request_factory("users")], provider_factory(users_rows))

    created_at = model.tables[0].columns[2]
    assert created_at.default_expression == "now()"
    assert created_at.target_type.expression == "DateTime<Utc>"


def test_build_native_uuid(column_factory, provider_factory, request_factory):
    """Test the mapper passed to the builder is used for every column."""
    rows = [column_factory(column_name="id", source_type_name="uuid")]
    builder = SchemaModelBuilder(TypeMapper(use_uuid=True))
    model = builder.build([request_factory()], provider_factory(rows))

    assert model.tables[0].columns[0].target_type.expression == "Uuid"


def test_build_propagates_provider_errors(builder, request_factory):
    """Test catalog failures are not caught or retried by the builder."""
    class FailingProvider:
        calls = 0

        def fetch_columns(self, tables):
            FailingProvider.calls += 1
            raise CatalogProviderError("connection reset")

    with pytest.raises(CatalogProviderError, match="connection reset"):
        builder.build([request_factory()], FailingProvider())
    assert FailingProvider.calls == 1


def test_model_is_read_only(builder, profiles_rows, provider_factory, request_factory):
    """Test the built model cannot be mutated by later stages."""
    model = builder.build([request_factory()], provider_factory(profiles_rows))

    with pytest.raises(ValidationError):
        model.tables[0].target_type_name = "Other"


def test_build_type_names_per_module(column_factory, provider_factory, request_factory):
    """Test struct names are left alone when each table gets its own module."""
    rows = [column_factory(table_name="profiles")]
    builder = SchemaModelBuilder(unique_type_names=False)
    model = builder.build(
        [request_factory("profiles", "a"), request_factory("profiles", "b")],
        provider_factory(rows)
    )

    assert [t.target_type_name for t in model.tables] == ["Profiles", "Profiles"]
    assert [t.output_key for t in model.tables] == ["a", "b"]
