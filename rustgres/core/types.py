"""PostgreSQL to Rust type mapping."""
import logging
import re
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from rustgres.core.errors import UnsupportedTypeError
from rustgres.models.schema import TargetType

logger = logging.getLogger(__name__)

_STRING = TargetType(expression="String")

# Canonical catalog type -> Rust type.
# Widths follow the PostgreSQL storage size so every value fits.
_BASE_TYPES: Dict[str, TargetType] = {
    # 2-byte signed
    'smallint': TargetType(expression="i16"),
    # 4-byte signed, full range
    'integer': TargetType(expression="i32"),
    # 8-byte signed
    'bigint': TargetType(expression="i64"),
    # IEEE single / double precision, no total equality
    'real': TargetType(expression="f32", supports_eq=False),
    'double precision': TargetType(expression="f64", supports_eq=False),
    # arbitrary precision, up to 28 significant digits in rust_decimal
    'numeric': TargetType(expression="Decimal", imports=("rust_decimal::Decimal",)),
    'boolean': TargetType(expression="bool"),
    'text': _STRING,
    'date': TargetType(expression="NaiveDate", imports=("chrono::NaiveDate",)),
    'time without time zone': TargetType(
        expression="NaiveTime", imports=("chrono::NaiveTime",)
    ),
    'timestamp without time zone': TargetType(
        expression="NaiveDateTime", imports=("chrono::NaiveDateTime",)
    ),
    'timestamp with time zone': TargetType(
        expression="DateTime<Utc>", imports=("chrono::DateTime", "chrono::Utc")
    ),
    'bytea': TargetType(expression="Vec<u8>"),
    'json': TargetType(expression="Value", imports=("serde_json::Value",)),
    # textual wire representation
    'interval': _STRING,
    'time with time zone': _STRING,
    'bit': _STRING,
    'bit varying': _STRING,
    'money': _STRING,
    'inet': _STRING,
    'cidr': _STRING,
    'macaddr': _STRING,
    'macaddr8': _STRING,
    'point': _STRING,
    'line': _STRING,
    'lseg': _STRING,
    'box': _STRING,
    'path': _STRING,
    'polygon': _STRING,
    'circle': _STRING,
    'pg_lsn': _STRING,
    'xml': _STRING,
}

# Alternate spellings (udt_name, DDL keywords) -> canonical name.
_ALIASES: Dict[str, str] = {
    'int2': 'smallint',
    'smallserial': 'smallint',
    'serial2': 'smallint',
    'int': 'integer',
    'int4': 'integer',
    'serial': 'integer',
    'serial4': 'integer',
    'int8': 'bigint',
    'bigserial': 'bigint',
    'serial8': 'bigint',
    'float4': 'real',
    'float8': 'double precision',
    'float': 'double precision',
    'double': 'double precision',
    'decimal': 'numeric',
    'bool': 'boolean',
    'varchar': 'text',
    'character varying': 'text',
    'character': 'text',
    'char': 'text',
    'bpchar': 'text',
    'name': 'text',
    'citext': 'text',
    'time': 'time without time zone',
    'timestamp': 'timestamp without time zone',
    'timestamptz': 'timestamp with time zone',
    'timetz': 'time with time zone',
    'varbit': 'bit varying',
    'jsonb': 'json',
}

_UUID_NATIVE = TargetType(expression="Uuid", imports=("uuid::Uuid",))

_MODIFIERS = re.compile(r'\([^)]*\)')
_WHITESPACE = re.compile(r'\s+')


def normalize_type_name(source_type_name: str) -> str:
    """Lowercase a catalog type name and drop length/precision modifiers.

    ``VARCHAR(255)`` -> ``varchar``, ``timestamp(3) with time zone`` ->
    ``timestamp with time zone``.
    """
    name = _MODIFIERS.sub('', source_type_name or '')
    return _WHITESPACE.sub(' ', name).strip().lower()


class TypeMapper:
    """Read-only lookup from catalog type names to Rust types.

    The table is built once in the constructor and exposed through a
    ``MappingProxyType``; ``map`` has no other state.
    """

    def __init__(self, use_uuid: bool = False):
        table = dict(_BASE_TYPES)
        table['uuid'] = _UUID_NATIVE if use_uuid else _STRING
        for alias, canonical in _ALIASES.items():
            table[alias] = table[canonical]
        self.use_uuid = use_uuid
        self._table: Mapping[str, TargetType] = MappingProxyType(table)

    @property
    def supported_types(self) -> Tuple[str, ...]:
        return tuple(sorted(self._table))

    def map(self, source_type_name: str, nullable: bool) -> TargetType:
        """Resolve a catalog type to its Rust type.

        Args:
            source_type_name: Raw catalog type, e.g. ``int4`` or ``varchar(40)``
            nullable: Whether the column accepts NULL

        Returns:
            TargetType, wrapped in ``Option<...>`` when nullable

        Raises:
            UnsupportedTypeError: If the type is not in the mapping table
        """
        resolved = self._resolve(source_type_name)
        if not nullable:
            return resolved
        return TargetType(
            expression=f"Option<{resolved.expression}>",
            imports=resolved.imports,
            supports_eq=resolved.supports_eq,
            nullable=True
        )

    def _resolve(self, source_type_name: str) -> TargetType:
        name = normalize_type_name(source_type_name)

        target = self._table.get(name)
        if target is not None:
            return target

        element = None
        if name.endswith('[]'):
            element = name[:-2].strip()
        elif name.startswith('_'):
            # udt_name spells an array of T as _T; a user type named _x that
            # is not an array resolves only if x does, and errors keep _x
            element = name[1:]
        elif name == 'array':
            # information_schema data_type without the element udt
            raise UnsupportedTypeError(source_type_name)

        if element is None:
            logger.debug("No Rust mapping for catalog type %r", source_type_name)
            raise UnsupportedTypeError(source_type_name)

        try:
            inner = self._resolve(element)
        except UnsupportedTypeError as e:
            raise UnsupportedTypeError(source_type_name) from e
        return TargetType(
            expression=f"Vec<{inner.expression}>",
            imports=inner.imports,
            supports_eq=inner.supports_eq
        )
