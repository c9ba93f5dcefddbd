"""
Identifier sanitization for generated Rust code.

Converts raw catalog identifiers into Rust identifiers: snake_case for
struct fields and module names, PascalCase for struct names. Handles
keyword conflicts and collisions between names that sanitize alike.
"""

import re
from enum import Enum
from typing import Dict, List, Sequence, Set


class IdentifierKind(Enum):
    """Naming convention to apply."""
    TYPE = "type"      # UserProfile
    FIELD = "field"    # user_profile


# Strict and reserved keywords (Rust 2021)
RUST_KEYWORDS = {
    "as", "async", "await", "break", "const", "continue", "crate", "dyn",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "static", "struct", "super", "trait", "true", "type", "unsafe",
    "use", "where", "while",
    "abstract", "become", "box", "do", "final", "gen", "macro", "override",
    "priv", "try", "typeof", "unsized", "virtual", "yield",
}

# Type names a generated struct must not shadow
RUST_RESERVED_TYPES = {
    "Self", "String", "Vec", "Option", "Some", "None", "Result", "Ok", "Err",
    "Box", "Default", "Debug", "Clone", "PartialEq", "Eq",
    "Serialize", "Deserialize", "Value", "Decimal", "Uuid",
    "NaiveDate", "NaiveTime", "NaiveDateTime", "DateTime", "Utc",
}

ESCAPE_SUFFIX = "_"

_INVALID_CHARS = re.compile(r'[^A-Za-z0-9_]')
_ACRONYM_BOUNDARY = re.compile(r'([A-Z]+)([A-Z][a-z])')
_CAMEL_BOUNDARY = re.compile(r'([a-z0-9])([A-Z])')
_UNDERSCORES = re.compile(r'_+')

_FALLBACK = {
    IdentifierKind.TYPE: "Unnamed",
    IdentifierKind.FIELD: "field",
}


def _to_snake_words(raw: str) -> str:
    """Split a raw identifier into lowercase words joined by underscores."""
    name = _INVALID_CHARS.sub('_', raw)
    name = _ACRONYM_BOUNDARY.sub(r'\1_\2', name)
    name = _CAMEL_BOUNDARY.sub(r'\1_\2', name)
    name = _UNDERSCORES.sub('_', name.lower())
    return name.strip('_')


def _to_pascal(snake: str) -> str:
    """Join snake_case words as PascalCase that splits back into the same words.

    A one-letter word is merged with the next word unless that word starts
    with a capital followed by a lowercase letter: ``a_b`` -> ``Ab``, since
    ``AB`` would read back as a single acronym.
    """
    words: List[str] = []
    for part in snake.split('_'):
        if not part:
            continue
        prev = words[-1] if words else ''
        if len(prev) == 1 and prev.isalpha() and not (len(part) > 1 and part[1].islower()):
            words[-1] = prev + part
        else:
            words.append(part[0].upper() + part[1:])
    return ''.join(words)


def sanitize(raw: str, kind: IdentifierKind = IdentifierKind.FIELD) -> str:
    """
    Convert a raw catalog identifier into a valid Rust identifier.

    Args:
        raw: Identifier as reported by the catalog
        kind: TYPE for struct names, FIELD for fields and modules

    Returns:
        Sanitized identifier. ``sanitize(sanitize(x, k), k) == sanitize(x, k)``.
    """
    snake = _to_snake_words(raw or '')

    if kind == IdentifierKind.TYPE:
        name = _to_pascal(snake)
    else:
        name = snake

    if not name:
        name = _FALLBACK[kind]

    if name[0].isdigit():
        name = f"_{name}"

    if _is_reserved(name, kind):
        name = f"{name}{ESCAPE_SUFFIX}"

    return name


def _is_reserved(name: str, kind: IdentifierKind) -> bool:
    if kind == IdentifierKind.TYPE:
        return name in RUST_RESERVED_TYPES
    return name in RUST_KEYWORDS


def _with_suffix(name: str, counter: int, kind: IdentifierKind) -> str:
    if kind == IdentifierKind.TYPE:
        return f"{name}{counter}"
    return f"{name}_{counter}"


def resolve_collisions(
    names: Sequence[str],
    kind: IdentifierKind = IdentifierKind.FIELD
) -> List[str]:
    """
    Make already-sanitized names unique, keeping their order.

    The first occurrence of a name keeps it. Each later occurrence takes the
    smallest suffix ``n >= 2`` whose result is not assigned yet and is not
    the unsuffixed name of another entry (``id``, ``Id`` -> ``id``, ``id_2``).

    Args:
        names: Sanitized names, ordered by ordinal position
        kind: Controls the suffix format (``name_2`` or ``Name2``)

    Returns:
        List of unique names, same length and order as ``names``
    """
    reserved: Set[str] = set(names)
    taken: Set[str] = set()
    result: List[str] = []

    for name in names:
        if name not in taken:
            taken.add(name)
            result.append(name)
            continue

        counter = 2
        candidate = _with_suffix(name, counter, kind)
        while candidate in taken or candidate in reserved:
            counter += 1
            candidate = _with_suffix(name, counter, kind)

        taken.add(candidate)
        result.append(candidate)

    return result


def sanitize_all(
    raw_names: Sequence[str],
    kind: IdentifierKind = IdentifierKind.FIELD
) -> List[str]:
    """Sanitize a list of identifiers and resolve collisions between them."""
    return resolve_collisions([sanitize(raw, kind) for raw in raw_names], kind)


def escape_string_literal(value: str) -> str:
    """Escape text for use inside a Rust string literal."""
    replacements: Dict[str, str] = {
        '\\': '\\\\',
        '"': '\\"',
        '\n': '\\n',
        '\r': '\\r',
        '\t': '\\t',
    }
    return ''.join(replacements.get(ch, ch) for ch in value)
