"""Rust source rendering for schema models."""
from typing import Iterable, List, Optional, Sequence, Tuple

from rustgres.core.naming import escape_string_literal
from rustgres.models.schema import ColumnDescriptor, OutputUnit, SchemaModel, TableDescriptor

HEADER = (
    "// This file was generated by rustgres-schema",
    "// Do not edit this file directly",
)
SERDE_IMPORT = "serde::{Deserialize, Serialize}"
EXTENSION = "rs"
INDENT = "    "


def assemble(imports: Iterable[str], bodies: Iterable[str]) -> str:
    """Join header, ``use`` lines and bodies into one source file."""
    lines = list(HEADER)

    imports = sorted(set(imports))
    if imports:
        lines.append("")
        lines.extend(f"use {path};" for path in imports)

    for body in bodies:
        if body:
            lines.append("")
            lines.append(body)

    return "\n".join(lines) + "\n"


def _doc_text(text: str) -> str:
    return " ".join(text.split())


class RustRenderer:
    """Renders table descriptors as Rust structs.

    Pure templating over the model: the same model always renders to the
    same bytes.
    """

    def __init__(self, derive_serde: bool = True):
        self.derive_serde = derive_serde

    def table_imports(self, desc: TableDescriptor) -> Tuple[str, ...]:
        """``use`` paths needed by one table's struct."""
        imports = set()
        for col in desc.columns:
            imports.update(col.target_type.imports)
        if self.derive_serde:
            imports.add(SERDE_IMPORT)
        return tuple(sorted(imports))

    def derives(self, desc: TableDescriptor) -> List[str]:
        """Derive list for a struct; ``Eq`` only when every field supports it."""
        derives = ["Debug", "Clone", "PartialEq"]
        if all(col.target_type.supports_eq for col in desc.columns):
            derives.append("Eq")
        if self.derive_serde:
            derives.extend(["Serialize", "Deserialize"])
        return derives

    def render_field(self, col: ColumnDescriptor) -> List[str]:
        lines = []
        if col.default_expression:
            lines.append(f"{INDENT}/// Default: `{_doc_text(col.default_expression)}`")
        if col.is_renamed and self.derive_serde:
            lines.append(
                f'{INDENT}#[serde(rename = "{escape_string_literal(col.column_name)}")]'
            )
        lines.append(f"{INDENT}pub {col.name}: {col.target_type.expression},")
        return lines

    def render_struct(self, desc: TableDescriptor) -> str:
        """Render the struct declaration for one table, fields in ordinal order."""
        lines = [
            f"/// Row of `{_doc_text(desc.qualified_name)}`.",
            f"#[derive({', '.join(self.derives(desc))})]",
            f"pub struct {desc.target_type_name} {{",
        ]
        for col in desc.columns:
            lines.extend(self.render_field(col))
        lines.append("}")
        return "\n".join(lines)

    def render_table(self, desc: TableDescriptor) -> OutputUnit:
        """Render one table as a standalone module file ``<output_key>.rs``."""
        imports = self.table_imports(desc)
        body = self.render_struct(desc)
        return OutputUnit(
            relative_path=f"{desc.output_key}.{EXTENSION}",
            contents=assemble(imports, [body]),
            imports=imports,
            body=body
        )

    def render_tables(self, model: SchemaModel) -> List[Tuple[str, OutputUnit]]:
        """Render every table of a model, paired with its output key."""
        return [(desc.output_key, self.render_table(desc)) for desc in model.tables]

    def render_index(
        self,
        units: Sequence[Tuple[str, OutputUnit]],
        relative_path: str = f"schema.{EXTENSION}"
    ) -> OutputUnit:
        """Render the module index declaring one ``pub mod`` per unit, in order."""
        body = "\n".join(f"pub mod {key};" for key, _ in units)
        return OutputUnit(
            relative_path=relative_path,
            contents=assemble((), [body]),
            body=body
        )


def concatenate_units(
    relative_path: str,
    units: Sequence[OutputUnit],
    index: Optional[OutputUnit] = None
) -> OutputUnit:
    """Merge table units (and an optional index) into one file.

    ``use`` lines are merged so each path is imported once.
    """
    parts = list(units)
    if index is not None:
        parts.append(index)

    imports = sorted({path for unit in parts for path in unit.imports})
    bodies = [unit.body for unit in parts]
    return OutputUnit(
        relative_path=relative_path,
        contents=assemble(imports, bodies),
        imports=tuple(imports),
        body="\n\n".join(body for body in bodies if body)
    )
