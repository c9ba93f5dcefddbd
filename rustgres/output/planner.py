"""Output layout planning: which rendered text goes to which path."""
import logging
import posixpath
from typing import Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from rustgres.core.errors import PathCollisionError
from rustgres.models.schema import OutputUnit
from rustgres.output.rust import concatenate_units

logger = logging.getLogger(__name__)


class SingleFileMode(BaseModel):
    """All table structs in one file, no per-table modules."""

    model_config = ConfigDict(frozen=True)

    path: str


class DirectoryMode(BaseModel):
    """One file per table plus an index declaring each as a module.

    ``src`` + ``schema.rs`` -> ``src/schema.rs`` and ``src/schema/<key>.rs``.
    """

    model_config = ConfigDict(frozen=True)

    base_path: str
    index_file_name: str

    @property
    def index_path(self) -> str:
        return posixpath.join(self.base_path, self.index_file_name)

    @property
    def module_dir(self) -> str:
        stem, _ = posixpath.splitext(self.index_file_name)
        return posixpath.join(self.base_path, stem)


OutputMode = Union[SingleFileMode, DirectoryMode]


def plan(
    mode: OutputMode,
    units: Sequence[Tuple[str, OutputUnit]],
    index_unit: Optional[OutputUnit] = None
) -> Dict[str, str]:
    """Map rendered units to output paths.

    Args:
        mode: SingleFileMode or DirectoryMode
        units: (output_key, unit) pairs in request order
        index_unit: Module index; required content in DirectoryMode

    Returns:
        Insertion-ordered mapping from path to file contents

    Raises:
        PathCollisionError: If two outputs resolve to the same path
    """
    if isinstance(mode, SingleFileMode):
        merged = concatenate_units(mode.path, [unit for _, unit in units], index_unit)
        logger.debug("Planned %d tables into %s", len(units), mode.path)
        return {posixpath.normpath(mode.path): merged.contents}

    entries: List[Tuple[str, str, str]] = []
    if index_unit is not None:
        entries.append((mode.index_path, mode.index_file_name, index_unit.contents))
    for key, unit in units:
        entries.append((posixpath.join(mode.module_dir, unit.relative_path), key, unit.contents))

    files: Dict[str, str] = {}
    owners: Dict[str, str] = {}
    for path, owner, contents in entries:
        path = posixpath.normpath(path)
        folded = path.casefold()
        if folded in owners:
            raise PathCollisionError(path, [owners[folded], owner])
        owners[folded] = owner
        files[path] = contents

    _check_file_dir_conflicts(owners)

    logger.debug("Planned %d files under %s", len(files), mode.base_path)
    return files


def _check_file_dir_conflicts(owners: Dict[str, str]) -> None:
    """Reject a planned file whose path is also a parent directory of another."""
    for path, owner in owners.items():
        parent = posixpath.dirname(path)
        while parent and parent not in ('.', '/'):
            if parent in owners:
                raise PathCollisionError(parent, [owners[parent], owner])
            parent = posixpath.dirname(parent)
