"""Filesystem sink for planned output."""
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Union

from rustgres.core.errors import GenerationError

logger = logging.getLogger(__name__)


class OutputWriteError(GenerationError):
    """Raised when one or more planned files could not be written."""

    def __init__(self, failures: Dict[str, str]):
        self.failures = failures
        details = "\n".join(f"  {path}: {reason}" for path, reason in failures.items())
        super().__init__(f"Failed to write {len(failures)} file(s):\n{details}")


def write_outputs(
    files: Mapping[str, str],
    root: Union[str, Path] = "."
) -> List[Path]:
    """Write every planned file, creating parent directories as needed.

    Every path is attempted; failures are collected and raised together.

    Args:
        files: Mapping from relative path to contents
        root: Directory the relative paths are resolved against

    Returns:
        Paths written, in plan order

    Raises:
        OutputWriteError: If any file could not be written
    """
    root = Path(root)
    written: List[Path] = []
    failures: Dict[str, str] = {}

    for relative_path, contents in files.items():
        target = root / relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding='utf-8')
        except OSError as e:
            logger.error("Failed to write %s: %s", target, e)
            failures[relative_path] = str(e)
            continue
        logger.debug("Wrote %s", target)
        written.append(target)

    if failures:
        raise OutputWriteError(failures)

    logger.info("Wrote %d file(s)", len(written))
    return written


def format_with_rustfmt(paths: Sequence[Path], rustfmt: str = "rustfmt") -> bool:
    """Run rustfmt over generated files.

    Returns:
        True if rustfmt ran on every file, False if it is not installed
        or reported an error.
    """
    executable = shutil.which(rustfmt)
    if executable is None:
        logger.warning("Rustfmt not found, skipping formatting")
        return False

    ok = True
    for path in paths:
        logger.debug("Running rustfmt on %s", path)
        result = subprocess.run(
            [executable, "--edition", "2021", str(path)],
            capture_output=True,
            text=True,
            check=False
        )
        if result.returncode != 0:
            logger.warning("rustfmt failed on %s: %s", path, result.stderr.strip())
            ok = False
    return ok
