"""Writing rendered File Specs into the output tree."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# tempfile creates owner-only files; specs are meant to be shared and reviewed.
SPEC_FILE_MODE = 0o644


def write_spec(directory: Path, file_name: str, text: str) -> Path:
    """Write one rendered File Spec as ``directory/file_name``.

    The spec is staged in a hidden sibling file and renamed into place, so a
    reader sees either the previous file or the complete new one.

    Args:
        directory: Target directory, created if missing
        file_name: Bare file name (see ``output_file_name``)
        text: Rendered spec

    Returns:
        Path of the written spec
    """
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / file_name

    staged: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, prefix=f".{file_name}.", delete=False
        ) as handle:
            staged = Path(handle.name)
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        staged.chmod(SPEC_FILE_MODE)
        staged.replace(target)
    except BaseException:
        if staged is not None:
            staged.unlink(missing_ok=True)
        raise

    logger.debug(f"    wrote {target}")
    return target
