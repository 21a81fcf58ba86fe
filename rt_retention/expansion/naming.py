"""Output file naming for expanded File Specs."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Mapping

from ..core.errors import ConfigurationError

SPEC_EXTENSION = ".json"


def output_file_name(
    policy_name: str, index: int, entry: Mapping[str, Any], name_property: str | None
) -> str:
    """Derive the output file name for one policy entry.

    Uses ``<entry[name_property]>-<index>.json`` when the property is set and
    non-empty on the entry, otherwise ``<policy_name>-<index>.json``. The
    property value must be a plain file name; anything that would place the
    spec outside its policy directory is rejected.
    """
    if name_property:
        value = entry.get(name_property)
        if value is not None and str(value) != "":
            stem = str(value)
            if PurePath(stem).name != stem or stem == ".." or "\\" in stem:
                raise ConfigurationError(
                    f"Policy {policy_name!r} entry {index}: {name_property}={stem!r} "
                    "is not a valid file name"
                )
            return f"{stem}-{index}{SPEC_EXTENSION}"
    return f"{policy_name}-{index}{SPEC_EXTENSION}"
