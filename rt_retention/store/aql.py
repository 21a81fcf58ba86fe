"""AQL query construction from delete descriptors."""

from __future__ import annotations

import json
from typing import Any

from ..core.models import DeleteDescriptor

DEFAULT_INCLUDE = ("repo", "path", "name", "type")


def pattern_criteria(pattern: str, recursive: bool) -> dict[str, Any]:
    """Translate a ``repo/path/name`` wildcard pattern into items.find criteria.

    Args:
        pattern: Wildcard pattern, first segment is the repository
        recursive: Also match below the pattern's directory

    Returns:
        AQL criteria object
    """
    repo, _, rest = pattern.lstrip("/").partition("/")
    if not rest:
        rest = "*"

    if "/" in rest:
        directory, name = rest.rsplit("/", 1)
    else:
        directory, name = ".", rest
    name = name or "*"

    if not recursive:
        return {"repo": repo, "path": {"$match": directory}, "name": {"$match": name}}

    if directory == ".":
        return {"repo": repo, "path": {"$match": "*"}, "name": {"$match": name}}

    return {
        "repo": repo,
        "$or": [
            {"path": {"$match": directory}, "name": {"$match": name}},
            {"path": {"$match": f"{directory}/*"}, "name": {"$match": name}},
        ],
    }


def build_criteria(descriptor: DeleteDescriptor) -> dict[str, Any]:
    if descriptor.aql is not None:
        criteria = dict(descriptor.aql)
    elif descriptor.pattern is not None:
        criteria = pattern_criteria(descriptor.pattern, descriptor.recursive)
    else:
        raise ValueError("Descriptor has neither aql nor pattern")

    if descriptor.props:
        props = {f"@{key}": value for key, value in descriptor.props.items()}
        criteria = {"$and": [criteria, props]}
    return criteria


def build_query(
    descriptor: DeleteDescriptor, include: tuple[str, ...] = DEFAULT_INCLUDE
) -> str:
    """Build the full AQL ``items.find`` query text for a descriptor."""
    fields = list(include)
    for field in descriptor.sort_by:
        if field not in fields:
            fields.append(field)

    query = f"items.find({json.dumps(build_criteria(descriptor))})"
    query += f".include({','.join(json.dumps(field) for field in fields)})"
    if descriptor.sort_by:
        order = f"${descriptor.sort_order or 'asc'}"
        query += f".sort({json.dumps({order: list(descriptor.sort_by)})})"
    if descriptor.offset is not None:
        query += f".offset({descriptor.offset})"
    if descriptor.limit is not None:
        query += f".limit({descriptor.limit})"
    return query
