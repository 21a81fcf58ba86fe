"""File Spec parsing into delete descriptors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..core.errors import SpecParseError
from ..core.models import DeleteDescriptor

logger = logging.getLogger(__name__)


class SpecClause(BaseModel):
    """One entry of a File Spec ``files`` list."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    aql: dict[str, Any] | None = None
    pattern: str | None = None
    props: str | None = None
    recursive: bool = True
    sort_by: list[str] = Field(default_factory=list, alias="sortBy")
    sort_order: Literal["asc", "desc"] | None = Field(default=None, alias="sortOrder")
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)

    @field_validator("recursive", mode="before")
    @classmethod
    def _parse_recursive(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "false"):
                return lowered == "true"
            raise ValueError(f"recursive must be 'true' or 'false', got {value!r}")
        return value

    @field_validator("aql")
    @classmethod
    def _check_aql(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        if value is not None and not isinstance(value.get("items.find"), dict):
            raise ValueError("aql must contain an 'items.find' object")
        return value

    @model_validator(mode="after")
    def _check_query(self) -> SpecClause:
        if (self.aql is None) == (self.pattern is None):
            raise ValueError("exactly one of 'aql' or 'pattern' is required")
        if self.pattern is not None and not self.pattern.strip("/"):
            raise ValueError("pattern must name a repository")
        if self.sort_order is not None and not self.sort_by:
            raise ValueError("sortOrder requires sortBy")
        return self

    def to_descriptor(self) -> DeleteDescriptor:
        return DeleteDescriptor(
            aql=self.aql["items.find"] if self.aql is not None else None,
            pattern=self.pattern,
            props=parse_props(self.props or ""),
            recursive=self.recursive,
            sort_by=tuple(self.sort_by),
            sort_order=self.sort_order,
            offset=self.offset,
            limit=self.limit,
        )


class SpecDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    files: list[SpecClause]


def parse_props(value: str) -> dict[str, str]:
    """Parse ``key=value;key2=value2`` property filters."""
    props: dict[str, str] = {}
    for pair in value.split(";"):
        pair = pair.strip()
        if not pair:
            continue
        if "=" not in pair:
            raise ValueError(f"property filter must be key=value, got {pair!r}")
        key, prop_value = pair.split("=", 1)
        props[key.strip()] = prop_value.strip()
    return props


def parse_spec_text(text: str, source: Path) -> list[DeleteDescriptor]:
    """Parse File Spec text into descriptors, one per clause.

    Args:
        text: JSON File Spec document
        source: Path reported in errors

    Returns:
        Descriptors in clause order
    """
    try:
        document = SpecDocument.model_validate_json(text)
        return [clause.to_descriptor() for clause in document.files]
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        )
        raise SpecParseError(source, errors) from exc
    except ValueError as exc:
        raise SpecParseError(source, str(exc)) from exc


def parse_spec_file(path: Path) -> list[DeleteDescriptor]:
    """Read and parse a File Spec document."""
    logger.debug(f"Parsing spec file: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(path, f"unable to read file: {exc}") from exc
    return parse_spec_text(text, path)

