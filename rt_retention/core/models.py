"""Domain models for policies, File Spec clauses and run outcomes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .errors import RetentionRunError


class DirectMode(BaseModel):
    """Entries render straight into the final File Specs."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["direct"] = "direct"


class ParentScopedMode(BaseModel):
    """Entries render into search specs whose matches are rewritten per container."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parent"] = "parent"


PolicyMode = Annotated[DirectMode | ParentScopedMode, Field(discriminator="kind")]


class Policy(BaseModel):
    """A single named retention policy."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Policy name (mapping key)")
    template_path: Path = Field(..., description="Resolved template file path")
    template_text: str = Field(..., description="Raw template source")
    mode: PolicyMode = Field(default_factory=DirectMode)
    name_property: str | None = Field(
        default=None, description="Entry field used to name output files"
    )
    entries: tuple[dict[str, Any], ...] = Field(
        default=(), description="Rendering contexts, in order"
    )

    @property
    def is_parent_scoped(self) -> bool:
        return isinstance(self.mode, ParentScopedMode)


@dataclass(frozen=True)
class PolicySet:
    """Policies keyed by name. Read-only once loaded."""

    source: Path
    policies: Mapping[str, Policy] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "policies", MappingProxyType(dict(self.policies)))

    def __iter__(self):
        return iter(self.policies.values())

    def __len__(self) -> int:
        return len(self.policies)

    @property
    def needs_store(self) -> bool:
        return any(policy.is_parent_scoped for policy in self)


class DeleteDescriptor(BaseModel):
    """Store-agnostic form of one File Spec clause."""

    model_config = ConfigDict(frozen=True)

    aql: dict[str, Any] | None = Field(
        default=None, description="Criteria object passed to items.find"
    )
    pattern: str | None = Field(default=None, description="repo/path/name wildcard")
    props: dict[str, str] = Field(default_factory=dict)
    recursive: bool = True
    sort_by: tuple[str, ...] = ()
    sort_order: Literal["asc", "desc"] | None = None
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)


class ResultItem(BaseModel):
    """A single item returned by a store search."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    repo: str
    path: str
    name: str
    type: str = "file"

    @property
    def relative_path(self) -> str:
        if self.path in ("", "."):
            return self.name
        return f"{self.path}/{self.name}"


@dataclass(frozen=True)
class ContainerPaths:
    """Deduplicated paths matched within one container."""

    container: str
    paths: frozenset[str]


class OutcomeState(str, enum.Enum):
    DELETED = "deleted"
    DRY_RUN = "dry_run"
    QUERY_FAILED = "query_failed"
    DELETE_FAILED = "delete_failed"
    PARSE_FAILED = "parse_failed"


_FAILED_STATES = {
    OutcomeState.QUERY_FAILED,
    OutcomeState.DELETE_FAILED,
    OutcomeState.PARSE_FAILED,
}


@dataclass(frozen=True)
class DescriptorOutcome:
    spec_path: Path
    state: OutcomeState
    clause_index: int | None = None
    matched: int = 0
    deleted: int = 0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.state in _FAILED_STATES

    def describe(self) -> str:
        location = str(self.spec_path)
        if self.clause_index is not None:
            location = f"{location} [clause {self.clause_index}]"
        return f"{location}: {self.state.value}: {self.error}"


@dataclass(frozen=True)
class RunResult:
    """Ordered outcomes of a retention run."""

    outcomes: tuple[DescriptorOutcome, ...] = ()

    @property
    def failures(self) -> list[DescriptorOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def deleted(self) -> int:
        return sum(outcome.deleted for outcome in self.outcomes)

    @property
    def error(self) -> RetentionRunError | None:
        failures = self.failures
        if not failures:
            return None
        return RetentionRunError([outcome.describe() for outcome in failures])
