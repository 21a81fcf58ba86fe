"""Policy configuration loading."""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import ConfigurationError, RenderFailure
from ..core.models import DirectMode, ParentScopedMode, Policy, PolicySet
from ..rendering.engine import TemplateRenderer

logger = logging.getLogger(__name__)


class PolicyDocument(BaseModel):
    """One policy as written in the configuration document."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    template: str = Field(..., min_length=1, description="Template path")
    delete_parent: bool = Field(default=False, alias="deleteParent")
    name_property: str = Field(default="", alias="nameProperty")
    entries: list[dict[str, Any]] = Field(default_factory=list)


def _parse_document(config_path: Path, raw: str) -> Any:
    suffix = config_path.suffix.lower()
    if suffix == ".toml":
        return tomllib.loads(raw)
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(raw)
    return json.loads(raw)


def read_config(config_path: Path) -> dict[str, PolicyDocument]:
    """Read and validate the raw policy configuration document.

    Args:
        config_path: JSON, TOML or YAML policy file

    Returns:
        Mapping of policy name to its validated document
    """
    if not config_path.is_file():
        raise ConfigurationError(f"Config file does not exist: {config_path}")

    try:
        raw = config_path.read_text(encoding="utf-8")
        data = _parse_document(config_path, raw)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Error reading config file {config_path}: {exc}") from exc
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error parsing config file {config_path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must map policy names to policies, "
            f"got {type(data).__name__}"
        )

    documents: dict[str, PolicyDocument] = {}
    for name, body in data.items():
        try:
            documents[str(name)] = PolicyDocument.model_validate(body)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid policy {name!r} in {config_path}: {exc}") from exc
    return documents


def load_policies(config_path: Path, renderer: TemplateRenderer) -> PolicySet:
    """Load a policy set, resolving and compiling every template.

    Args:
        config_path: Policy configuration document
        renderer: Renderer that validates (and caches) each template

    Returns:
        Immutable policy set
    """
    logger.info(f"Parsing config file: {config_path}")
    documents = read_config(config_path)
    base_dir = config_path.parent

    policies: dict[str, Policy] = {}
    for name, document in documents.items():
        template_path = Path(document.template)
        if not template_path.is_absolute():
            template_path = base_dir / template_path

        try:
            template_text = renderer.load(template_path)
        except RenderFailure as exc:
            raise ConfigurationError(f"Policy {name!r}: {exc}") from exc

        policies[name] = Policy(
            name=name,
            template_path=template_path,
            template_text=template_text,
            mode=ParentScopedMode() if document.delete_parent else DirectMode(),
            name_property=document.name_property or None,
            entries=tuple(document.entries),
        )
        logger.debug(
            f"Loaded policy {name}: {len(document.entries)} entr(ies), "
            f"mode={policies[name].mode.kind}"
        )

    logger.info(f"Loaded {len(policies)} polic(ies)")
    return PolicySet(source=config_path, policies=policies)
