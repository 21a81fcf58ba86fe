"""Parent-scope resolution: search first, then rewrite per container."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from ..core.models import ContainerPaths, DeleteDescriptor, Policy
from ..rendering.engine import TemplateRenderer
from ..rendering.templates import TemplateSource
from ..specs.parser import parse_spec_file
from ..store.base import ArtifactStore
from .naming import output_file_name
from .output import write_spec

logger = logging.getLogger(__name__)


def group_matches(pairs: Iterable[tuple[str, str]]) -> list[ContainerPaths]:
    """Group ``(container, path)`` pairs, deduplicating paths.

    The returned groups have no guaranteed order. Containers without any
    paths never appear.
    """
    grouped: dict[str, set[str]] = {}
    for container, path in pairs:
        grouped.setdefault(container, set()).add(path)
    return [
        ContainerPaths(container=container, paths=frozenset(paths))
        for container, paths in grouped.items()
        if paths
    ]


class ParentScopeResolver:
    """Turns parent-scoped policy entries into per-container deletion specs."""

    def __init__(
        self,
        renderer: TemplateRenderer,
        store: ArtifactStore,
        rewrite_template: TemplateSource,
        scratch_dir: Path,
    ) -> None:
        self.renderer = renderer
        self.store = store
        self.rewrite_template = rewrite_template
        self.scratch_dir = scratch_dir

    def collect_matches(self, descriptors: Iterable[DeleteDescriptor]) -> list[ContainerPaths]:
        """Search every descriptor and group the results by container.

        Store errors propagate; no partial grouping is returned.
        """
        pairs: list[tuple[str, str]] = []
        for descriptor in descriptors:
            with self.store.search(descriptor) as results:
                pairs.extend((item.repo, item.path) for item in results)
        return group_matches(pairs)

    def write_search_spec(self, policy: Policy, file_name: str, entry: Mapping[str, Any]) -> Path:
        rendered = self.renderer.render(str(policy.template_path), policy.template_text, entry)
        return write_spec(self.scratch_dir / policy.name, file_name, rendered)

    def resolve_entry(
        self, policy: Policy, index: int, entry: Mapping[str, Any], output_path: Path
    ) -> list[Path]:
        file_name = output_file_name(policy.name, index, entry, policy.name_property)
        search_spec = self.write_search_spec(policy, file_name, entry)
        descriptors = parse_spec_file(search_spec)

        groups = self.collect_matches(descriptors)
        if not groups:
            logger.info(f"    {policy.name}[{index}]: no matches")

        written: list[Path] = []
        for group in groups:
            rendered = self.renderer.render(
                self.rewrite_template.name,
                self.rewrite_template.text,
                {"container": group.container, "paths": group.paths},
            )
            target = write_spec(output_path / policy.name / group.container, file_name, rendered)
            logger.debug(f"    {group.container}: {len(group.paths)} path(s)")
            written.append(target)
        return written

    def resolve(self, policy: Policy, output_path: Path) -> list[Path]:
        """Resolve every entry of a parent-scoped policy.

        Args:
            policy: Parent-scoped policy
            output_path: Root of the generated spec tree

        Returns:
            Written file paths
        """
        written: list[Path] = []
        for index, entry in enumerate(policy.entries):
            written.extend(self.resolve_entry(policy, index, entry, output_path))
        return written
