"""Expansion of a policy set into File Specs."""

from __future__ import annotations

import logging
import tempfile
from contextlib import ExitStack
from pathlib import Path

from ..core.errors import ConfigurationError
from ..core.models import DirectMode, PolicySet
from ..rendering.engine import TemplateRenderer
from ..rendering.templates import TemplateSource, parent_rewrite_template
from ..store.base import ArtifactStore
from .direct import expand_direct
from .parent import ParentScopeResolver

logger = logging.getLogger(__name__)


def _open_resolver(
    stack: ExitStack,
    renderer: TemplateRenderer,
    store: ArtifactStore | None,
    rewrite_template: TemplateSource | None,
    search_spec_dir: Path | None,
) -> ParentScopeResolver:
    if store is None:
        raise ConfigurationError("Parent-scoped policies require an artifact store")

    scratch_dir = search_spec_dir
    if scratch_dir is None:
        scratch_dir = Path(
            stack.enter_context(tempfile.TemporaryDirectory(prefix="rt-retention-"))
        )
    return ParentScopeResolver(
        renderer, store, rewrite_template or parent_rewrite_template(), scratch_dir
    )


def expand_all(
    policies: PolicySet,
    output_path: Path,
    renderer: TemplateRenderer,
    *,
    store: ArtifactStore | None = None,
    rewrite_template: TemplateSource | None = None,
    search_spec_dir: Path | None = None,
) -> list[Path]:
    """Expand every policy into ``output_path``.

    Any failure aborts the run.

    Args:
        policies: Loaded policy set
        output_path: Root of the generated spec tree
        renderer: Template renderer shared across policies
        store: Artifact store, required when any policy is parent-scoped
        rewrite_template: Template for parent rewrites (built-in by default)
        search_spec_dir: Keep intermediate search specs here instead of a temp dir

    Returns:
        All written file paths
    """
    logger.info(f"Expanding {len(policies)} polic(ies) into {output_path}")
    written: list[Path] = []

    with ExitStack() as stack:
        resolver: ParentScopeResolver | None = None
        if policies.needs_store:
            resolver = _open_resolver(stack, renderer, store, rewrite_template, search_spec_dir)

        for policy in policies:
            logger.info(f"Expanding {policy.name} ({len(policy.entries)} entr(ies))")
            if isinstance(policy.mode, DirectMode):
                written.extend(expand_direct(policy, renderer, output_path))
            elif resolver is not None:
                written.extend(resolver.resolve(policy, output_path))

    logger.info(f"Wrote {len(written)} spec file(s)")
    return written
