"""Direct expansion: one rendered spec per policy entry."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.models import Policy
from ..rendering.engine import TemplateRenderer
from .naming import output_file_name
from .output import write_spec

logger = logging.getLogger(__name__)


def expand_direct(policy: Policy, renderer: TemplateRenderer, output_path: Path) -> list[Path]:
    """Render every entry of ``policy`` into ``<output_path>/<policy>/``.

    Args:
        policy: Non parent-scoped policy
        renderer: Template renderer
        output_path: Root of the generated spec tree

    Returns:
        Written file paths, in entry order
    """
    policy_dir = output_path / policy.name
    logger.debug(f"Direct expansion of {policy.name} into {policy_dir}")
    written: list[Path] = []

    for index, entry in enumerate(policy.entries):
        file_name = output_file_name(policy.name, index, entry, policy.name_property)
        rendered = renderer.render(str(policy.template_path), policy.template_text, entry)
        written.append(write_spec(policy_dir, file_name, rendered))

    return written
