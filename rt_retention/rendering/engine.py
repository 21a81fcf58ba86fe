"""Template rendering engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, StrictUndefined, Template, TemplateError, TemplateSyntaxError

from ..core.errors import ConfigurationError, RenderFailure

logger = logging.getLogger(__name__)


def create_environment() -> Environment:
    """Create the Jinja2 environment used for every policy template.

    Missing fields raise instead of rendering as empty strings.
    """
    return Environment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class TemplateRenderer:
    """Compiles templates once and renders them against entry records."""

    def __init__(self, env: Environment | None = None) -> None:
        self._env = env or create_environment()
        self._compiled: dict[tuple[str, str], Template] = {}

    def compile(self, template_name: str, template_text: str) -> Template:
        """Compile a template, reusing an earlier compilation of the same source.

        Args:
            template_name: Name used in error messages
            template_text: Template source

        Returns:
            Compiled Jinja2 template
        """
        key = (template_name, template_text)
        template = self._compiled.get(key)
        if template is None:
            logger.debug(f"Compiling template: {template_name}")
            try:
                template = self._env.from_string(template_text)
            except TemplateSyntaxError as exc:
                raise RenderFailure(
                    template_name, "parse", f"line {exc.lineno}: {exc.message}"
                ) from exc
            self._compiled[key] = template
        return template

    def load(self, template_path: Path) -> str:
        """Read and compile a template file.

        Args:
            template_path: Path to the template file

        Returns:
            The template source text
        """
        if not template_path.is_file():
            raise ConfigurationError(f"Template not found: {template_path}")
        try:
            template_text = template_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Unable to read template {template_path}: {exc}") from exc

        self.compile(str(template_path), template_text)
        return template_text

    def render(
        self, template_name: str, template_text: str, context: Mapping[str, Any]
    ) -> str:
        """Render a template against a single record.

        Args:
            template_name: Name used in error messages
            template_text: Template source
            context: Fields available to the template

        Returns:
            The rendered document
        """
        template = self.compile(template_name, template_text)
        try:
            return template.render(dict(context))
        except TemplateError as exc:
            raise RenderFailure(template_name, "render", str(exc)) from exc
        except Exception as exc:  # noqa: BLE001
            # Filters and expressions run arbitrary Python (e.g. `{{ 1 // a }}`).
            raise RenderFailure(
                template_name, "render", f"{type(exc).__name__}: {exc}"
            ) from exc
