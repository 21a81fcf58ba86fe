"""Template rendering."""

from .engine import TemplateRenderer, create_environment
from .templates import TemplateSource, parent_rewrite_template

__all__ = [
    "TemplateRenderer",
    "TemplateSource",
    "create_environment",
    "parent_rewrite_template",
]
