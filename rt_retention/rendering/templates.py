"""Built-in templates shipped with rt-retention."""

from __future__ import annotations

from dataclasses import dataclass

PARENT_REWRITE_TEMPLATE_NAME = "<builtin:parent-rewrite>"

# Matches every item in the container whose path is one of the matched paths.
PARENT_REWRITE_TEMPLATE_TEXT = """\
{
  "files": [
    {
      "aql": {
        "items.find": {
          "repo": {{ container | tojson }},
          "$or": [
{% for path in paths | sort %}
            {"path": {{ path | tojson }}}{{ "," if not loop.last else "" }}
{% endfor %}
          ]
        }
      }
    }
  ]
}
"""


@dataclass(frozen=True)
class TemplateSource:
    name: str
    text: str


def parent_rewrite_template() -> TemplateSource:
    """Return the template rendered against ``{container, paths}`` groups."""
    return TemplateSource(name=PARENT_REWRITE_TEMPLATE_NAME, text=PARENT_REWRITE_TEMPLATE_TEXT)
