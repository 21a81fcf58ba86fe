"""Policy expansion into File Spec documents."""

from .direct import expand_direct
from .expander import expand_all
from .naming import output_file_name
from .output import write_spec
from .parent import ParentScopeResolver, group_matches

__all__ = [
    "ParentScopeResolver",
    "expand_all",
    "expand_direct",
    "group_matches",
    "output_file_name",
    "write_spec",
]
