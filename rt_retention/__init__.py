"""rt-retention - Retention policy expansion and enforcement for Artifactory.

Policies are expanded into reviewable File Spec documents, which are then
executed against the artifact store. Library users get no log output unless
they configure the ``rt_retention`` logger themselves.
"""

import logging

from .cli import main

__version__ = "0.1.0"
__all__ = ["__version__", "main"]

logging.getLogger(__name__).addHandler(logging.NullHandler())
