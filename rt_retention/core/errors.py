"""Error taxonomy for expansion and retention runs."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Sequence


class RetentionError(Exception):
    """Base class for all rt-retention errors."""


class ConfigurationError(RetentionError):
    """Raised for malformed policy documents, missing templates or bad settings."""


class RenderFailure(RetentionError):
    """Raised when a template cannot be parsed or rendered."""

    def __init__(
        self,
        template_name: str,
        stage: Literal["parse", "render"],
        reason: str,
    ) -> None:
        super().__init__(f"Template {template_name!r} failed to {stage}: {reason}")
        self.template_name = template_name
        self.stage = stage
        self.reason = reason


class StoreCommunicationError(RetentionError):
    """Raised when the artifact store rejects or cannot serve a request."""


class DiscoveryError(RetentionError):
    """Raised when the File Spec root cannot be listed."""


class SpecParseError(RetentionError):
    """Raised when a File Spec cannot be parsed into descriptors."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class RetentionRunError(RetentionError):
    """Aggregate error listing every failure recorded during a run."""

    def __init__(self, failures: Sequence[str]) -> None:
        lines = "\n".join(f"  - {failure}" for failure in failures)
        super().__init__(f"Retention run finished with {len(failures)} failure(s):\n{lines}")
        self.failures = list(failures)
