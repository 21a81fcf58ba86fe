"""Artifact store access."""

from .artifactory import ArtifactoryClient, TransientStoreError
from .base import ArtifactStore

__all__ = ["ArtifactStore", "ArtifactoryClient", "TransientStoreError"]
