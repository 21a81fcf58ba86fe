"""Artifact store interface consumed by expansion and execution."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterator, Protocol, Sequence

from ..core.models import DeleteDescriptor, ResultItem


class ArtifactStore(Protocol):
    def search(
        self, descriptor: DeleteDescriptor
    ) -> AbstractContextManager[Iterator[ResultItem]]:
        """Open a result set for ``descriptor``.

        The yielded iterator is lazy and cannot be restarted; the handle is
        released when the context exits.
        """
        ...

    def delete(self, items: Sequence[ResultItem]) -> int:
        """Delete ``items`` and return how many were removed."""
        ...
