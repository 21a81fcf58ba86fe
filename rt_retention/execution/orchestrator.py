"""Retention execution: discover specs, search, delete, report."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from ..core.errors import SpecParseError
from ..core.models import DeleteDescriptor, DescriptorOutcome, OutcomeState, RunResult
from ..specs.discovery import find_files
from ..specs.parser import parse_spec_file
from ..store.base import ArtifactStore

logger = logging.getLogger(__name__)


class RetentionOrchestrator:
    """Executes every discovered spec, isolating failures per descriptor."""

    def __init__(self, store: ArtifactStore, *, dry_run: bool = False, workers: int = 1) -> None:
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.store = store
        self.dry_run = dry_run
        self.workers = workers

    def process_descriptor(
        self, spec_path: Path, clause_index: int, descriptor: DeleteDescriptor
    ) -> DescriptorOutcome:
        """Search one descriptor and delete what it matches.

        Never raises for store failures; they become the returned outcome.
        """
        label = f"{spec_path} [clause {clause_index}]"
        try:
            with self.store.search(descriptor) as results:
                try:
                    items = list(results)
                except Exception as exc:  # noqa: BLE001
                    return self._failed(spec_path, clause_index, OutcomeState.QUERY_FAILED, exc)

                logger.info(f"{label}: {len(items)} item(s) matched")
                if self.dry_run:
                    for item in items:
                        logger.info(f"    [dry-run] {item.repo}/{item.relative_path}")
                    return DescriptorOutcome(
                        spec_path, OutcomeState.DRY_RUN, clause_index, matched=len(items)
                    )

                try:
                    deleted = self.store.delete(items)
                except Exception as exc:  # noqa: BLE001
                    return self._failed(
                        spec_path, clause_index, OutcomeState.DELETE_FAILED, exc, matched=len(items)
                    )
        except Exception as exc:  # noqa: BLE001
            return self._failed(spec_path, clause_index, OutcomeState.QUERY_FAILED, exc)

        logger.info(f"{label}: deleted {deleted} item(s)")
        return DescriptorOutcome(
            spec_path, OutcomeState.DELETED, clause_index, matched=len(items), deleted=deleted
        )

    def _failed(
        self,
        spec_path: Path,
        clause_index: int,
        state: OutcomeState,
        exc: Exception,
        matched: int = 0,
    ) -> DescriptorOutcome:
        logger.error(f"{spec_path} [clause {clause_index}]: {state.value}: {exc}")
        return DescriptorOutcome(spec_path, state, clause_index, matched=matched, error=str(exc))

    def execute(self, root: Path, recursive: bool = False) -> RunResult:
        """Run retention for every spec file under ``root``.

        Args:
            root: Spec file or directory
            recursive: Discover specs in subdirectories too

        Returns:
            Outcomes in discovery order
        """
        spec_files = find_files(root, recursive=recursive)
        if spec_files:
            logger.info(f"Found {len(spec_files)} spec file(s)")
        else:
            logger.warning(f"Found no spec files under {root}")

        pending: list[DescriptorOutcome | Future[DescriptorOutcome]] = []
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            for spec_path in spec_files:
                try:
                    descriptors = parse_spec_file(spec_path)
                except SpecParseError as exc:
                    logger.error(f"Skipping {spec_path}: {exc.reason}")
                    pending.append(
                        DescriptorOutcome(spec_path, OutcomeState.PARSE_FAILED, error=exc.reason)
                    )
                    continue

                logger.debug(f"{spec_path}: {len(descriptors)} clause(s)")
                for clause_index, descriptor in enumerate(descriptors):
                    pending.append(
                        executor.submit(self.process_descriptor, spec_path, clause_index, descriptor)
                    )

            outcomes = tuple(
                item.result() if isinstance(item, Future) else item for item in pending
            )

        result = RunResult(outcomes)
        logger.info(
            f"Processed {len(outcomes)} descriptor(s): {result.deleted} item(s) deleted, "
            f"{len(result.failures)} failure(s)"
        )
        return result
