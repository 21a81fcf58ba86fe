"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from ..core.errors import RetentionError
from ..execution.orchestrator import RetentionOrchestrator
from ..expansion.expander import expand_all
from ..policies.loader import load_policies
from ..rendering.engine import TemplateRenderer
from ..rendering.templates import parent_rewrite_template
from ..settings import Settings
from ..store.artifactory import ArtifactoryClient
from .parsers import parse_config_path, parse_workers

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="rt-retention",
    help="Enforce retention policies on Artifactory.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def create_store(settings: Settings) -> ArtifactoryClient:
    """Build the Artifactory client from environment settings."""
    logger.info("Configuring Artifactory client")
    return ArtifactoryClient.from_settings(settings)


@app.command()
def expand(
    config_path: Annotated[
        Path,
        typer.Argument(
            help="Policy configuration file (JSON, TOML or YAML).",
            parser=parse_config_path,
            metavar="CONFIG_PATH",
        ),
    ],
    output_path: Annotated[
        Path,
        typer.Argument(help="Directory to write the generated File Specs to."),
    ],
    search_spec_dir: Annotated[
        Path | None,
        typer.Option(
            "--search-spec-dir",
            help="Keep intermediate search specs of delete-parent policies in DIR.",
            metavar="DIR",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Expand retention policies into File Specs."""
    _configure_logging(verbose)

    logger.debug(f"config_path: {config_path}")
    logger.debug(f"output_path: {output_path}")
    logger.debug(f"search_spec_dir: {search_spec_dir}")

    renderer = TemplateRenderer()
    try:
        policies = load_policies(config_path, renderer)
        if policies.needs_store:
            with create_store(Settings()) as store:
                expand_all(
                    policies,
                    output_path,
                    renderer,
                    store=store,
                    rewrite_template=parent_rewrite_template(),
                    search_spec_dir=search_spec_dir,
                )
        else:
            expand_all(policies, output_path, renderer)
    except RetentionError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        logger.error(f"Unable to write specs: {exc}")
        raise typer.Exit(code=1) from exc

    logger.info("Done")


@app.command()
def run(
    spec_path: Annotated[
        Path,
        typer.Argument(help="File Spec file, or directory of File Specs."),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Search only; do not delete anything."),
    ] = False,
    recursive: Annotated[
        bool,
        typer.Option("--recursive", help="Find File Specs in subdirectories too."),
    ] = False,
    workers: Annotated[
        int,
        typer.Option(
            "--workers",
            help="Number of descriptors processed concurrently.",
            callback=parse_workers,
        ),
    ] = 3,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Run retention using the given File Specs."""
    _configure_logging(verbose)

    logger.debug(f"spec_path: {spec_path}")
    logger.debug(f"dry_run: {dry_run}, recursive: {recursive}, workers: {workers}")

    try:
        with create_store(Settings()) as store:
            orchestrator = RetentionOrchestrator(store, dry_run=dry_run, workers=workers)
            result = orchestrator.execute(spec_path, recursive=recursive)
    except RetentionError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc

    error = result.error
    if error is not None:
        logger.error(str(error))
        raise typer.Exit(code=1)

    logger.info("Done")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
