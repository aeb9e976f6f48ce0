"""CLI commands for the curator."""

import json
import logging
import sys
import uuid
from pathlib import Path

import click
import structlog
import yaml
from pydantic import ValidationError

from curator.config.loader import ConfigLoader
from curator.observability.logging import bind_run_context, configure_logging
from curator.settings import get_settings
from curator.store.errors import StoreError
from curator.store.store import CorpusStore
from curator.taxonomy.audit import CatalogAuditor, format_report
from curator.taxonomy.validator import TaxonomyValidator


logger = structlog.get_logger()

# Exit status when the input files cannot be loaded at all.
EXIT_LOAD_FAILURE = 2

LOAD_ERRORS = (ValidationError, FileNotFoundError, yaml.YAMLError, json.JSONDecodeError)


def _setup_logging(json_logs: bool, verbose: bool, run_id: str) -> None:
    configure_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        json_format=json_logs,
    )
    bind_run_context(run_id)


def _echo_load_errors(loader: ConfigLoader) -> None:
    click.echo("Configuration could not be loaded:", err=True)
    for formatted in loader.format_errors():
        click.echo(f"  - {formatted}", err=True)


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Topic taxonomy, scoring and tier-gated retrieval tools."""


@cli.command("audit-catalog")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the feed catalog (JSON or YAML). Defaults to CURATOR_CATALOG_PATH.",
)
@click.option(
    "--taxonomy",
    "taxonomy_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the taxonomy file. Defaults to CURATOR_TAXONOMY_PATH.",
)
@click.option(
    "--json-report",
    is_flag=True,
    help="Print the report as JSON instead of text.",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Output logs as JSON lines.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging.",
)
def audit_catalog(
    catalog_path: Path | None,
    taxonomy_path: Path | None,
    json_report: bool,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Check every catalog feed's topics against the taxonomy.

    Exits 0 when all topics are valid, 1 when any feed carries an invalid
    topic and 2 when the files cannot be loaded.
    """
    settings = get_settings()
    run_id = str(uuid.uuid4())
    _setup_logging(json_logs, verbose, run_id)

    loader = ConfigLoader(run_id=run_id)
    try:
        config = loader.load(
            taxonomy_path=taxonomy_path or settings.taxonomy_path,
            catalog_path=catalog_path or settings.catalog_path,
        )
    except LOAD_ERRORS:
        _echo_load_errors(loader)
        sys.exit(EXIT_LOAD_FAILURE)

    auditor = CatalogAuditor(TaxonomyValidator(config.build_taxonomy()))
    report = auditor.audit(config.catalog)

    if json_report:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        for line in format_report(report):
            click.echo(line, err=not report.passed)

    sys.exit(report.exit_code)


@cli.command()
@click.option(
    "--taxonomy",
    "taxonomy_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to the taxonomy file.",
)
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to the feed catalog.",
)
@click.option(
    "--policy",
    "policy_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to the scoring and tier policy file.",
)
def validate(
    taxonomy_path: Path,
    catalog_path: Path | None,
    policy_path: Path | None,
) -> None:
    """Validate configuration files without touching the corpus."""
    run_id = str(uuid.uuid4())
    _setup_logging(json_logs=False, verbose=False, run_id=run_id)

    loader = ConfigLoader(run_id=run_id)
    try:
        config = loader.load(
            taxonomy_path=taxonomy_path,
            catalog_path=catalog_path,
            policy_path=policy_path,
        )
    except LOAD_ERRORS:
        _echo_load_errors(loader)
        sys.exit(1)

    click.echo("Configuration is valid!")
    click.echo(f"  Taxonomy version: {config.taxonomy.version}")
    click.echo(f"  Topics: {len(config.taxonomy.topics)}")
    click.echo(f"  Feeds: {len(config.catalog.feeds)} ({len(config.approved_feeds())} approved)")
    click.echo(f"  Checksum: {config.compute_checksum()}")


@cli.command("db-stats")
@click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the SQLite corpus. Defaults to CURATOR_DB_PATH.",
)
@click.option(
    "--prune",
    is_flag=True,
    help="Remove folder memberships that point at purged items.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output as JSON.",
)
def db_stats(db_path: Path | None, prune: bool, json_output: bool) -> None:
    """Display corpus database statistics."""
    configure_logging(level=logging.WARNING, json_format=False)
    path = db_path or get_settings().db_path
    if not path.exists():
        click.echo(f"Error: database not found: {path}", err=True)
        sys.exit(1)

    try:
        with CorpusStore(db_path=path) as store:
            pruned = store.prune_orphan_memberships() if prune else 0
            stats = store.get_stats()
            schema_version = store.get_schema_version()
    except StoreError as e:
        logger.error("db_stats_failed", component="cli", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        output: dict[str, object] = {"schema_version": schema_version, "tables": stats}
        if prune:
            output["pruned_memberships"] = pruned
        click.echo(json.dumps(output, indent=2))
        return

    click.echo("Corpus Database Statistics")
    click.echo("=" * 40)
    click.echo(f"  Schema Version: {schema_version}")
    if prune:
        click.echo(f"  Pruned Memberships: {pruned}")
    click.echo("")
    click.echo("Table Row Counts:")
    for table, count in sorted(stats.items()):
        click.echo(f"  {table}: {count}")


if __name__ == "__main__":
    cli()
