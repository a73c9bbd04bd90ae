"""Folio CLI - build and inspect a front-matter content corpus."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from folio.config import AppConfig, load_config
from folio.errors import FolioError, ParseError, ValidationError

EXIT_CODES = {"success": 0, "partial": 1, "fatal": 2}


def _load(config_path: str | None) -> AppConfig:
    try:
        return load_config(config_path)
    except Exception as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        raise click.Abort()


def _setup_logging(cfg: AppConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, cfg.logging.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
def cli():
    """Folio CLI - build and inspect a front-matter content corpus."""
    pass


@cli.command()
@click.option("--config", "-c", default=None, help="Configuration file path")
@click.option("--force-rebuild", is_flag=True, help="Re-parse every source")
@click.option("--no-emit", is_flag=True, help="Skip writing output")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def build(config: str | None, force_rebuild: bool, no_emit: bool, verbose: bool):
    """Build the corpus incrementally and emit output.

    Exit status is 0 on success, 1 if some documents failed, 2 if the pass
    was aborted.
    """
    from folio.pipeline.pipeline import PublicationPipeline

    cfg = _load(config)
    _setup_logging(cfg, verbose)
    pipeline = PublicationPipeline(config=cfg, base_dir=Path.cwd())

    try:
        report = pipeline.build(force_rebuild=force_rebuild, emit=not no_emit)
    except (OSError, FolioError) as e:
        click.echo(f"✗ Build failed: {e}", err=True)
        raise click.Abort()

    click.echo(f"Sources: {report.total}")
    click.echo(f"  Parsed: {report.parsed}")
    click.echo(f"  Upserted: {report.upserted}")
    click.echo(f"  Skipped: {report.skipped}")
    click.echo(f"  Removed: {report.removed}")

    if report.failures:
        click.echo(f"  Failures: {len(report.failures)}")
        for failure in report.failures:
            suffix = " (unchanged since last build)" if failure.carried else ""
            click.echo(f"    - {failure.describe()}{suffix}")

    if report.error:
        click.echo(f"✗ Build aborted: {report.error}", err=True)
    else:
        click.echo(f"✓ Build {report.status.value}")

    sys.exit(EXIT_CODES[report.status.value])


@cli.command()
@click.option("--config", "-c", default=None, help="Configuration file path")
def validate(config: str | None):
    """Validate configuration file."""
    cfg = _load(config)

    click.echo("✓ Configuration is valid")
    click.echo(f"  Content roots: {cfg.content.roots}")
    click.echo(f"  File extensions: {cfg.content.file_extensions}")
    click.echo(f"  State path: {cfg.build.state_path}")
    click.echo(f"  Output dir: {cfg.output.dir}")


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--no-defaults", is_flag=True, help="Do not derive title/date for headerless files")
def check(files: tuple[str, ...], no_defaults: bool):
    """Parse and validate FILES without touching build state."""
    from folio.domain.source import SourceUnit
    from folio.pipeline.incremental import build_document

    failed = 0
    for name in files:
        path = Path(name)
        source = SourceUnit.from_raw(path.stem, path.read_bytes(), path=path.name)
        try:
            document = build_document(source, derive_defaults=not no_defaults)
        except ParseError as e:
            failed += 1
            click.echo(f"✗ {name}: {e.kind.value} at {e.location}: {e.message}")
            continue
        except ValidationError as e:
            failed += 1
            click.echo(f"✗ {name}: invalid '{e.field}': {e.reason}")
            continue

        categories = ", ".join(document.categories) or "-"
        click.echo(
            f"✓ {name}: {document.title!r} {document.published_at.isoformat()} [{categories}]"
        )

    if failed:
        sys.exit(1)


@cli.command()
@click.option("--config", "-c", default=None, help="Configuration file path")
@click.option("--limit", "-n", type=int, default=None, help="Show at most N entries")
def timeline(config: str | None, limit: int | None):
    """Print the published timeline from the last build."""
    from folio.pipeline.pipeline import PublicationPipeline

    snapshot = PublicationPipeline(config=_load(config)).load_index().snapshot()
    ids = snapshot.timeline if limit is None else snapshot.timeline[:limit]
    for doc_id in ids:
        document = snapshot.documents[doc_id]
        click.echo(f"{document.published_at.isoformat()}  {doc_id}  {document.title}")


@cli.command()
@click.argument("label")
@click.option("--config", "-c", default=None, help="Configuration file path")
def category(label: str, config: str | None):
    """Print documents published under LABEL."""
    from folio.pipeline.pipeline import PublicationPipeline

    snapshot = PublicationPipeline(config=_load(config)).load_index().snapshot()
    ids = snapshot.by_category(label)
    if not ids:
        click.echo(f"No documents in category {label!r}", err=True)
        sys.exit(1)
    for doc_id in ids:
        document = snapshot.documents[doc_id]
        click.echo(f"{document.published_at.isoformat()}  {doc_id}  {document.title}")


def main():
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
