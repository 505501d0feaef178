"""
promgrep CLI

Find where Prometheus metrics are declared in a Go code base.

Usage::

    promgrep                          # list declarations of all metrics
    promgrep some_metric_name         # rank declarations matching the name
    promgrep -d ./svc -f json http_requests_total
"""

import logging

import click

from promgrep.core.config import PromgrepConfig
from promgrep.core.scanner import ScanPipeline
from promgrep.core.search import ResultFormatter, rank_hits
from promgrep.exceptions import ConfigError, ScanError


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

def _configure_logging(config: PromgrepConfig, verbose: bool) -> None:
    """Set up logging for the CLI session (stderr, never mixed with hits)."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper())
    logging.basicConfig(level=level, format=config.log_format)


# ---------------------------------------------------------------------------
# promgrep
# ---------------------------------------------------------------------------

@click.command()
@click.version_option(package_name="promgrep")
@click.argument("query", required=False)
@click.option("-d", "--dir", "directory", default=".", show_default=True,
              help="Root directory to scan for .go files.")
@click.option("-f", "--format", "fmt",
              type=click.Choice(["text", "json", "compact"]),
              default="text", help="Output format.")
@click.option("-n", "--max-results", type=int, default=None,
              help="Maximum number of hits to print.")
@click.option("--min-score", type=click.IntRange(0, 100), default=None,
              help="Hide scored hits below this score (ignored without QUERY).")
@click.option("-j", "--jobs", type=int, default=None,
              help="Files to scan in parallel (default: $PROMGREP_MAX_WORKERS or 1).")
@click.option("--progress", is_flag=True, help="Show a progress bar on stderr.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(query: str | None, directory: str, fmt: str, max_results: int | None,
        min_score: int | None, jobs: int | None, progress: bool, verbose: bool):
    """List metric declarations, or rank them against QUERY.

    Without QUERY every recognized declaration is printed with its help
    text.  With QUERY only declarations whose name overlaps it are
    printed, best match first, with a score from 0 to 100.
    """
    config = PromgrepConfig.from_env()
    if jobs is not None:
        config.max_workers = jobs
    try:
        config.validate()
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    _configure_logging(config, verbose)

    pipeline = ScanPipeline(
        root_dir=directory,
        query=query,
        config=config,
        show_progress=progress,
    )
    try:
        result = pipeline.run()
    except ScanError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)

    hits = rank_hits(result.hits, min_score=min_score, max_results=max_results)

    formatter = ResultFormatter()
    if fmt == "json":
        click.echo(formatter.format_json(hits))
    elif hits:
        if fmt == "compact":
            click.echo(formatter.format_compact(hits))
        else:
            click.echo(formatter.format_text(hits))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
