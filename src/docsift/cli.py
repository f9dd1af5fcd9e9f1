"""Command-line interface for docsift."""

from __future__ import annotations

import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.table import Table

from docsift import __version__
from docsift.config import Config, MonitoringConfig, find_config_file
from docsift.errors import DocsiftError
from docsift.extractor.classifier import ContentClassifier
from docsift.extractor.decoder import MultiEncodingDecoder
from docsift.observability import configure_logging, export_prometheus
from docsift.service import DocumentTextService

console = Console()
logger = structlog.get_logger(__name__)


def _load_config(config_path: Optional[Path]) -> Config:
    """Explicit path first, then a docsift/config YAML in the working directory, then defaults."""
    config_path = config_path or find_config_file()
    if config_path:
        return Config.from_yaml(config_path)
    return Config()


def _read_document(path: Path, config: Config) -> bytes:
    size = path.stat().st_size
    if size > config.intake.max_upload_bytes:
        # Refuse before reading the whole file into memory.
        raise click.ClickException(f"{path.name} is {size} bytes; limit is {config.intake.max_upload_bytes}")
    return path.read_bytes()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file path (default: docsift.yaml in the working directory)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], log_level: Optional[str]) -> None:
    """docsift - extract, validate and sanitize document text."""
    ctx.ensure_object(dict)
    loaded = _load_config(config)
    if log_level:
        loaded.monitoring = MonitoringConfig(log_level=log_level, log_file=loaded.monitoring.log_file)
    ctx.obj["config"] = loaded
    configure_logging(loaded.monitoring)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--media-type", default=None, help="Declared media type (default: guessed from the file name)")
@click.option("--json", "as_json", is_flag=True, help="Print text and diagnostics as JSON")
@click.option(
    "--metrics-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write Prometheus metrics for this run to a file (textfile collector format)",
)
@click.pass_context
def extract(
    ctx: click.Context, path: Path, media_type: Optional[str], as_json: bool, metrics_file: Optional[Path]
) -> None:
    """Extract sanitized text from PATH."""
    config: Config = ctx.obj["config"]
    data = _read_document(path, config)
    declared = media_type or mimetypes.guess_type(path.name)[0]

    service = DocumentTextService.from_config(config)
    try:
        outcome = asyncio.run(
            service.get_text(str(path), data, media_type=declared, filename=path.name)
        )
    except DocsiftError as e:
        logger.error("Extraction failed", path=str(path), error=str(e), error_type=type(e).__name__)
        console.print(f"[red]Extraction failed:[/red] {e}", highlight=False)
        if getattr(e, "retryable", False):
            console.print("[yellow]The text extractor was unavailable; try again.[/yellow]")
        else:
            console.print("[yellow]Try a different file, or make sure the PDF is not image-only or password-protected.[/yellow]")
        sys.exit(1)
    finally:
        if metrics_file:
            metrics_file.write_text(export_prometheus(), encoding="utf-8")

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))
    else:
        click.echo(outcome.text)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--encoding", default="utf-8", show_default=True, help="Encoding used to read the file")
@click.pass_context
def classify(ctx: click.Context, path: Path, encoding: str) -> None:
    """Report whether the text in PATH looks like prose or leaked PDF syntax."""
    config: Config = ctx.obj["config"]
    text = _read_document(path, config).decode(encoding, errors="replace")
    verdict = ContentClassifier(config.classifier).classify(text)

    table = Table(title=f"Classification: {path.name}")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("binary-like", "[red]yes[/red]" if verdict.is_binary_like else "[green]no[/green]")
    table.add_row("indicator count", str(verdict.indicator_count))
    table.add_row("binary ratio", f"{verdict.binary_ratio:.4f}")
    table.add_row("indicators", ", ".join(verdict.matched_indicators) or "-")
    console.print(table)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", default=5, show_default=True, help="Number of candidates to show")
@click.pass_context
def decode(ctx: click.Context, path: Path, limit: int) -> None:
    """Show the ranked fallback decoding candidates for PATH."""
    config: Config = ctx.obj["config"]
    decoder = MultiEncodingDecoder(config.decoder)
    candidates = decoder.candidates(_read_document(path, config))

    table = Table(title=f"Fallback candidates: {path.name}")
    table.add_column("#", justify="right")
    table.add_column("Origin")
    table.add_column("Score", justify="right")
    table.add_column("Preview")
    for rank, candidate in enumerate(candidates[:limit], start=1):
        table.add_row(str(rank), candidate.label, str(candidate.score), candidate.text[:60])
    console.print(table)

    if not candidates:
        console.print("[yellow]No candidates recovered.[/yellow]")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
