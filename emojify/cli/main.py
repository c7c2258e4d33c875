"""CLI entry point for emojify.

Usage:
    echo "Hi :wave:" | emojify run
    emojify run notes.txt chat.log --locale de
    emojify fetch --force
    emojify lookup thumbs_up
"""

import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ..core.config import EmojifyConfig, reload_config
from ..core.exceptions import (
    ConfigurationError,
    InvalidShortCodeError,
    ProvisioningError,
    ReferenceSourceError,
)
from ..core.models import ReferenceTable, ShortCode
from ..lookup import LookupClient, LookupService
from ..provisioning import CLDRArchiveFetcher
from ..resolution import EmojiResolver
from ..scanner import ShortCodeScanner

logger = logging.getLogger(__name__)

# Initialize app
app = typer.Typer(
    name="emojify",
    help="Replace :short_codes: in text with emoji",
    add_completion=False,
)

# Diagnostics only; substituted text goes to stdout
console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error: {escape(message)}[/]")
    return typer.Exit(1)


def _load_config(config_file: Optional[Path], locale: Optional[str]) -> EmojifyConfig:
    try:
        config = reload_config(config_file=config_file)
    except ConfigurationError as e:
        raise _fail(str(e))
    if locale:
        config.locale = locale
    return config


def _reference_table(
    config: EmojifyConfig,
    table: Optional[Path],
    fetch: bool = True,
) -> ReferenceTable:
    """Pick the table to consult, provisioning it on first run."""
    if table is not None:
        if table.is_dir():
            return ReferenceTable.in_directory(table, config.locale)
        return ReferenceTable(primary=table, locale=config.locale)

    fetcher = CLDRArchiveFetcher(config)
    if not fetch:
        return fetcher.table()
    try:
        return fetcher.ensure()
    except ProvisioningError as e:
        raise _fail(str(e))


def _open_inputs(files: Optional[List[Path]]) -> Iterator[TextIO]:
    if not files:
        yield sys.stdin
        return
    for path in files:
        try:
            with open(path, "r", encoding="utf-8") as f:
                yield f
        except OSError as e:
            raise _fail(f"Cannot read {path}: {e.strerror}")


@app.command()
def run(
    files: Optional[List[Path]] = typer.Argument(
        None, help="Files to filter (default: standard input)"
    ),
    locale: Optional[str] = typer.Option(
        None,
        "--locale", "-l",
        help="CLDR locale of the annotation table (e.g. en, de)",
    ),
    table: Optional[Path] = typer.Option(
        None,
        "--table", "-t",
        help="Annotation XML file or CLDR common/ directory to use instead of the state directory",
    ),
    no_fetch: bool = typer.Option(
        False,
        "--no-fetch",
        help="Never download the reference data",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to YAML configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Copy text to standard output, replacing short codes with emoji.

    Examples:
        echo "ship it :rocket:" | emojify run
        emojify run README.md --locale fr
    """
    setup_logging(verbose)
    config = _load_config(config_file, locale)
    reference = _reference_table(config, table, fetch=not no_fetch)

    with LookupService(EmojiResolver()) as service:
        client = LookupClient(service.channel)
        try:
            for stream in _open_inputs(files):
                ShortCodeScanner(client, reference).run(stream, sys.stdout)
        except ReferenceSourceError as e:
            sys.stdout.flush()
            raise _fail(str(e))
        except UnicodeDecodeError as e:
            sys.stdout.flush()
            raise _fail(f"Input is not valid UTF-8: {e.reason} at byte {e.start}")
        logger.debug(
            f"Lookups: {service.stats.hits} cache hits, {service.stats.misses} misses"
        )


@app.command()
def fetch(
    locale: Optional[str] = typer.Option(
        None,
        "--locale", "-l",
        help="CLDR locale that must be present after fetching",
    ),
    force: bool = typer.Option(
        False,
        "--force", "-f",
        help="Download even if the reference data is already present",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to YAML configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Download the CLDR annotation tables into the state directory."""
    setup_logging(verbose)
    config = _load_config(config_file, locale)
    fetcher = CLDRArchiveFetcher(config)

    try:
        reference = fetcher.ensure(force=force)
    except ProvisioningError as e:
        raise _fail(str(e))

    release = fetcher.installed_release() or {}
    console.print(
        f"[green]Reference table ready: {escape(str(reference.primary))}[/] "
        f"({escape(release.get('tag_name') or 'unknown release')})"
    )


@app.command()
def lookup(
    shortcode: str = typer.Argument(..., help="Short code, with or without colons"),
    locale: Optional[str] = typer.Option(
        None,
        "--locale", "-l",
        help="CLDR locale of the annotation table",
    ),
    table: Optional[Path] = typer.Option(
        None,
        "--table", "-t",
        help="Annotation XML file or CLDR common/ directory",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to YAML configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Resolve a single short code and print the result."""
    setup_logging(verbose)
    try:
        token = ShortCode.parse(shortcode.strip(":"))
    except InvalidShortCodeError as e:
        raise _fail(str(e))

    config = _load_config(config_file, locale)
    reference = _reference_table(config, table)

    with LookupService(EmojiResolver()) as service:
        try:
            typer.echo(LookupClient(service.channel).call(token, reference))
        except ReferenceSourceError as e:
            raise _fail(str(e))


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    console.print(f"emojify v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
