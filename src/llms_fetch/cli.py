"""Command-line interface for llms-fetch."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from . import __version__
from .core.fetcher import LlmsFetcher
from .errors import LlmsFetchError
from .logging_config import setup_logging
from .models.config import LlmsFetchConfig
from .models.results import FileResult


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="llms-fetch",
        description="Fetch a page in its most LLM-friendly form (llms.txt, Markdown, or converted HTML)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch a page and its .md / index.md / llms.txt / llms-full.txt variants
  llms-fetch https://docs.example.com/guide

  # Store in a custom cache directory and print JSON
  llms-fetch https://docs.example.com --cache-dir ~/.cache/llms --json

  # Also try raw.githubusercontent.com for GitHub URLs
  llms-fetch https://github.com/owner/repo/blob/main/docs/intro.md --github
        """,
    )

    parser.add_argument("url", help="URL to fetch")

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML config file (command-line options take precedence)",
    )

    fetch_group = parser.add_argument_group("fetch settings")
    fetch_group.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Cache directory (default: ./.llms-fetch-mcp)",
    )
    fetch_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Per-request timeout (default: 30)",
    )
    fetch_group.add_argument(
        "--github",
        action="store_true",
        help="Also try raw.githubusercontent.com and README.md variants for github.com URLs",
    )
    fetch_group.add_argument(
        "--main-content",
        action="store_true",
        help="Convert only the main content area of HTML pages",
    )

    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only print errors",
    )

    return parser


def build_config(args: argparse.Namespace) -> LlmsFetchConfig:
    """
    Build the configuration from an optional config file and CLI flags.

    Raises:
        ValidationError: If the resulting configuration is invalid
        OSError: If the config file cannot be read
    """
    data: dict[str, Any] = {}
    if args.config:
        data = LlmsFetchConfig.from_yaml_file(args.config).model_dump(exclude_none=True)

    if args.cache_dir:
        data.setdefault("cache", {})["directory"] = args.cache_dir
    if args.timeout is not None:
        data.setdefault("network", {})["timeout"] = args.timeout
    if args.github:
        data.setdefault("conversion", {})["github_variants"] = True
    if args.main_content:
        data.setdefault("conversion", {})["extract_main_content"] = True

    if args.verbose:
        data["log_level"] = "DEBUG"
    elif args.quiet:
        data["log_level"] = "ERROR"

    return LlmsFetchConfig.model_validate(data)


def print_results(console: Console, results: list[FileResult]) -> None:
    """Print a table of stored files."""
    table = Table(title="Cached files")
    table.add_column("Path", overflow="fold")
    table.add_column("Type")
    table.add_column("Lines", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Chars", justify="right")
    table.add_column("Source", overflow="fold")

    for result in results:
        table.add_row(
            result.path,
            result.content_type,
            str(result.lines),
            str(result.words),
            str(result.characters),
            result.source_url,
        )
    console.print(table)

    for result in results:
        if result.table_of_contents:
            console.print()
            console.print(f"[bold]Contents of {result.path}:[/bold]")
            console.print(result.table_of_contents, markup=False, highlight=False)


def run_fetcher(args: argparse.Namespace) -> int:
    """Run the fetcher with given arguments."""
    console = Console()
    err_console = Console(stderr=True)

    try:
        config = build_config(args)
    except (ValidationError, OSError, ValueError) as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    setup_logging(level=config.log_level, log_file=str(config.log_file) if config.log_file else None)

    async def run() -> int:
        try:
            async with LlmsFetcher(config) as fetcher:
                results = await fetcher.fetch(args.url)
        except (LlmsFetchError, OSError) as e:
            err_console.print(f"[red]Error:[/red] {e}")
            return 1

        if args.json:
            console.print_json(data={"url": args.url, "files": [r.to_dict() for r in results]})
        elif not args.quiet:
            print_results(console, results)
        return 0

    return asyncio.run(run())


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_fetcher(args)


if __name__ == "__main__":
    sys.exit(main())
