"""Command-line entry point for the article exporter."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, Sequence

from .config import DEFAULT_FETCH_TIMEOUT, ExportConfig
from .crawler import load_article
from .errors import ExportError
from .fetcher import HttpFetcher
from .models import Article, PackagedDocument
from .registry import build_registry, get_exporter

logger = logging.getLogger("article_epub.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("fetch", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default="output",
        type=Path,
        help="Directory where the package should be written",
    )
    parser.add_argument(
        "--format",
        default="epub",
        help="Export format (default: epub)",
    )
    parser.add_argument(
        "--fetch-timeout",
        type=float,
        default=DEFAULT_FETCH_TIMEOUT,
        help="Timeout in seconds for each image download",
    )
    parser.add_argument(
        "--language",
        default="en",
        help="Language code recorded in the package metadata",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export web articles as EPUB files with their images bundled.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_parser = subparsers.add_parser(
        "fetch", help="Download an article from the web and export it"
    )
    fetch_parser.add_argument("url", help="Article URL")
    fetch_parser.add_argument(
        "--render",
        action="store_true",
        help="Render the page with Playwright before extracting the article",
    )
    fetch_parser.add_argument(
        "--wait",
        type=float,
        default=1.0,
        help="Seconds to wait after network idle when rendering",
    )
    fetch_parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Page load timeout in seconds",
    )
    _add_common_arguments(fetch_parser)

    convert_parser = subparsers.add_parser(
        "convert", help="Export a local HTML body file"
    )
    convert_parser.add_argument("path", type=Path, help="HTML file holding the article body")
    convert_parser.add_argument("--url", required=True, help="Source URL of the article")
    convert_parser.add_argument(
        "--title",
        default=None,
        help="Article title (defaults to the file name)",
    )
    _add_common_arguments(convert_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> ExportConfig:
    config = ExportConfig(fetch_timeout=args.fetch_timeout, language=args.language)
    if args.command == "fetch":
        config.render = args.render
        config.wait_after_load = args.wait
        config.navigation_timeout = args.timeout
    return config


def _load_article(args: argparse.Namespace, config: ExportConfig) -> Article:
    if args.command == "fetch":
        return asyncio.run(load_article(args.url, config))
    html = args.path.read_text(encoding="utf-8")
    title = args.title or args.path.stem
    return Article(title=title, url=args.url, html=html)


def _write_package(package: PackagedDocument, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / package.name.replace("/", "-")
    output_path.write_bytes(package.data)
    return output_path


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = _build_config(args)
    registry = build_registry(HttpFetcher(config), config)
    overall_start = time.perf_counter()

    try:
        exporter = get_exporter(registry, args.format)
        article = _load_article(args, config)
        package = exporter.export(article)
    except ExportError as exc:
        logger.error("Export failed: %s", exc)
        return 1
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error while exporting")
        return 1

    output_path = _write_package(package, Path(args.output).resolve())
    logger.info(
        "Saved %s to %s in %.2fs",
        package.content_type,
        output_path,
        time.perf_counter() - overall_start,
    )
    for outcome in package.skipped:
        logger.debug("Missing image %s (%s)", outcome.url or outcome.reference, outcome.reason)
    return 0


if __name__ == "__main__":
    sys.exit(main())
