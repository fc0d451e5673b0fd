"""Command-line entry point for visiting websites and viewing images."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Sequence

from .config import PROFILE_NAMES, VisitConfig
from .crawler import VISIT_ABORTED, collect_visit, view_images, visit_website
from .fetcher import AbortSignal, FetchAborted, FetchError
from .markdown import compose_markdown
from .reporting import LoggingReporter

logger = logging.getLogger("visit_website.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("visit", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default=None,
        type=Path,
        help="Working directory where downloaded images are written (default: current directory)",
    )
    parser.add_argument(
        "--profile",
        choices=PROFILE_NAMES,
        default=None,
        help="Extraction profile used to rank links and images",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_visit_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="URL of the website to visit")
    parser.add_argument(
        "--find",
        dest="find_in_page",
        action="append",
        default=None,
        metavar="TERM",
        help="Search term used to prioritize links, images and content (repeatable)",
    )
    parser.add_argument("--max-links", type=int, default=None, help="Maximum number of links")
    parser.add_argument("--max-images", type=int, default=None, help="Maximum number of images")
    parser.add_argument(
        "--content-limit",
        type=int,
        default=None,
        help="Maximum text content length",
    )
    parser.add_argument(
        "--markdown",
        action="store_true",
        help="Print the summary as Markdown instead of JSON",
    )
    _add_common_arguments(parser)


def _add_images_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("image_urls", nargs="*", help="Image URLs to download")
    parser.add_argument("--website", default=None, help="Website whose images to download")
    parser.add_argument(
        "--max-images",
        type=int,
        default=None,
        help="Maximum number of images taken from --website",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Visit websites and return compact, relevance-ranked summaries.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    visit_parser = subparsers.add_parser(
        "visit", help="Return the title, headings, links, images and text of a page"
    )
    _add_visit_arguments(visit_parser)

    images_parser = subparsers.add_parser(
        "images", help="Download images from a website or a list of image URLs"
    )
    _add_images_arguments(images_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _build_config(args: argparse.Namespace) -> VisitConfig:
    return VisitConfig.from_env(
        working_directory=args.output,
        profile=args.profile,
        request_timeout=args.timeout,
    )


async def _with_abort_signal(run: Callable[[AbortSignal], Awaitable[Any]]) -> Any:
    abort_signal = AbortSignal()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, abort_signal.abort)
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers are not supported on this platform")
    try:
        return await run(abort_signal)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def _write(payload: Any) -> None:
    if isinstance(payload, str):
        text = payload
    else:
        text = json.dumps(payload, indent=2, ensure_ascii=False)
    sys.stdout.write(text if text.endswith("\n") else text + "\n")
    sys.stdout.flush()


async def _visit_markdown(args: argparse.Namespace, config: VisitConfig, abort_signal: AbortSignal) -> str:
    reporter = LoggingReporter(logger)
    try:
        result = await collect_visit(
            args.url,
            args.find_in_page,
            config.links_budget(args.max_links),
            config.images_budget(args.max_images),
            config.content_budget(args.content_limit),
            config,
            reporter,
            abort_signal,
        )
    except FetchAborted:
        return VISIT_ABORTED
    except FetchError as exc:
        reporter.warn(f"Error during website visit: {exc}")
        return f"Error: {exc}"
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error visiting %s", args.url)
        return "Error: Unexpected error during website visit"
    return compose_markdown(result)


def _run_visit(args: argparse.Namespace) -> None:
    config = _build_config(args)
    if args.markdown:
        output = asyncio.run(
            _with_abort_signal(lambda sig: _visit_markdown(args, config, sig))
        )
    else:
        output = asyncio.run(
            _with_abort_signal(
                lambda sig: visit_website(
                    args.url,
                    args.find_in_page,
                    args.max_links,
                    args.max_images,
                    args.content_limit,
                    config=config,
                    reporter=LoggingReporter(logger),
                    signal=sig,
                )
            )
        )
    _write(output)


def _run_images(args: argparse.Namespace) -> None:
    config = _build_config(args)
    output = asyncio.run(
        _with_abort_signal(
            lambda sig: view_images(
                args.image_urls,
                args.website,
                args.max_images,
                config=config,
                reporter=LoggingReporter(logger),
                signal=sig,
            )
        )
    )
    _write(output)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "visit":
        _run_visit(args)
    else:
        _run_images(args)


if __name__ == "__main__":
    main()
