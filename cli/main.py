"""Command line entry point: run JSONPath queries over JSON files."""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from backends.locator import LineLocatorFactory
from backends.models import SearchReport
from backends.search import SearchEngineFactory
from core.config import SearchConfig
from core.exceptions import SearchRootError
from core.models import FileQueryRequest, SearchRequest
from core.reporting import REPORT_FORMATS, render_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonpath-search",
        description="Run a JSONPath query against JSON files and show the source line of every match",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log more (-vv for debug)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search every .json file below a directory")
    search.add_argument("directory", help="Directory to search recursively")
    search.add_argument("query", help="JSONPath query, e.g. '$.metadata.fileName'")
    _add_output_arguments(search)
    search.add_argument("--max-results", type=int, default=None, help="Stop after N matches")
    search.add_argument("--workers", type=int, default=None, help="Number of files processed in parallel")
    search.add_argument(
        "--follow-symlinks", action="store_true", default=None, help="Descend into symlinked directories"
    )

    query_file = subparsers.add_parser("query-file", help="Query a single JSON file")
    query_file.add_argument("file", help="JSON file")
    query_file.add_argument("query", help="JSONPath query")
    _add_output_arguments(query_file)

    locate = subparsers.add_parser("locate", help="Print the line a JSON value appears on")
    locate.add_argument("file", help="JSON file")
    locate.add_argument("value", help="Value as JSON, e.g. '\"My Application\"' or 5000")
    return parser


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--format", choices=REPORT_FORMATS, default="text", help="Output format")
    parser.add_argument("-o", "--output", help="Write the report to a file instead of stdout")
    parser.add_argument("--show-skipped", action="store_true", help="List files and directories that were skipped")


def _write(content: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"Report written to {output}")
    else:
        sys.stdout.write(content if content.endswith("\n") else content + "\n")


def _print_validation_error(exc: ValidationError) -> None:
    for error in exc.errors():
        print(f"Error: {error['msg']}", file=sys.stderr)


def run_search(args: argparse.Namespace, config: SearchConfig) -> int:
    try:
        request = SearchRequest(directory=args.directory, query=args.query, max_results=args.max_results or 0)
    except ValidationError as exc:
        _print_validation_error(exc)
        return EXIT_INVALID

    engine = SearchEngineFactory.create_engine(
        config,
        max_results=args.max_results,
        workers=args.workers,
        follow_symlinks=args.follow_symlinks,
    )
    try:
        report = engine.search_with_report(request.directory, request.query)
    except SearchRootError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    _write(render_report(report, args.format, args.show_skipped), args.output)
    return EXIT_OK


def run_query_file(args: argparse.Namespace, config: SearchConfig) -> int:
    try:
        request = FileQueryRequest(path=args.file, query=args.query)
    except ValidationError as exc:
        _print_validation_error(exc)
        return EXIT_INVALID

    engine = SearchEngineFactory.create_engine(config)
    outcome = engine.search_file(request.path, request.query)
    if not outcome.ok:
        print(f"Error: {outcome.skipped.message}", file=sys.stderr)
        return EXIT_ERROR

    report = SearchReport(
        root=os.path.dirname(os.path.abspath(request.path)),
        query=request.query,
        matches=outcome.matches,
        files_scanned=1,
    )
    _write(render_report(report, args.format, args.show_skipped), args.output)
    return EXIT_OK


def run_locate(args: argparse.Namespace, config: SearchConfig) -> int:
    try:
        value = json.loads(args.value)
    except ValueError as exc:
        print(f"Error: value must be JSON: {exc}", file=sys.stderr)
        return EXIT_INVALID

    try:
        with open(args.file, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    locator = LineLocatorFactory.create_locator(config.locator_backend)
    print(locator.locate(text, value))
    return EXIT_OK


COMMANDS = {
    "search": run_search,
    "query-file": run_query_file,
    "locate": run_locate,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    config = SearchConfig()
    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
