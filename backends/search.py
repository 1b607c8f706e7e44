"""Recursive JSONPath search over a directory tree."""

import copy
import json
import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from operator import attrgetter
from typing import Any, Iterator, List, Optional, Set, Tuple, Union

from backends.content_fetcher import AbstractContentFetcher, ContentFetcherFactory, LocalContentFetcher
from backends.evaluator import AbstractQueryEvaluator, JsonPathNgEvaluator, QueryEvaluatorFactory
from backends.locator import AbstractLineLocator, LineLocatorFactory, RegexLineLocator
from backends.models import FileOutcome, SearchMatch, SearchReport, SkippedPath, SkipReason
from core.config import SearchConfig
from core.exceptions import FileTooLargeError, QueryEvaluationError, SearchRootError
from core.limiters import MatchLimiter

logger = logging.getLogger(__name__)

JSON_EXTENSION = ".json"

_WalkItem = Union[str, SkippedPath]


def is_json_file(name: str) -> bool:
    """Return True if the file name has a .json extension (any case)."""
    return os.path.splitext(name)[1].lower() == JSON_EXTENSION


class JsonSearchEngine:
    """Runs one JSONPath query against every JSON file below a root directory.

    Directories are walked depth-first in pre-order: a subdirectory is searched
    completely before the next sibling entry. Files that cannot be read or
    parsed, and files the query fails on, are skipped and reported instead of
    aborting the search. Only a root that cannot be opened raises.
    """

    def __init__(
        self,
        evaluator: Optional[AbstractQueryEvaluator] = None,
        locator: Optional[AbstractLineLocator] = None,
        fetcher: Optional[AbstractContentFetcher] = None,
        follow_symlinks: bool = False,
        sort_entries: bool = True,
        max_results: int = 0,
        workers: int = 1,
    ) -> None:
        """Initialize the search engine.

        Args:
            evaluator: JSONPath evaluator, jsonpath-ng by default
            locator: Line locator, the regex heuristics by default
            fetcher: Filesystem access, the local filesystem by default
            follow_symlinks: Descend into symlinked directories
            sort_entries: Visit directory entries sorted by name instead of listing order
            max_results: Stop after this many matches, 0 for no limit
            workers: Number of threads processing files
        """
        if max_results < 0:
            raise ValueError("max_results must be >= 0")
        self.evaluator = evaluator or JsonPathNgEvaluator()
        self.locator = locator or RegexLineLocator()
        self.fetcher = fetcher or LocalContentFetcher()
        self.follow_symlinks = follow_symlinks
        self.sort_entries = sort_entries
        self.max_results = max_results
        self.workers = max(1, workers)

    def search(self, root: Union[str, os.PathLike], query: str) -> List[SearchMatch]:
        """Search a directory tree.

        Args:
            root: Directory to search
            query: JSONPath query

        Returns:
            Matches in traversal order, and in query-result order within a file

        Raises:
            SearchRootError: If root does not exist or cannot be listed
        """
        return self.search_with_report(root, query).matches

    def search_with_report(self, root: Union[str, os.PathLike], query: str) -> SearchReport:
        """Search a directory tree and keep the skipped-path diagnostics."""
        started = time.perf_counter()
        root = self._check_root(root)
        report = SearchReport(root=root, query=query)
        limiter = MatchLimiter(max_matches=self.max_results)

        outcomes = self._outcomes(root, query)
        try:
            for item in outcomes:
                if isinstance(item, SkippedPath):
                    report.skipped.append(item)
                    continue
                report.files_scanned += 1
                if item.skipped is not None:
                    report.skipped.append(item.skipped)
                    continue
                for match in item.matches:
                    if limiter.exhausted():
                        report.truncated = True
                        break
                    limiter.increment()
                    report.matches.append(match)
                if report.truncated:
                    logger.info(f"Stopping search after {self.max_results} matches")
                    break
        finally:
            outcomes.close()

        report.elapsed_seconds = time.perf_counter() - started
        logger.info(
            f"Query {query!r} on {root}: {report.match_count} matches in "
            f"{report.files_scanned} files, {report.skipped_count} skipped"
        )
        return report

    def search_file(self, path: Union[str, os.PathLike], query: str) -> FileOutcome:
        """Read, parse and query a single JSON file.

        Per-file failures are returned as a skipped outcome, never raised.
        """
        path = os.fspath(path)
        try:
            text = self.fetcher.get_content(path)
        except FileTooLargeError as exc:
            return self._skip(path, SkipReason.FILE_TOO_LARGE, exc)
        except (OSError, UnicodeDecodeError) as exc:
            return self._skip(path, SkipReason.UNREADABLE_FILE, exc)

        try:
            document = json.loads(text)
        except (ValueError, RecursionError) as exc:
            return self._skip(path, SkipReason.MALFORMED_JSON, exc)

        try:
            values = self.evaluator.evaluate(document, query)
        except QueryEvaluationError as exc:
            return self._skip(path, SkipReason.QUERY_FAILED, exc)

        try:
            matches = [self._match(path, text, value) for value in values]
        except RecursionError as exc:
            # json.loads accepts deeper nesting than copy.deepcopy can handle.
            return self._skip(path, SkipReason.NESTED_TOO_DEEP, exc)
        return FileOutcome(path=path, matches=matches)

    def iter_json_files(self, root: Union[str, os.PathLike]) -> Iterator[str]:
        """Yield the JSON files a search of root would visit, in visiting order."""
        root = self._check_root(root)
        for item in self._walk(root, visited=set(), is_root=True):
            if not isinstance(item, SkippedPath):
                yield item

    def _match(self, path: str, text: str, value: Any) -> SearchMatch:
        return SearchMatch(
            file_path=path,
            matched_value=copy.deepcopy(value),
            line_number=self.locator.locate(text, value),
        )

    def _outcomes(self, root: str, query: str) -> Iterator[Union[FileOutcome, SkippedPath]]:
        items = self._walk(root, visited=set(), is_root=True)
        if self.workers == 1:
            for item in items:
                yield item if isinstance(item, SkippedPath) else self.search_file(item, query)
            return

        # Submit in discovery order and collect in the same order so the
        # result matches a sequential run.
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            pending: List[Union[Future, SkippedPath]] = [
                item if isinstance(item, SkippedPath) else pool.submit(self.search_file, item, query)
                for item in items
            ]
            try:
                for item in pending:
                    yield item.result() if isinstance(item, Future) else item
            finally:
                for item in pending:
                    if isinstance(item, Future):
                        item.cancel()

    def _walk(self, directory: str, visited: Set[Tuple[int, int]], is_root: bool = False) -> Iterator[_WalkItem]:
        try:
            entries = self.fetcher.list_entries(directory)
            if self.follow_symlinks:
                visited.add(self._inode(directory))
        except OSError as exc:
            if is_root:
                raise SearchRootError(directory, str(exc)) from exc
            logger.warning(f"Skipping directory {directory}: {exc}")
            yield SkippedPath(path=directory, reason=SkipReason.UNREADABLE_DIRECTORY, message=str(exc))
            return

        if self.sort_entries:
            entries = sorted(entries, key=attrgetter("name"))

        for entry in entries:
            if entry.is_dir:
                if entry.is_symlink and not self.follow_symlinks:
                    logger.debug(f"Not following symlinked directory {entry.path}")
                    continue
                if self.follow_symlinks and self._seen(entry.path, visited):
                    logger.debug(f"Already visited {entry.path}, skipping symlink cycle")
                    continue
                yield from self._walk(entry.path, visited)
            elif entry.is_file and is_json_file(entry.name):
                yield entry.path

    @staticmethod
    def _inode(path: str) -> Tuple[int, int]:
        stat = os.stat(path)
        return stat.st_dev, stat.st_ino

    def _seen(self, path: str, visited: Set[Tuple[int, int]]) -> bool:
        try:
            return self._inode(path) in visited
        except OSError:
            # Broken link; let the listing report it.
            return False

    @staticmethod
    def _check_root(root: Union[str, os.PathLike]) -> str:
        root = os.fspath(root)
        if not os.path.exists(root):
            raise SearchRootError(root, "directory does not exist")
        if not os.path.isdir(root):
            raise SearchRootError(root, "not a directory")
        return root

    @staticmethod
    def _skip(path: str, reason: SkipReason, exc: Exception) -> FileOutcome:
        if reason in (SkipReason.UNREADABLE_FILE, SkipReason.FILE_TOO_LARGE):
            logger.warning(f"Skipping file {path}: {exc}")
        else:
            logger.info(f"Skipping file {path}: {exc}")
        return FileOutcome(path=path, skipped=SkippedPath(path=path, reason=reason, message=str(exc)))


class SearchEngineFactory:
    """Factory for creating search engines."""

    @staticmethod
    def create_engine(config: Optional[SearchConfig] = None, **overrides) -> JsonSearchEngine:
        """Create a search engine from configuration.

        Args:
            config: Search configuration, read from the environment when omitted
            **overrides: Engine arguments that take precedence over config

        Returns:
            Search engine instance

        Raises:
            ValueError: If a configured backend is not supported
        """
        config = config or SearchConfig()
        settings = {
            "follow_symlinks": config.follow_symlinks,
            "sort_entries": config.sort_entries,
            "max_results": config.max_results,
            "workers": config.workers,
        }
        settings.update({key: value for key, value in overrides.items() if value is not None})
        return JsonSearchEngine(
            evaluator=QueryEvaluatorFactory.create_evaluator(config.evaluator_backend),
            locator=LineLocatorFactory.create_locator(config.locator_backend),
            fetcher=ContentFetcherFactory.create_fetcher(
                config.fetcher_backend, max_file_bytes=config.max_file_bytes
            ),
            **settings,
        )
