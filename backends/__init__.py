"""Backend implementations for JSONPath search and line location."""

from .content_fetcher import (
    AbstractContentFetcher,
    ContentFetcherFactory,
    LocalContentFetcher,
)
from .evaluator import AbstractQueryEvaluator, JsonPathNgEvaluator, QueryEvaluatorFactory
from .locator import (
    AbstractLineLocator,
    FirstLineLocator,
    LineLocatorFactory,
    RegexLineLocator,
)
from .models import (
    Candidate,
    DirectoryEntry,
    FileOutcome,
    JsonKind,
    SearchMatch,
    SearchReport,
    SkippedPath,
    SkipReason,
)
from .search import JsonSearchEngine, SearchEngineFactory, is_json_file

__all__ = [
    "AbstractContentFetcher",
    "ContentFetcherFactory",
    "LocalContentFetcher",
    "AbstractQueryEvaluator",
    "JsonPathNgEvaluator",
    "QueryEvaluatorFactory",
    "AbstractLineLocator",
    "FirstLineLocator",
    "LineLocatorFactory",
    "RegexLineLocator",
    "JsonSearchEngine",
    "SearchEngineFactory",
    "is_json_file",
    "Candidate",
    "DirectoryEntry",
    "FileOutcome",
    "JsonKind",
    "SearchMatch",
    "SearchReport",
    "SkippedPath",
    "SkipReason",
]
