"""JSONPath query evaluators."""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, List

from jsonpath_ng import JSONPath
from jsonpath_ng.ext import parse as jsonpath_parse

from core.exceptions import QueryEvaluationError


@lru_cache(maxsize=128)
def _compile(query: str) -> JSONPath:
    return jsonpath_parse(query)


class AbstractQueryEvaluator(ABC):
    """Abstract base class for JSONPath evaluators."""

    @abstractmethod
    def evaluate(self, document: Any, query: str) -> List[Any]:
        """Evaluate a query against a parsed document.

        Args:
            document: Parsed JSON document
            query: JSONPath expression

        Returns:
            Matching values in evaluation order

        Raises:
            QueryEvaluationError: If the query is malformed or cannot be evaluated
        """
        pass


class JsonPathNgEvaluator(AbstractQueryEvaluator):
    """Evaluator backed by jsonpath-ng's extended parser (filters, arithmetic)."""

    def compile(self, query: str) -> JSONPath:
        """Parse a query once; repeated queries hit the cache."""
        if not query or not query.strip():
            raise QueryEvaluationError(query, "query is empty")
        try:
            return _compile(query.strip())
        except Exception as exc:
            raise QueryEvaluationError(query, str(exc)) from exc

    def evaluate(self, document: Any, query: str) -> List[Any]:
        expression = self.compile(query)
        try:
            return [match.value for match in expression.find(document)]
        except Exception as exc:
            raise QueryEvaluationError(query, str(exc)) from exc


class QueryEvaluatorFactory:
    """Factory for creating query evaluators."""

    @staticmethod
    def create_evaluator(backend: str = "jsonpath-ng") -> AbstractQueryEvaluator:
        """Create a query evaluator for the given backend.

        Args:
            backend: Evaluator name ('jsonpath-ng')

        Returns:
            Query evaluator instance

        Raises:
            ValueError: If backend is not supported
        """
        backend = backend.lower()
        if backend in ("jsonpath-ng", "jsonpath_ng"):
            return JsonPathNgEvaluator()
        else:
            raise ValueError(f"Unsupported query evaluator: {backend}")
