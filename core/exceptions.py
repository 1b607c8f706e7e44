"""Exceptions shared by the search backends and their callers."""


class JsonSearchError(Exception):
    """Base class for search backend errors."""


class SearchRootError(JsonSearchError):
    """The search root does not exist, is not a directory, or cannot be listed."""

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Cannot search {root}: {reason}")
        self.root = root
        self.reason = reason


class QueryEvaluationError(JsonSearchError):
    """A JSONPath query could not be parsed or evaluated."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(f"Invalid JSONPath query {query!r}: {reason}")
        self.query = query
        self.reason = reason


class FileTooLargeError(JsonSearchError):
    """A file exceeds the configured size limit."""

    def __init__(self, path: str, size: int, max_bytes: int) -> None:
        super().__init__(f"{path} is {size} bytes (limit {max_bytes})")
        self.path = path
        self.size = size
        self.max_bytes = max_bytes
