"""Request models shared by the command line, MCP server and web frontend."""

from pydantic import BaseModel, Field, field_validator


def _not_empty(value: str, name: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{name} cannot be empty")
    return value


class QueryRequest(BaseModel):
    """Base request carrying a JSONPath query."""

    query: str = Field(..., description="JSONPath query, e.g. $.store.book[*].title")

    @field_validator("query")
    @classmethod
    def _query_is_jsonpath(cls, value: str) -> str:
        value = _not_empty(value, "JSONPath query")
        if not value.startswith("$"):
            raise ValueError("JSONPath query should start with $")
        return value


class SearchRequest(QueryRequest):
    """A JSONPath search over a directory tree."""

    directory: str = Field(..., description="root directory to search")
    max_results: int = Field(default=0, ge=0, description="stop after this many matches (0 = no limit)")

    @field_validator("directory")
    @classmethod
    def _directory_not_empty(cls, value: str) -> str:
        return _not_empty(value, "directory")


class FileQueryRequest(QueryRequest):
    """A JSONPath query against a single file."""

    path: str = Field(..., description="JSON file to query")

    @field_validator("path")
    @classmethod
    def _path_not_empty(cls, value: str) -> str:
        return _not_empty(value, "path")
