"""Backend models for JSON search results and line location."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class JsonKind(Enum):
    """Kind of a parsed JSON value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def of(cls, value: Any) -> "JsonKind":
        """Classify a value produced by the JSON parser.

        Raises:
            TypeError: If the value is not a JSON value
        """
        # bool is a subclass of int
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, (int, float)):
            return cls.NUMBER
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, (list, tuple)):
            return cls.ARRAY
        if isinstance(value, dict):
            return cls.OBJECT
        raise TypeError(f"Not a JSON value: {type(value).__name__}")


@dataclass(frozen=True)
class Candidate:
    """A line that matched one of the locator patterns."""

    line: int
    priority: int
    content: str = ""


@dataclass(frozen=True)
class SearchMatch:
    """Represents a single JSONPath match in a file."""

    file_path: str
    matched_value: Any
    line_number: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filePath": self.file_path,
            "matchedValue": self.matched_value,
            "lineNumber": self.line_number,
        }


class SkipReason(Enum):
    """Why a path was left out of the search."""

    UNREADABLE_DIRECTORY = "unreadable_directory"
    UNREADABLE_FILE = "unreadable_file"
    FILE_TOO_LARGE = "file_too_large"
    MALFORMED_JSON = "malformed_json"
    QUERY_FAILED = "query_failed"
    NESTED_TOO_DEEP = "nested_too_deep"


@dataclass(frozen=True)
class SkippedPath:
    """A directory or file that was skipped because of an error."""

    path: str
    reason: SkipReason
    message: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "reason": self.reason.value, "message": self.message}


@dataclass
class FileOutcome:
    """Outcome of searching one file: matches, or the reason it was skipped."""

    path: str
    matches: List[SearchMatch] = field(default_factory=list)
    skipped: Optional[SkippedPath] = None

    @property
    def ok(self) -> bool:
        return self.skipped is None


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a directory listing."""

    path: str
    name: str
    is_dir: bool = False
    is_file: bool = False
    is_symlink: bool = False


@dataclass
class SearchReport:
    """Aggregated result of searching a directory tree."""

    root: str
    query: str
    matches: List[SearchMatch] = field(default_factory=list)
    skipped: List[SkippedPath] = field(default_factory=list)
    files_scanned: int = 0
    truncated: bool = False
    elapsed_seconds: float = 0.0

    @property
    def match_count(self) -> int:
        return len(self.matches)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
