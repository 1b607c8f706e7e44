"""Line locators that map parsed JSON values back to lines of the source text.

Once a document has been parsed the values carry no position, so the regex
locator searches the raw text for the literal and ranks every hit:

    priority 1  the value is a property value      "key": value
    priority 2  the value sits inside a [...] span
    priority 3  the value occurs anywhere on the line

Each line yields at most one candidate, the best candidate wins and ties go to
the earliest line. Objects and arrays are located on a best-effort basis only.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from operator import attrgetter
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from backends.models import Candidate, JsonKind

logger = logging.getLogger(__name__)

PROPERTY_PRIORITY = 1
ARRAY_PRIORITY = 2
BARE_PRIORITY = 3

SNIPPET_LENGTH = 50
MIN_SNIPPET_LENGTH = 10

_STANDALONE_BEFORE = frozenset(":[ \t")
_STANDALONE_AFTER = frozenset(",}] \t")
_WORD_CHAR = re.compile(r"\w")


class _LinePattern(NamedTuple):
    priority: int
    regex: re.Pattern
    accept: Optional[Callable[[str, "re.Match"], bool]] = None


def split_lines(text: str) -> List[str]:
    """Split text on newlines, dropping the carriage return of CRLF endings."""
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def best_candidate(candidates: List[Candidate]) -> Optional[Candidate]:
    """Pick the lowest priority number; the sort is stable so ties keep file order."""
    if not candidates:
        return None
    return sorted(candidates, key=attrgetter("priority"))[0]


def _json_literal(value: str) -> str:
    """Return a string as it appears between the quotes of a JSON document."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


def _word_bounded(literal: str) -> str:
    escaped = re.escape(literal)
    prefix = r"\b" if _WORD_CHAR.match(literal[:1]) else ""
    suffix = r"\b" if _WORD_CHAR.match(literal[-1:]) else ""
    return prefix + escaped + suffix


def _is_standalone(line: str, match: "re.Match") -> bool:
    before = line[match.start() - 1] if match.start() > 0 else ""
    after = line[match.end()] if match.end() < len(line) else ""
    return before in _STANDALONE_BEFORE and (after == "" or after in _STANDALONE_AFTER)


def _first_containing(lines: List[str], needle: str) -> Optional[int]:
    for number, line in enumerate(lines, start=1):
        if needle in line:
            return number
    return None


class AbstractLineLocator(ABC):
    """Abstract base class for line locators."""

    @abstractmethod
    def locate(self, text: str, value: Any) -> int:
        """Find the line a value most likely came from.

        Args:
            text: Raw text of the JSON document
            value: A value taken from the parsed document

        Returns:
            1-based line number, between 1 and the number of lines in text
        """
        pass


class FirstLineLocator(AbstractLineLocator):
    """Locator that skips position lookup and always reports line 1."""

    def locate(self, text: str, value: Any) -> int:
        return 1


class RegexLineLocator(AbstractLineLocator):
    """Heuristic locator based on prioritised regular expressions."""

    def __init__(self) -> None:
        self._strategies: Dict[JsonKind, Callable[[List[str], Any], Optional[int]]] = {
            JsonKind.STRING: self._find_string,
            JsonKind.NUMBER: self._find_primitive,
            JsonKind.BOOLEAN: self._find_primitive,
            JsonKind.NULL: self._find_primitive,
            JsonKind.ARRAY: self._find_array,
            JsonKind.OBJECT: self._find_object,
        }

    def locate(self, text: str, value: Any) -> int:
        """Locate a value, falling back to line 1 when nothing matches."""
        lines = split_lines(text)
        try:
            found = self.find(lines, value)
        except Exception as exc:
            logger.debug(f"Line lookup failed for {value!r}: {exc}")
            found = None
        if found is None:
            return 1
        return min(max(found, 1), len(lines))

    def find(self, lines: List[str], value: Any) -> Optional[int]:
        """Locate a value in pre-split lines.

        Returns:
            1-based line number, or None when no heuristic matched
        """
        return self._strategies[JsonKind.of(value)](lines, value)

    def _scan(self, lines: List[str], patterns: List[_LinePattern]) -> List[Candidate]:
        candidates = []
        for number, line in enumerate(lines, start=1):
            for pattern in patterns:
                match = pattern.regex.search(line)
                if match is None:
                    continue
                if pattern.accept is None or pattern.accept(line, match):
                    candidates.append(Candidate(line=number, priority=pattern.priority, content=line))
                break
        return candidates

    def _find_string(self, lines: List[str], value: str) -> Optional[int]:
        quoted = '"' + re.escape(_json_literal(value)) + '"'
        patterns = [
            _LinePattern(PROPERTY_PRIORITY, re.compile(r'"[^"]*":\s*' + quoted, re.IGNORECASE)),
            _LinePattern(ARRAY_PRIORITY, re.compile(r"\[[^\]]*" + quoted + r"[^\]]*\]", re.IGNORECASE)),
            _LinePattern(BARE_PRIORITY, re.compile(quoted, re.IGNORECASE)),
        ]
        candidate = best_candidate(self._scan(lines, patterns))
        if candidate is not None:
            return candidate.line
        return _first_containing(lines, value)

    def _find_primitive(self, lines: List[str], value: Any) -> Optional[int]:
        literal = json.dumps(value)
        escaped = re.escape(literal)
        bounded = _word_bounded(literal)
        patterns = [
            _LinePattern(
                PROPERTY_PRIORITY,
                re.compile(r'"[^"]*":\s*' + escaped + r"\s*[,}\]]", re.IGNORECASE),
            ),
            _LinePattern(
                ARRAY_PRIORITY,
                re.compile(r"\[[^\]]*" + bounded + r"[^\]]*\]", re.IGNORECASE),
            ),
            _LinePattern(BARE_PRIORITY, re.compile(bounded, re.IGNORECASE), _is_standalone),
        ]
        candidate = best_candidate(self._scan(lines, patterns))
        if candidate is not None:
            return candidate.line
        return _first_containing(lines, literal)

    def _find_array(self, lines: List[str], value: List[Any]) -> Optional[int]:
        if value:
            # Later "[" lines only see a suffix of the same text, so the first one decides.
            start = next((index for index, line in enumerate(lines) if "[" in line), None)
            if start is not None:
                found = self.find(lines[start:], value[0])
                if found is not None:
                    return start + found
        return self._find_snippet(lines, value)

    def _find_object(self, lines: List[str], value: Dict[str, Any]) -> Optional[int]:
        if value:
            first_key = next(iter(value))
            found = _first_containing(lines, '"' + _json_literal(str(first_key)) + '"')
            if found is None:
                found = self.find(lines, value[first_key])
            if found is not None:
                return found
        return self._find_snippet(lines, value)

    def _find_snippet(self, lines: List[str], value: Any) -> Optional[int]:
        serialized = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        if len(serialized) <= MIN_SNIPPET_LENGTH:
            return None
        return _first_containing(lines, serialized[:SNIPPET_LENGTH][1:-1])


class LineLocatorFactory:
    """Factory for creating line locators."""

    @staticmethod
    def create_locator(strategy: str = "regex") -> AbstractLineLocator:
        """Create a line locator.

        Args:
            strategy: Locator name ('regex' or 'none')

        Returns:
            Line locator instance

        Raises:
            ValueError: If strategy is not supported
        """
        strategy = strategy.lower()
        if strategy == "regex":
            return RegexLineLocator()
        elif strategy == "none":
            return FirstLineLocator()
        else:
            raise ValueError(f"Unsupported line locator: {strategy}")
