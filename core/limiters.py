"""Resource limiters for searches (match count and file size limits)."""

import os

from core.exceptions import FileTooLargeError


class MatchLimiter:
    """Limits the number of matches a search may produce."""

    def __init__(self, max_matches: int = 0) -> None:
        """Initialize match limiter.

        Args:
            max_matches: Maximum number of matches, 0 for no limit
        """
        if max_matches < 0:
            raise ValueError("max_matches must be >= 0")
        self.max_matches = max_matches
        self.match_count = 0

    @property
    def unlimited(self) -> bool:
        return self.max_matches == 0

    def increment(self) -> None:
        """Count one match."""
        self.match_count += 1

    def exhausted(self) -> bool:
        """Return True once no further match fits in the limit."""
        return not self.unlimited and self.match_count >= self.max_matches


class FileSizeLimiter:
    """Rejects files larger than a byte limit before they are read."""

    def __init__(self, max_bytes: int = 0) -> None:
        """Initialize file size limiter.

        Args:
            max_bytes: Largest accepted file size in bytes, 0 for no limit
        """
        if max_bytes < 0:
            raise ValueError("max_bytes must be >= 0")
        self.max_bytes = max_bytes

    def check(self, path: str) -> None:
        """Raise if the file at path is over the limit.

        Raises:
            FileTooLargeError: If the file is larger than max_bytes
            OSError: If the file cannot be stat'ed
        """
        if not self.max_bytes:
            return
        size = os.path.getsize(path)
        if size > self.max_bytes:
            raise FileTooLargeError(path, size, self.max_bytes)
