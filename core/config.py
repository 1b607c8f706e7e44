"""Configuration for the JSON search engine."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class SearchConfig:
    """Search settings read from environment variables."""

    def __init__(self) -> None:
        """Initialize search configuration from environment variables."""
        self.locator_backend = os.getenv("JSONSEARCH_LOCATOR", "regex").lower()
        self.evaluator_backend = os.getenv("JSONSEARCH_EVALUATOR", "jsonpath-ng").lower()
        self.fetcher_backend = os.getenv("JSONSEARCH_FETCHER", "local").lower()

        self.follow_symlinks = self._get_bool("JSONSEARCH_FOLLOW_SYMLINKS", False)
        self.sort_entries = self._get_bool("JSONSEARCH_SORT_ENTRIES", True)

        # 0 disables the limit
        self.max_results = self._get_int("JSONSEARCH_MAX_RESULTS", 0)
        self.max_file_bytes = self._get_int("JSONSEARCH_MAX_FILE_BYTES", 0)
        self.workers = max(1, self._get_int("JSONSEARCH_WORKERS", 1))

        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def logging_level(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer environment variable or raise descriptive error."""
        value = os.getenv(key)
        if value is None or value.strip() == "":
            return default
        try:
            number = int(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {value!r}")
        if number < 0:
            raise ValueError(f"Environment variable {key} must be >= 0, got {number}")
        return number
