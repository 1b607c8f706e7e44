"""Content fetcher backends for reading directories and JSON files."""

import os
from abc import ABC, abstractmethod
from typing import List, Optional

from backends.models import DirectoryEntry
from core.limiters import FileSizeLimiter


class AbstractContentFetcher(ABC):
    """Abstract base class for content fetchers."""

    @abstractmethod
    def list_entries(self, directory: str) -> List[DirectoryEntry]:
        """List a directory.

        Args:
            directory: Directory path

        Returns:
            Entries in the order the underlying listing returns them

        Raises:
            OSError: If the directory cannot be listed
        """
        pass

    @abstractmethod
    def get_content(self, path: str) -> str:
        """Get the raw text of a file.

        Args:
            path: File path

        Returns:
            File content

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid UTF-8
            FileTooLargeError: If the file is over the size limit
        """
        pass


class LocalContentFetcher(AbstractContentFetcher):
    """Content fetcher for the local filesystem."""

    def __init__(self, max_file_bytes: int = 0, encoding: str = "utf-8-sig") -> None:
        """Initialize local content fetcher.

        Args:
            max_file_bytes: Largest file that will be read, 0 for no limit
            encoding: Text encoding; the default also drops a leading BOM
        """
        self._size_limiter = FileSizeLimiter(max_bytes=max_file_bytes)
        self.encoding = encoding

    def list_entries(self, directory: str) -> List[DirectoryEntry]:
        entries = []
        with os.scandir(directory) as listing:
            for entry in listing:
                entries.append(
                    DirectoryEntry(
                        path=entry.path,
                        name=entry.name,
                        is_dir=self._safe_check(entry.is_dir),
                        is_file=self._safe_check(entry.is_file),
                        is_symlink=self._safe_check(entry.is_symlink),
                    )
                )
        return entries

    def get_content(self, path: str) -> str:
        self._size_limiter.check(path)
        with open(path, "r", encoding=self.encoding) as f:
            return f.read()

    @staticmethod
    def _safe_check(check) -> bool:
        # Entries can vanish between listing and stat; treat them as neither file nor dir.
        try:
            return check()
        except OSError:
            return False


class ContentFetcherFactory:
    """Factory for creating content fetchers."""

    @staticmethod
    def create_fetcher(backend: str = "local", **kwargs) -> AbstractContentFetcher:
        """Create a content fetcher for the given backend.

        Args:
            backend: Backend name ('local')
            **kwargs: Backend-specific configuration

        Returns:
            Content fetcher instance

        Raises:
            ValueError: If backend is not supported
        """
        backend = backend.lower()
        if backend == "local":
            max_file_bytes: Optional[int] = kwargs.get("max_file_bytes")
            return LocalContentFetcher(max_file_bytes=max_file_bytes or 0)
        else:
            raise ValueError(f"Unsupported content fetcher: {backend}")
