from .config import SearchConfig
from .exceptions import FileTooLargeError, JsonSearchError, QueryEvaluationError, SearchRootError
from .limiters import FileSizeLimiter, MatchLimiter
from .models import FileQueryRequest, SearchRequest
from .template_manager import TemplateManager

__all__ = [
    "SearchConfig",
    "SearchRequest",
    "FileQueryRequest",
    "TemplateManager",
    "MatchLimiter",
    "FileSizeLimiter",
    "JsonSearchError",
    "SearchRootError",
    "QueryEvaluationError",
    "FileTooLargeError",
]
