"""Rendering of search reports as text, JSON or HTML."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from backends.models import SearchReport
from core.template_manager import TemplateManager

REPORTS_FILE = Path(__file__).parent / "templates" / "reports.yaml"
REPORT_FORMATS = ("text", "json", "html")


@lru_cache(maxsize=None)
def _templates(autoescape: bool) -> TemplateManager:
    return TemplateManager(file_path=REPORTS_FILE, section_path="reports", autoescape=autoescape)


def report_to_dict(report: SearchReport) -> Dict[str, Any]:
    return {
        "root": report.root,
        "query": report.query,
        "matches": [match.to_dict() for match in report.matches],
        "skipped": [skipped.to_dict() for skipped in report.skipped],
        "filesScanned": report.files_scanned,
        "truncated": report.truncated,
    }


def render_report(report: SearchReport, fmt: str = "text", show_skipped: bool = False) -> str:
    """Render a search report.

    Args:
        report: Result of a search
        fmt: One of 'text', 'json' or 'html'
        show_skipped: Include the skipped paths in text and HTML output

    Raises:
        ValueError: If the format is not supported
    """
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False)
    elif fmt == "text":
        return _templates(False).render("text", report=report, show_skipped=show_skipped)
    elif fmt == "html":
        return _templates(True).render("html", report=report, show_skipped=show_skipped)
    else:
        raise ValueError(f"Unsupported report format: {fmt}")
