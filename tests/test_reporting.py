import json

import pytest

from backends.models import SearchMatch, SearchReport, SkippedPath, SkipReason
from core.reporting import render_report, report_to_dict


@pytest.fixture
def report() -> SearchReport:
    return SearchReport(
        root="/data",
        query="$.name",
        matches=[
            SearchMatch(file_path="/data/a.json", matched_value="alpha", line_number=2),
            SearchMatch(file_path="/data/b.json", matched_value={"first": "<b>bold</b>"}, line_number=5),
        ],
        skipped=[SkippedPath(path="/data/c.json", reason=SkipReason.MALFORMED_JSON, message="Expecting value")],
        files_scanned=3,
    )


class TestReportToDict:
    def test_keys(self, report):
        data = report_to_dict(report)
        assert data["root"] == "/data"
        assert data["filesScanned"] == 3
        assert data["truncated"] is False
        assert data["matches"][0] == {"filePath": "/data/a.json", "matchedValue": "alpha", "lineNumber": 2}
        assert data["skipped"][0]["reason"] == "malformed_json"


class TestRenderReport:
    def test_text(self, report):
        lines = render_report(report, "text").splitlines()
        assert lines[0] == "/data/a.json:2: alpha"
        assert lines[1] == '/data/b.json:5: {"first": "<b>bold</b>"}'
        assert lines[-1] == "Found 2 result(s) in 3 file(s), 1 skipped"
        assert "skipped /data/c.json" not in "\n".join(lines)

    def test_text_with_skipped(self, report):
        text = render_report(report, "text", show_skipped=True)
        assert "skipped /data/c.json (malformed_json): Expecting value" in text

    def test_text_truncated(self, report):
        report.truncated = True
        assert render_report(report, "text").rstrip().endswith("(truncated)")

    def test_json(self, report):
        assert json.loads(render_report(report, "json")) == report_to_dict(report)

    def test_html_escapes_values(self, report):
        html = render_report(report, "html", show_skipped=True)
        assert "<title>JSONPath Results (2 matches)</title>" in html
        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert "<b>bold</b>" not in html
        assert "<td>5</td>" in html
        assert "malformed_json" in html

    def test_empty_report(self):
        text = render_report(SearchReport(root="/data", query="$.x"), "text")
        assert text.strip() == "Found 0 result(s) in 0 file(s)"

    def test_unknown_format(self, report):
        with pytest.raises(ValueError):
            render_report(report, "xml")
