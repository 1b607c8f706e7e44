import pytest

from backends.locator import (
    ARRAY_PRIORITY,
    BARE_PRIORITY,
    PROPERTY_PRIORITY,
    FirstLineLocator,
    LineLocatorFactory,
    RegexLineLocator,
    best_candidate,
    split_lines,
)
from backends.models import Candidate


@pytest.fixture
def locator() -> RegexLineLocator:
    return RegexLineLocator()


class TestStrings:
    def test_property_values(self, locator, config_text):
        assert locator.locate(config_text, "config.json") == 3
        assert locator.locate(config_text, "My Application") == 7
        assert locator.locate(config_text, "1.0.0") == 8

    def test_property_beats_array(self, locator):
        text = '{\n  "roles": ["guest", "admin"],\n  "owner": "admin"\n}'
        assert locator.locate(text, "admin") == 3

    def test_array_beats_bare(self, locator):
        text = '{\n  "users": [\n    "admin",\n    "guest"\n  ],\n  "primary": ["admin"]\n}'
        assert locator.locate(text, "admin") == 6

    def test_property_beats_earlier_bare_occurrence(self, locator):
        text = 'x "needle" y\n{\n  "k": "needle"\n}'
        assert locator.locate(text, "needle") == 3

    def test_property_beats_later_bare_occurrence(self, locator):
        text = '{\n  "k": "needle"\n}\nx "needle" y'
        assert locator.locate(text, "needle") == 2

    def test_ties_go_to_first_line(self, locator):
        text = '{\n  "a": "same",\n  "b": "same"\n}'
        assert locator.locate(text, "same") == 2

    def test_case_insensitive(self, locator):
        text = '{\n  "level": "Debug"\n}'
        assert locator.locate(text, "DEBUG") == 2

    def test_escaped_characters(self, locator):
        text = '{\n  "x": 1,\n  "path": "C:\\\\temp\\\\out"\n}'
        assert locator.locate(text, "C:\\temp\\out") == 3

    def test_substring_fallback(self, locator):
        text = '{\n  "a": 1,\n  "b": "prefix-needle-suffix"\n}'
        assert locator.locate(text, "needle") == 3


class TestPrimitives:
    def test_numbers(self, locator, export_text):
        assert locator.locate(export_text, 5000) == 7
        assert locator.locate(export_text, 100) == 4
        assert locator.locate(export_text, 3) == 8

    def test_number_does_not_match_longer_number(self, locator):
        text = '{\n  "id": 80801,\n  "port": 8080\n}'
        assert locator.locate(text, 8080) == 3

    def test_negative_and_float(self, locator):
        text = '{\n  "offset": -5,\n  "ratio": 0.25\n}'
        assert locator.locate(text, -5) == 2
        assert locator.locate(text, 0.25) == 3

    def test_boolean_and_null(self, locator):
        text = '{\n  "name": "x",\n  "enabled": true,\n  "parent": null\n}'
        assert locator.locate(text, True) == 3
        assert locator.locate(text, None) == 4

    def test_number_in_array(self, locator):
        text = '{\n  "ids": [7, 42, 9]\n}'
        assert locator.locate(text, 42) == 2


class TestCompound:
    def test_array_located_at_first_element(self, locator):
        text = '{\n  "name": "x",\n  "tags": [\n    "a",\n    "b"\n  ]\n}'
        assert locator.locate(text, ["a", "b"]) == 4

    def test_object_located_at_first_key(self, locator, config_text):
        assert locator.locate(config_text, {"name": "My Application", "version": "1.0.0"}) == 7

    def test_empty_compounds_stay_in_range(self, locator, config_text):
        line_count = len(split_lines(config_text))
        assert 1 <= locator.locate(config_text, []) <= line_count
        assert 1 <= locator.locate(config_text, {}) <= line_count


class TestFallbacks:
    def test_missing_value_is_line_one(self, locator, config_text):
        assert locator.locate(config_text, "not present anywhere") == 1
        assert locator.locate(config_text, 123456) == 1

    def test_empty_text(self, locator):
        assert locator.locate("", "anything") == 1

    def test_result_always_in_range(self, locator, export_text):
        line_count = len(split_lines(export_text))
        for value in ["export", 100, 5000, 3, True, None, [1, 2], {"k": "v"}, "zzz"]:
            assert 1 <= locator.locate(export_text, value) <= line_count

    def test_deterministic(self, locator, config_text):
        first = [locator.locate(config_text, v) for v in ("config.json", "My Application", 1)]
        second = [locator.locate(config_text, v) for v in ("config.json", "My Application", 1)]
        assert first == second

    def test_crlf_line_endings(self, locator, export_text):
        crlf = export_text.replace("\n", "\r\n")
        assert locator.locate(crlf, 5000) == 7
        assert locator.locate(crlf, 100) == 4


class TestHelpers:
    def test_split_lines(self):
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]
        assert split_lines("") == [""]

    def test_best_candidate(self):
        candidates = [
            Candidate(line=2, priority=BARE_PRIORITY),
            Candidate(line=5, priority=PROPERTY_PRIORITY),
            Candidate(line=3, priority=ARRAY_PRIORITY),
            Candidate(line=9, priority=PROPERTY_PRIORITY),
        ]
        assert best_candidate(candidates).line == 5
        assert best_candidate([]) is None


class TestLineLocatorFactory:
    def test_create_locators(self):
        assert isinstance(LineLocatorFactory.create_locator("regex"), RegexLineLocator)
        assert isinstance(LineLocatorFactory.create_locator("NONE"), FirstLineLocator)

    def test_first_line_locator(self, config_text):
        assert FirstLineLocator().locate(config_text, "My Application") == 1

    def test_unsupported(self):
        with pytest.raises(ValueError):
            LineLocatorFactory.create_locator("ast")
