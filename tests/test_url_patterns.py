"""
Unit Tests — URL Pattern Matcher
================================
Single-wildcard stripping and order-preserving substring matching.
"""
from webcompat_triage.pipeline.url_patterns import match_bugs, preprocess_patterns


def _pattern(text, bug, title=None):
    return {"url_pattern": text, "bug": bug, "title": title}


# ===========================================================================
# 1. preprocess_patterns
# ===========================================================================
class TestPreprocessPatterns:

    def test_strips_leading_wildcard(self):
        [cleaned] = preprocess_patterns([_pattern("*example.com", 1)])
        assert cleaned["url_pattern"] == "example.com"

    def test_strips_only_first_wildcard(self):
        [cleaned] = preprocess_patterns([_pattern("*.example.com/*", 1)])
        assert cleaned["url_pattern"] == ".example.com/*"

    def test_no_wildcard_untouched(self):
        [cleaned] = preprocess_patterns([_pattern("example.com/login", 1)])
        assert cleaned["url_pattern"] == "example.com/login"

    def test_input_not_mutated(self):
        raw = _pattern("*example.com", 7, "Broken login")
        preprocess_patterns([raw])
        assert raw["url_pattern"] == "*example.com"

    def test_other_fields_copied(self):
        [cleaned] = preprocess_patterns([_pattern("*example.com", 7, "Broken login")])
        assert cleaned["bug"] == 7
        assert cleaned["title"] == "Broken login"

    def test_regex_characters_are_literal(self):
        [cleaned] = preprocess_patterns([_pattern("example.com/?q=(a|b)", 1)])
        assert cleaned["url_pattern"] == "example.com/?q=(a|b)"


# ===========================================================================
# 2. match_bugs
# ===========================================================================
class TestMatchBugs:

    def test_substring_match(self):
        patterns = preprocess_patterns([_pattern("example.com", 100, "Layout broken")])
        assert match_bugs("https://www.example.com/page", patterns) == [
            {"number": 100, "title": "Layout broken"}
        ]

    def test_no_match(self):
        patterns = preprocess_patterns([_pattern("other.org", 100)])
        assert match_bugs("https://www.example.com/", patterns) == []

    def test_order_follows_patterns(self):
        patterns = preprocess_patterns([
            _pattern("example.com/a", 3),
            _pattern("nomatch", 4),
            _pattern("example.com", 1),
            _pattern("*/a", 2),
        ])
        result = match_bugs("https://example.com/a", patterns)
        assert [b["number"] for b in result] == [3, 1, 2]

    def test_duplicates_not_merged(self):
        patterns = preprocess_patterns([
            _pattern("example.com", 42, "Same bug"),
            _pattern("*example.com", 42, "Same bug"),
        ])
        assert match_bugs("https://example.com/", patterns) == [
            {"number": 42, "title": "Same bug"},
            {"number": 42, "title": "Same bug"},
        ]

    def test_case_sensitive(self):
        patterns = preprocess_patterns([_pattern("Example.com", 1)])
        assert match_bugs("https://example.com/", patterns) == []

    def test_not_url_structural(self):
        # A host pattern also matches when it only appears in the query string
        patterns = preprocess_patterns([_pattern("example.com", 9)])
        assert match_bugs("https://tracker.net/?ref=example.com", patterns) == [
            {"number": 9, "title": None}
        ]

    def test_remaining_wildcard_is_literal(self):
        patterns = preprocess_patterns([_pattern("*example.com/*", 5)])
        assert match_bugs("https://example.com/page", patterns) == []
        assert match_bugs("https://example.com/*", patterns) == [{"number": 5, "title": None}]

    def test_missing_title_is_none(self):
        patterns = preprocess_patterns([{"url_pattern": "example.com", "bug": 11}])
        assert match_bugs("https://example.com/", patterns) == [{"number": 11, "title": None}]
