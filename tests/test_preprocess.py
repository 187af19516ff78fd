"""
Unit Tests — Report Preprocessor
================================
URL filtering, timestamp unwrapping, JSON field decoding, derived fields and
input immutability.
"""
import copy
from datetime import datetime

import pytest
from unittest.mock import MagicMock

from webcompat_triage.core.constants import UNKNOWN_DOMAIN
from webcompat_triage.pipeline.hostname import HostnameNormalizer
from webcompat_triage.pipeline.preprocess import preprocess_reports, unwrap_timestamp
from webcompat_triage.pipeline.url_patterns import preprocess_patterns


def _row(uuid, url="https://www.example.com/", **extra):
    row = {
        "uuid": uuid,
        "reported_at": {"value": "2024-05-01T10:00:00"},
        "url": url,
        "comments": "page is blank",
        "labels": ["b", "a"],
        "prediction": "valid",
        "prob": 0.9,
    }
    row.update(extra)
    return row


@pytest.fixture
def patterns():
    return preprocess_patterns([
        {"url_pattern": "*example.com", "bug": 1, "title": "Example broken"},
        {"url_pattern": "other.org/video", "bug": 2, "title": "Video"},
    ])


# ===========================================================================
# 1. URL filter
# ===========================================================================
class TestUrlFilter:

    @pytest.mark.parametrize("url", [None, ""])
    def test_reports_without_url_dropped(self, patterns, url):
        rows = [_row("a"), _row("b", url=url), _row("c")]
        result = preprocess_reports(rows, patterns)
        assert [r["uuid"] for r in result] == ["a", "c"]

    def test_missing_url_key_dropped(self, patterns):
        row = _row("a")
        del row["url"]
        assert preprocess_reports([row], patterns) == []


# ===========================================================================
# 2. Timestamp unwrapping
# ===========================================================================
class TestUnwrapTimestamp:

    def test_wrapper_object(self):
        assert unwrap_timestamp({"value": "2024-05-01T10:00:00"}) == "2024-05-01T10:00:00"

    def test_datetime_from_python_client(self):
        assert unwrap_timestamp(datetime(2024, 5, 1, 10, 0)) == "2024-05-01T10:00:00"

    def test_wrapped_datetime(self):
        assert unwrap_timestamp({"value": datetime(2024, 5, 1)}) == "2024-05-01T00:00:00"

    def test_plain_string_passthrough(self):
        assert unwrap_timestamp("2024-05-01") == "2024-05-01"

    def test_applied_during_preprocess(self, patterns):
        [report] = preprocess_reports([_row("a")], patterns)
        assert report["reported_at"] == "2024-05-01T10:00:00"


# ===========================================================================
# 3. Derived fields
# ===========================================================================
class TestDerivedFields:

    def test_related_bugs_attached(self, patterns):
        [report] = preprocess_reports([_row("a", url="https://www.example.com/x")], patterns)
        assert report["related_bugs"] == [{"number": 1, "title": "Example broken"}]

    def test_no_related_bugs(self, patterns):
        [report] = preprocess_reports([_row("a", url="https://unrelated.net/")], patterns)
        assert report["related_bugs"] == []

    def test_root_domain(self, patterns):
        [report] = preprocess_reports([_row("a", url="https://m.shop.example.co.uk/cart")], patterns)
        assert report["root_domain"] == "example.co.uk"

    def test_unparseable_url_goes_to_unknown(self, patterns):
        [report] = preprocess_reports([_row("a", url="not a url")], patterns)
        assert report["root_domain"] == UNKNOWN_DOMAIN

    def test_details_json_decoded(self, patterns):
        [report] = preprocess_reports([_row("a", details='{"gfx": {"webgl": true}}')], patterns)
        assert report["details"] == {"gfx": {"webgl": True}}

    def test_undecodable_details_kept(self, patterns):
        [report] = preprocess_reports([_row("a", details="{broken")], patterns)
        assert report["details"] == "{broken"

    def test_other_fields_copied_unchanged(self, patterns):
        [report] = preprocess_reports([_row("a", translated_from="de")], patterns)
        assert report["labels"] == ["b", "a"]
        assert report["translated_from"] == "de"
        assert report["prob"] == 0.9

    def test_shared_normalizer_is_used(self, patterns):
        normalizer = HostnameNormalizer()
        rows = [_row(str(i), url=f"https://host{i % 3}.example.com/") for i in range(9)]
        preprocess_reports(rows, patterns, normalizer)
        assert len(normalizer) == 3

    def test_shared_normalizer_cache_reused_across_calls(self, patterns):
        extractor = MagicMock(return_value=MagicMock(domain="example", suffix="com"))
        normalizer = HostnameNormalizer(extractor=extractor)
        rows = [_row("a", url="https://www.example.com/")]

        preprocess_reports(rows, patterns, normalizer)
        preprocess_reports(rows, patterns, normalizer)

        extractor.assert_called_once_with("www.example.com")


# ===========================================================================
# 4. Immutability
# ===========================================================================
def test_input_rows_not_mutated(patterns):
    rows = [_row("a", details='{"x": 1}'), _row("b", url=None)]
    snapshot = copy.deepcopy(rows)

    preprocess_reports(rows, patterns)

    assert rows == snapshot
    assert "related_bugs" not in rows[0]
    assert "root_domain" not in rows[0]
