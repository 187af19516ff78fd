"""
Report Preprocessor
===================
Turns raw warehouse rows into the internal report shape.

Per row:
    1. Drop the row entirely if it has no URL (never processed further).
    2. Shallow-copy; the warehouse row itself is never mutated.
    3. Unwrap reported_at to a plain timestamp string.
    4. JSON-decode nested fields stored as strings (legacy "details").
    5. Attach related_bugs (URL Pattern Matcher).
    6. Attach root_domain (Hostname Normalizer, "[unknown]" on parse failure).
"""
import json
import logging
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional

from webcompat_triage.models.report import PreprocessedReport, UrlPattern
from webcompat_triage.pipeline.hostname import HostnameNormalizer
from webcompat_triage.pipeline.url_patterns import match_bugs

logger = logging.getLogger(__name__)

# Columns stored as JSON-as-string in the warehouse
_JSON_FIELDS = ("details",)


def unwrap_timestamp(value: Any) -> Any:
    """
    Return reported_at as a plain value.

    The Node BigQuery driver wraps DATETIME columns as {"value": "..."}; the
    Python client returns datetime objects. Both are reduced to an ISO string.
    """
    if isinstance(value, Mapping):
        value = value.get("value")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _decode_json_fields(report: dict) -> None:
    for field in _JSON_FIELDS:
        raw = report.get(field)
        if not isinstance(raw, (str, bytes)):
            continue
        try:
            report[field] = json.loads(raw)
        except ValueError:
            logger.warning("Report %s has undecodable %s, keeping raw value", report.get("uuid"), field)


def preprocess_report(
    report: Mapping[str, Any],
    prepared_patterns: List[UrlPattern],
    normalizer: HostnameNormalizer,
) -> PreprocessedReport:
    """Build one PreprocessedReport from a row that is known to carry a URL."""
    processed = dict(report)
    processed["reported_at"] = unwrap_timestamp(report.get("reported_at"))
    _decode_json_fields(processed)
    processed["related_bugs"] = match_bugs(report["url"], prepared_patterns)
    processed["root_domain"] = normalizer.root_domain_for_url(report["url"])
    return processed


def preprocess_reports(
    raw_reports: Iterable[Mapping[str, Any]],
    prepared_patterns: List[UrlPattern],
    normalizer: Optional[HostnameNormalizer] = None,
) -> List[PreprocessedReport]:
    """
    Filter and normalise warehouse rows.

    Parameters
    ----------
    raw_reports : Iterable[Mapping]
        Rows as returned by the warehouse.
    prepared_patterns : List[UrlPattern]
        Output of preprocess_patterns().
    normalizer : HostnameNormalizer, optional
        Per-run normaliser. A fresh one is created when omitted.

    Returns
    -------
    List[PreprocessedReport]
        Reports in incoming order, URL-less rows removed.
    """
    if normalizer is None:
        normalizer = HostnameNormalizer()
    processed: List[PreprocessedReport] = []
    dropped = 0

    for report in raw_reports:
        if not report.get("url"):
            dropped += 1
            continue
        processed.append(preprocess_report(report, prepared_patterns, normalizer))

    if dropped:
        logger.debug("Dropped %d report(s) without a URL", dropped)
    return processed
