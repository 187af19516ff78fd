"""
Report Shapes
=============
TypedDict definitions for the rows flowing through the transform pipeline.

Warehouse rows are plain mappings and are kept as dicts end to end: the
pipeline shallow-copies them and adds derived keys, so every column the
warehouse returns survives into the serialized view model.

Shapes:
    UrlPattern           — knowledge-base row (url_pattern, bug, title)
    RelatedBug           — {number, title} derived per report
    PreprocessedReport   — warehouse row + related_bugs + root_domain
    PartitionedGroup     — {root_domain, known_reports, unknown_reports}
    ActionableGroup      — {root_domain, reports_count, reports}
"""
from typing import Any, List, Optional, TypedDict


class UrlPattern(TypedDict, total=False):
    url_pattern: str
    bug: int
    title: Optional[str]


class RelatedBug(TypedDict):
    number: int
    title: Optional[str]


class PreprocessedReport(TypedDict, total=False):
    uuid: str
    reported_at: Any
    url: str
    comments: Optional[str]
    app_name: Optional[str]
    app_version: Optional[str]
    app_channel: Optional[str]
    app_major_version: Optional[str]
    os: Optional[str]
    ua_string: Optional[str]
    breakage_category: Optional[str]
    tp_status: Optional[str]
    translated_comments: Optional[str]
    translated_from: Optional[str]
    labels: List[str]
    prediction: Optional[str]
    prob: Optional[float]
    has_actions: bool
    action: Optional[str]
    details: Any

    # Derived per run
    related_bugs: List[RelatedBug]
    root_domain: str


class PartitionedGroup(TypedDict):
    root_domain: str
    known_reports: List[PreprocessedReport]
    unknown_reports: List[PreprocessedReport]


class ActionableGroup(TypedDict):
    root_domain: str
    reports_count: int
    reports: List[PreprocessedReport]
