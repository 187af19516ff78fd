"""
URL Pattern Matcher
===================
Links reports to known bugs through the knowledge base's URL patterns.

Matching Policy (intentionally simple):
    - Each pattern has its FIRST "*" removed, nothing else. This is not glob
      expansion: "*.example.com/*" becomes ".example.com/*".
    - A pattern matches when its cleaned text is a case-sensitive substring of
      the report URL. Host, path and query are not distinguished.
    - Every matching pattern yields one RelatedBug, in pattern order. Two
      patterns pointing at the same bug produce two entries.

Changing any of the above alters which reports count as "known" and must be
treated as a behaviour change, not a fix.
"""
from typing import Iterable, List

from webcompat_triage.models.report import RelatedBug, UrlPattern


def preprocess_patterns(patterns: Iterable[UrlPattern]) -> List[UrlPattern]:
    """
    Copy each pattern and strip the first wildcard from its text.

    Input rows are not modified.
    """
    prepared: List[UrlPattern] = []
    for pattern in patterns:
        cleaned = dict(pattern)
        cleaned["url_pattern"] = (pattern.get("url_pattern") or "").replace("*", "", 1)
        prepared.append(cleaned)
    return prepared


def match_bugs(url: str, patterns: Iterable[UrlPattern]) -> List[RelatedBug]:
    """
    Return the bugs of every pattern contained in *url*.

    Parameters
    ----------
    url : str
        Report URL.
    patterns : Iterable[UrlPattern]
        Patterns already passed through preprocess_patterns().

    Returns
    -------
    List[RelatedBug]
        One {number, title} per matching pattern, pattern order, no dedup.
    """
    return [
        {"number": pattern.get("bug"), "title": pattern.get("title")}
        for pattern in patterns
        if pattern["url_pattern"] in url
    ]
