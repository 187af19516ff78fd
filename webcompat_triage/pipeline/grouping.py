"""
Grouping / Partitioning Engine
==============================
Groups preprocessed reports by root_domain and shapes each group for a view.

Group Emission Order:
    Groups come out in first-seen-domain order. Ordering by size is the
    Ranking engine's job; keeping this step deterministic is what makes two
    runs over the same rows serialize byte-identically.

Policies:
    partition_by_known_bugs  — {root_domain, known_reports, unknown_reports}
                               "known" = at least one related bug.
    select_actionable        — {root_domain, reports_count, reports}
                               reports = first 10 eligible reports, minus the
                               ones that already have a moderation action.

Actionable Subset (slice THEN filter):
    Eligible means a non-empty comment and an ML prediction of "valid". The
    first ACTIONABLE_SUBSET_LIMIT eligible reports are taken in incoming
    order (the warehouse sorts by comment length, longest first), and only
    then are actioned reports removed. The subset therefore shrinks as
    reviewers work through it and is never back-filled from report 11+.
"""
from typing import Dict, Iterable, List, Optional

from webcompat_triage.core.constants import ACTIONABLE_SUBSET_LIMIT, PREDICTION_ALL, PREDICTION_VALID
from webcompat_triage.models.report import ActionableGroup, PartitionedGroup, PreprocessedReport


def group_by_domain(reports: Iterable[PreprocessedReport]) -> Dict[str, List[PreprocessedReport]]:
    """Bucket reports by root_domain, preserving first-seen domain and report order."""
    groups: Dict[str, List[PreprocessedReport]] = {}
    for report in reports:
        groups.setdefault(report["root_domain"], []).append(report)
    return groups


def has_known_bug(report: PreprocessedReport) -> bool:
    return len(report.get("related_bugs") or []) > 0


def partition_by_known_bugs(reports: Iterable[PreprocessedReport]) -> List[PartitionedGroup]:
    """
    Split every domain group into reports with and without related bugs.

    known_reports + unknown_reports always equals the group's report count;
    no group is ever built without at least one report.
    """
    partitioned: List[PartitionedGroup] = []
    for root_domain, domain_reports in group_by_domain(reports).items():
        known = [r for r in domain_reports if has_known_bug(r)]
        unknown = [r for r in domain_reports if not has_known_bug(r)]
        partitioned.append({
            "root_domain": root_domain,
            "known_reports": known,
            "unknown_reports": unknown,
        })
    return partitioned


def is_triage_eligible(report: PreprocessedReport) -> bool:
    """A report is worth triaging if it has a comment and the model calls it valid."""
    return bool(report.get("comments")) and report.get("prediction") == PREDICTION_VALID


def actionable_subset(
    domain_reports: List[PreprocessedReport],
    limit: int = ACTIONABLE_SUBSET_LIMIT,
) -> List[PreprocessedReport]:
    """Take the first *limit* eligible reports, then drop already-actioned ones."""
    top = [r for r in domain_reports if is_triage_eligible(r)][:limit]
    return [r for r in top if r.get("has_actions") is not True]


def select_actionable(
    reports: Iterable[PreprocessedReport],
    limit: int = ACTIONABLE_SUBSET_LIMIT,
) -> List[ActionableGroup]:
    """
    Build the per-domain actionable view.

    reports_count is the size of the whole domain group, before any
    eligibility or action filtering.
    """
    return [
        {
            "root_domain": root_domain,
            "reports_count": len(domain_reports),
            "reports": actionable_subset(domain_reports, limit),
        }
        for root_domain, domain_reports in group_by_domain(reports).items()
    ]


def filter_by_prediction(
    reports: Iterable[PreprocessedReport],
    prediction_filter: Optional[str],
) -> List[PreprocessedReport]:
    """Keep reports whose prediction equals the filter; no filter or "all" keeps everything."""
    if not prediction_filter or prediction_filter == PREDICTION_ALL:
        return list(reports)
    return [r for r in reports if r.get("prediction") == prediction_filter]
