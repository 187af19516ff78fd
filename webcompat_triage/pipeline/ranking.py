"""
Ranking / Sort Engine
=====================
Context-dependent orderings for groups and flat report lists.

Group orderings:
    sort_by_unknown_count  — known/unknown view, most unknown reports first
    sort_by_reports_count  — actionable view, largest pre-filter total first

Flat report ordering (classified reports), three named cases:
    filter "valid"   → ascending prob
    filter "invalid" → ascending prob (same as "valid", mirrors the warehouse
                       query behaviour the dashboard was built against)
    filter "all"     → valid first, then invalid, then anything else;
                       valid by descending prob, invalid by ascending prob,
                       others keep their incoming order

A missing filter is treated as "all". Every ordering uses Python's stable
sort, so ties keep their incoming order.
"""
from typing import Callable, Dict, List, Optional, Tuple

from webcompat_triage.core.constants import PREDICTION_ALL, PREDICTION_INVALID, PREDICTION_VALID
from webcompat_triage.models.report import ActionableGroup, PartitionedGroup, PreprocessedReport

# Position of each prediction under the "all" ordering
_PREDICTION_RANK: Dict[Optional[str], int] = {
    PREDICTION_VALID: 0,
    PREDICTION_INVALID: 1,
}
_OTHER_RANK = 2


def sort_by_unknown_count(groups: List[PartitionedGroup]) -> List[PartitionedGroup]:
    return sorted(groups, key=lambda g: len(g["unknown_reports"]), reverse=True)


def sort_by_reports_count(groups: List[ActionableGroup]) -> List[ActionableGroup]:
    return sorted(groups, key=lambda g: g["reports_count"], reverse=True)


def _prob(report: PreprocessedReport) -> float:
    prob = report.get("prob")
    return float(prob) if prob is not None else 0.0


def probability_key(report: PreprocessedReport) -> float:
    """Key for the "valid" / "invalid" filters: ascending probability."""
    return _prob(report)


def prediction_key(report: PreprocessedReport) -> Tuple[int, float]:
    """
    Key for the "all" filter.

    Primary: valid < invalid < other. Secondary: -prob for valid (descending),
    prob for invalid (ascending), 0 for other (incoming order).
    """
    prediction = report.get("prediction")
    rank = _PREDICTION_RANK.get(prediction, _OTHER_RANK)
    if prediction == PREDICTION_VALID:
        return rank, -_prob(report)
    if prediction == PREDICTION_INVALID:
        return rank, _prob(report)
    return rank, 0.0


def classified_sort_key(prediction_filter: Optional[str]) -> Callable[[PreprocessedReport], object]:
    """Pick the sort key for the active prediction filter."""
    if prediction_filter in (PREDICTION_VALID, PREDICTION_INVALID):
        return probability_key
    return prediction_key


def sort_classified_reports(
    reports: List[PreprocessedReport],
    prediction_filter: Optional[str] = PREDICTION_ALL,
) -> List[PreprocessedReport]:
    """Return a new list ordered according to the active prediction filter."""
    return sorted(reports, key=classified_sort_key(prediction_filter))
