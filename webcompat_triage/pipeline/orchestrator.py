"""
Pipeline Orchestrator
=====================
Sequences the transform stages for one dashboard view and serializes the
result:

    preprocess patterns → preprocess reports → group / partition → sort → JSON

View Policies:
    user_reports          — actionable subset per domain, by reports_count desc
    inconsistent_entries  — known / unknown partition, by unknown count desc
    classified_reports    — flat list filtered by prediction, three-case sort

Progress:
    Each stage reports a human-readable milestone through the optional
    `progress` callback (the worker forwards these as "verbose" messages) and
    the module logger.

Purity:
    All stages are synchronous and side-effect free. The HostnameNormalizer
    (and with it the memo cache) is created per run() call.
"""
import json
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional

from webcompat_triage.core.constants import ReportView
from webcompat_triage.pipeline.grouping import (
    filter_by_prediction,
    partition_by_known_bugs,
    select_actionable,
)
from webcompat_triage.pipeline.hostname import HostnameNormalizer
from webcompat_triage.pipeline.preprocess import preprocess_reports
from webcompat_triage.pipeline.ranking import (
    sort_by_reports_count,
    sort_by_unknown_count,
    sort_classified_reports,
)
from webcompat_triage.pipeline.url_patterns import preprocess_patterns

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


def serialize(view_model: Any) -> str:
    """JSON-encode the view model; non-JSON scalars (dates, decimals) become strings."""
    return json.dumps(view_model, default=str)


class ReportPipeline:
    """
    Runs the transform stages for a single view.

    Usage:
        pipeline = ReportPipeline(ReportView.USER_REPORTS, progress=print)
        payload = pipeline.run(raw_reports, raw_url_patterns)
    """

    def __init__(self, view: ReportView, progress: Optional[ProgressCallback] = None) -> None:
        self.view = ReportView(view)
        self._progress_callback = progress

    def _progress(self, msg: str) -> None:
        logger.debug("[%s] %s", self.view.value, msg)
        if self._progress_callback:
            self._progress_callback(msg)

    def run(
        self,
        raw_reports: Iterable[Mapping[str, Any]],
        raw_url_patterns: Iterable[Mapping[str, Any]],
        prediction: Optional[str] = None,
    ) -> str:
        """
        Transform warehouse rows into the serialized view model.

        Parameters
        ----------
        raw_reports : Iterable[Mapping]
            Report rows, in the order the warehouse returned them.
        raw_url_patterns : Iterable[Mapping]
            URL pattern rows joined to bug titles.
        prediction : str, optional
            Prediction filter, only used by the classified_reports view.

        Returns
        -------
        str
            JSON string of the view model.
        """
        self._progress("Pre-processing URL patterns...")
        patterns = preprocess_patterns(raw_url_patterns)

        self._progress("Pre-processing reports...")
        normalizer = HostnameNormalizer()
        reports = preprocess_reports(raw_reports, patterns, normalizer)
        logger.debug("Resolved %d distinct hostname(s)", len(normalizer))

        if self.view is ReportView.USER_REPORTS:
            view_model = self._user_reports(reports)
        elif self.view is ReportView.INCONSISTENT_ENTRIES:
            view_model = self._inconsistent_entries(reports)
        else:
            view_model = self._classified_reports(reports, prediction)

        self._progress("Writing response...")
        return serialize(view_model)

    def _user_reports(self, reports: List[dict]) -> list:
        self._progress("Grouping reports by root domain...")
        groups = select_actionable(reports)
        self._progress("Sorting by the total number of reports per domain...")
        return sort_by_reports_count(groups)

    def _inconsistent_entries(self, reports: List[dict]) -> list:
        self._progress("Partitioning reports into known and unknown bugs...")
        groups = partition_by_known_bugs(reports)
        self._progress("Sorting by the number of unknown reports per domain...")
        return sort_by_unknown_count(groups)

    def _classified_reports(self, reports: List[dict], prediction: Optional[str]) -> list:
        self._progress(f"Filtering reports by prediction ({prediction or 'all'})...")
        filtered = filter_by_prediction(reports, prediction)
        self._progress("Sorting reports by prediction and probability...")
        return sort_classified_reports(filtered, prediction)


def run_pipeline(
    view: ReportView,
    raw_reports: Iterable[Mapping[str, Any]],
    raw_url_patterns: Iterable[Mapping[str, Any]],
    prediction: Optional[str] = None,
    progress: Optional[ProgressCallback] = None,
) -> str:
    """Convenience wrapper around ReportPipeline(view, progress).run(...)."""
    return ReportPipeline(view, progress=progress).run(raw_reports, raw_url_patterns, prediction)
