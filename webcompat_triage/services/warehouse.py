"""
Warehouse Service
=================
BigQuery adapter: the only place that knows about SQL.

Reads (consumed by the transform worker):
    fetch_reports(view, date_from, date_to)  — report rows in [from, to + 1 day)
    fetch_url_patterns()                     — url_patterns joined to bug titles
    fetch_all(view, date_from, date_to)      — both of the above, concurrently

Writes (consumed by the mutation endpoints, append-only audit rows):
    add_label(report_uuid, label)     — label row + "mark-<label>" action
    mark_invalid(report_uuid)         — "mark-invalid" action + "invalid" label
    track_action(report_uuid, type)   — single action row

Rows are returned as plain dicts. BigQuery has a noticeable fixed latency per
query, so independent queries are always issued concurrently.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from google.cloud import bigquery

from webcompat_triage.core.constants import ReportView

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
_BROKEN_SITE_COLUMNS = """
    reports.document_id AS uuid,
    CAST(reports.submission_timestamp AS DATETIME) AS reported_at,
    reports.client_info.app_display_version AS app_version,
    reports.metrics.string.broken_site_report_breakage_category AS breakage_category,
    reports.metrics.string.broken_site_report_tab_info_antitracking_block_list AS tp_status,
    reports.metrics.text2.broken_site_report_browser_info_app_default_useragent_string AS ua_string,
    reports.metrics.text2.broken_site_report_description AS comments,
    reports.metrics.url2.broken_site_report_url AS url,
    reports.normalized_app_name AS app_name,
    reports.normalized_channel AS app_channel,
    reports.metadata.user_agent.version AS app_major_version,
    ARRAY(
      SELECT label
      FROM webcompat_user_reports.labels
      WHERE report_uuid = reports.document_id
    ) AS labels,
    bp.label AS prediction,
    bp.probability AS prob,
    ml_trans.translated_text AS translated_comments,
    ml_trans.language_code AS translated_from,
    # mozfun only understands Windows pings, so the human-readable Windows
    # version is gated on the build number being present.
    IF (
      client_info.windows_build_number IS NOT NULL,
      mozfun.norm.windows_version_info('Windows_NT', client_info.os_version, client_info.windows_build_number),
      reports.normalized_os
    ) AS os
"""

_BROKEN_SITE_JOINS = """
    FROM moz-fx-data-shared-prod.firefox_desktop.broken_site_report AS reports
    LEFT JOIN webcompat_user_reports.bugbug_predictions AS bp ON reports.document_id = bp.report_uuid
    LEFT JOIN webcompat_user_reports.translations AS ml_trans ON reports.document_id = ml_trans.report_uuid
"""

# Actioned reports are removed during grouping, after the top-10 slice, so
# the query only flags them.
USER_REPORTS_QUERY = f"""
  SELECT
    {_BROKEN_SITE_COLUMNS},
    CASE WHEN EXISTS (
      SELECT 1 FROM webcompat_user_reports.report_actions
      WHERE report_actions.report_uuid = reports.document_id
    ) THEN true ELSE false END AS has_actions
  {_BROKEN_SITE_JOINS}
  WHERE
    reports.submission_timestamp BETWEEN TIMESTAMP(?) AND TIMESTAMP(DATE_ADD(?, INTERVAL 1 DAY))
  ORDER BY CHAR_LENGTH(comments) DESC
"""

CLASSIFIED_REPORTS_QUERY = f"""
  SELECT
    {_BROKEN_SITE_COLUMNS},
    action.type AS action
  {_BROKEN_SITE_JOINS}
  LEFT JOIN (
    SELECT
      report_uuid,
      type,
      created_at,
      ROW_NUMBER() OVER (PARTITION BY report_uuid ORDER BY created_at DESC) AS rn
    FROM webcompat_user_reports.report_actions
  ) AS action ON reports.document_id = action.report_uuid AND action.rn = 1
  WHERE
    reports.submission_timestamp BETWEEN TIMESTAMP(?) AND TIMESTAMP(DATE_ADD(?, INTERVAL 1 DAY))
    AND reports.metrics.text2.broken_site_report_description != ""
"""

INCONSISTENT_ENTRIES_QUERY = """
  SELECT reports.*,
    ARRAY(
      SELECT label
      FROM webcompat_user_reports.labels
      WHERE report_uuid = reports.uuid
    ) AS labels,
    bp.label AS prediction,
    bp.probability AS prob
  FROM webcompat_user_reports.user_reports_prod AS reports
  LEFT JOIN webcompat_user_reports.bugbug_predictions AS bp ON reports.uuid = bp.report_uuid
  WHERE
    reports.reported_at BETWEEN ? AND DATE_ADD(?, INTERVAL 1 DAY)
    # Hidden or investigated reports are not inconsistent entries
    AND NOT EXISTS (
      SELECT 1 FROM webcompat_user_reports.report_actions
      WHERE report_actions.report_uuid = reports.uuid
    )
  ORDER BY
    CASE
      WHEN prediction = 'valid' THEN 1
      WHEN prediction = 'invalid' THEN 2
      ELSE 3
    END,
    CASE WHEN prediction = 'valid' THEN prob END DESC,
    CASE WHEN prediction = 'invalid' THEN prob END ASC
"""

URL_PATTERNS_QUERY = """
  SELECT patterns.*, bugs.title
  FROM webcompat_knowledge_base.url_patterns AS patterns
  LEFT JOIN webcompat_knowledge_base.bugzilla_bugs AS bugs ON patterns.bug = bugs.number
"""

INSERT_LABEL = """
  INSERT INTO webcompat_user_reports.labels (report_uuid, label, created_at, is_ml)
  VALUES (?, ?, CURRENT_DATETIME(), false)
"""

INSERT_ACTION = """
  INSERT INTO webcompat_user_reports.report_actions (report_uuid, type, created_at)
  VALUES (?, ?, CURRENT_DATETIME())
"""

REPORT_QUERIES: Dict[ReportView, str] = {
    ReportView.USER_REPORTS: USER_REPORTS_QUERY,
    ReportView.CLASSIFIED_REPORTS: CLASSIFIED_REPORTS_QUERY,
    ReportView.INCONSISTENT_ENTRIES: INCONSISTENT_ENTRIES_QUERY,
}


class BigQueryWarehouse:
    """
    Thin wrapper around google.cloud.bigquery.Client.

    The client is created lazily so that constructing the service (e.g. in a
    freshly spawned worker) does not hit the credentials chain until the
    first query.
    """

    def __init__(self, project_id: Optional[str] = None, client: Optional[bigquery.Client] = None) -> None:
        self.project_id = project_id
        self._client = client

    @property
    def client(self) -> bigquery.Client:
        if self._client is None:
            logger.debug("Connecting to BigQuery (project=%s)...", self.project_id)
            self._client = bigquery.Client(project=self.project_id)
        return self._client

    # ------------------------------------------------------------------
    # Low-level
    # ------------------------------------------------------------------
    def query(self, sql: str, params: Sequence[str] = ()) -> List[Row]:
        """Run *sql* with positional STRING parameters and return rows as dicts."""
        job_config = bigquery.QueryJobConfig(
            query_parameters=[bigquery.ScalarQueryParameter(None, "STRING", value) for value in params]
        )
        rows = self.client.query(sql, job_config=job_config).result()
        return [dict(row.items()) for row in rows]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def fetch_reports(self, view: ReportView, date_from: str, date_to: str) -> List[Row]:
        sql = REPORT_QUERIES[ReportView(view)]
        return self.query(sql, (date_from, date_to))

    def fetch_url_patterns(self) -> List[Row]:
        return self.query(URL_PATTERNS_QUERY)

    async def fetch_all(self, view: ReportView, date_from: str, date_to: str) -> Tuple[List[Row], List[Row]]:
        """Fetch reports and URL patterns concurrently."""
        raw_reports, raw_url_patterns = await asyncio.gather(
            asyncio.to_thread(self.fetch_reports, view, date_from, date_to),
            asyncio.to_thread(self.fetch_url_patterns),
        )
        logger.info(
            "Received %d reports and %d URL patterns for %s",
            len(raw_reports), len(raw_url_patterns), ReportView(view).value,
        )
        return raw_reports, raw_url_patterns

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def add_label(self, report_uuid: str, label: str) -> None:
        await asyncio.gather(
            asyncio.to_thread(self.query, INSERT_LABEL, (report_uuid, label)),
            asyncio.to_thread(self.query, INSERT_ACTION, (report_uuid, f"mark-{label}")),
        )

    async def mark_invalid(self, report_uuid: str) -> None:
        await asyncio.gather(
            asyncio.to_thread(self.query, INSERT_ACTION, (report_uuid, "mark-invalid")),
            asyncio.to_thread(self.query, INSERT_LABEL, (report_uuid, "invalid")),
        )

    async def track_action(self, report_uuid: str, action_type: str) -> None:
        await asyncio.to_thread(self.query, INSERT_ACTION, (report_uuid, action_type))
