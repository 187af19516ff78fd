"""
Constants
Centralised storage for pipeline sentinels, view names and prediction labels.
"""
from enum import Enum

UNKNOWN_DOMAIN = "[unknown]"
ACTIONABLE_SUBSET_LIMIT = 10

PREDICTION_VALID = "valid"
PREDICTION_INVALID = "invalid"
PREDICTION_ALL = "all"


class ReportView(str, Enum):
    """Dashboard views served by the transform pipeline."""
    USER_REPORTS = "user_reports"
    INCONSISTENT_ENTRIES = "inconsistent_entries"
    CLASSIFIED_REPORTS = "classified_reports"
