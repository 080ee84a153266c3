"""Analytics package: history series and alert statistics for display."""

from .alert_stats import alerts_frame, counts_by_category, counts_by_severity
from .history import SEED_HISTORY, history_frame

__all__ = [
    "alerts_frame",
    "counts_by_category",
    "counts_by_severity",
    "SEED_HISTORY",
    "history_frame",
]
