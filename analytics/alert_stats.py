"""Alert statistics utilities.

Helpers that turn the alert ledger into tables and counts for display.
They operate on `AlertRecord` sequences as returned by the ledger
(newest-first) and never reorder them.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable

import pandas as pd

from telemetry.state import AlertRecord

ALERT_COLUMNS = ["timestamp", "category", "severity", "location", "message", "id"]


def alerts_frame(alerts: Iterable[AlertRecord]) -> pd.DataFrame:
    """Flatten alerts into a DataFrame, preserving their order."""
    rows = [alert.as_dict() for alert in alerts]
    return pd.DataFrame(rows, columns=ALERT_COLUMNS)


def counts_by_category(alerts: Iterable[AlertRecord]) -> Dict[str, int]:
    """Count alerts per category label."""
    counts: Dict[str, int] = defaultdict(int)
    for alert in alerts:
        counts[alert.category.value] += 1
    return dict(counts)


def counts_by_severity(alerts: Iterable[AlertRecord]) -> Dict[str, int]:
    """Count alerts per severity label."""
    counts: Dict[str, int] = defaultdict(int)
    for alert in alerts:
        counts[alert.severity.value] += 1
    return dict(counts)
