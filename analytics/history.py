"""Incident history series shown on the dashboard chart.

The series is a fixed seed covering the morning shift; nothing is appended
to it at runtime.
"""

from __future__ import annotations

from typing import Iterable, Tuple

import pandas as pd

from telemetry.state import HistoryPoint

SEED_HISTORY: Tuple[HistoryPoint, ...] = (
    HistoryPoint("08:00", 0, 99.0),
    HistoryPoint("09:00", 1, 98.0),
    HistoryPoint("10:00", 0, 98.5),
    HistoryPoint("11:00", 2, 97.0),
    HistoryPoint("12:00", 0, 98.0),
    HistoryPoint("13:00", 0, 98.2),
    HistoryPoint("14:00", 1, 97.5),
)


def history_frame(points: Iterable[HistoryPoint] = SEED_HISTORY) -> pd.DataFrame:
    """Return the series as a DataFrame indexed by time label."""
    df = pd.DataFrame(
        [{"time": p.time, "incidents": p.incidents, "health": p.health} for p in points],
        columns=["time", "incidents", "health"],
    )
    return df.set_index("time")
