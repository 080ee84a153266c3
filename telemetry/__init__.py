"""Telemetry package.

This package holds the in-memory data model shared by the console (track
status, alert records, history points) and the simulator that perturbs the
track status on every telemetry tick. No real sensors are attached; the
readings are pseudo-random walks around nominal values.
"""

from .state import (
    AlertCategory,
    AlertRecord,
    AlertSeverity,
    HistoryPoint,
    TrackStatus,
    INITIAL_TRACK_STATUS,
)
from .simulator import TelemetrySample, TelemetrySimulator, advance

__all__ = [
    "AlertCategory",
    "AlertRecord",
    "AlertSeverity",
    "HistoryPoint",
    "TrackStatus",
    "INITIAL_TRACK_STATUS",
    "TelemetrySample",
    "TelemetrySimulator",
    "advance",
]
