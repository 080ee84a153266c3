"""Console data model.

All records here are immutable. The console replaces the current
`TrackStatus` on every telemetry tick instead of mutating it, and alert
records never change once they have been created. This keeps the state
owner the only place where "current" values live.
"""

from __future__ import annotations

import datetime
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class AlertSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AlertCategory(str, Enum):
    """Alert sources; the values double as display labels."""

    INTRUSION = "Intrusion"
    TRACK_FAULT = "Track Fault"
    FOG = "Fog"


@dataclass(frozen=True)
class TrackStatus:
    """Snapshot of the simulated track sensors.

    Attributes
    ----------
    intrusion_detected : bool
        Sticky flag; once an intrusion has been seen it stays set.
    track_health : float
        Rail integrity estimate in percent (0–100).
    fog_level : float
        Fog density in percent (0–100).
    visibility : float
        Always ``100 - fog_level`` after the first tick.
    speed : float
        Current train speed in km/h.
    """

    intrusion_detected: bool = False
    track_health: float = 98.4
    fog_level: float = 12.0
    visibility: float = 85.0
    speed: float = 120.0


INITIAL_TRACK_STATUS = TrackStatus()


@dataclass(frozen=True)
class AlertRecord:
    id: str
    timestamp: str
    category: AlertCategory
    message: str
    severity: AlertSeverity
    location: str

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "category": self.category.value,
            "message": self.message,
            "severity": self.severity.value,
            "location": self.location,
        }


@dataclass(frozen=True)
class HistoryPoint:
    time: str
    incidents: int
    health: float


Clock = Callable[[], datetime.datetime]

# Suffix keeps ids unique when two alerts are raised in the same millisecond.
_alert_sequence = itertools.count(1)


def make_alert(
    category: AlertCategory,
    severity: AlertSeverity,
    message: str,
    location: str,
    clock: Optional[Clock] = None,
) -> AlertRecord:
    """Create an alert stamped with the current local time.

    Parameters
    ----------
    category, severity, message, location
        Alert fields, copied verbatim.
    clock : callable, optional
        Returns the creation time. Defaults to ``datetime.datetime.now``.
    """
    now = (clock or datetime.datetime.now)()
    millis = int(now.timestamp() * 1000)
    return AlertRecord(
        id=f"{millis}-{next(_alert_sequence)}",
        timestamp=now.strftime("%H:%M:%S"),
        category=category,
        message=message,
        severity=severity,
        location=location,
    )
