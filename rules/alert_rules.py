"""Alert rules.

Each rule turns an observation into an `AlertRecord`, or into nothing when
the observation is below its threshold. All comparisons are strict: a
hazard probability exactly on the alert threshold does not raise an alert.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from telemetry.state import AlertCategory, AlertRecord, AlertSeverity, Clock, make_alert


@dataclass
class IntrusionRule:
    """Raise a critical alert for an intrusion flagged by a telemetry tick."""

    location: str = "Sector 4-B"
    message: str = "Unidentified object detected on main track."

    def alert(self, clock: Optional[Clock] = None) -> AlertRecord:
        return make_alert(
            AlertCategory.INTRUSION,
            AlertSeverity.CRITICAL,
            self.message,
            self.location,
            clock=clock,
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "IntrusionRule":
        return cls(
            location=cfg.get("location", cls.location),
            message=cfg.get("message", cls.message),
        )


@dataclass
class HazardRule:
    """Map a remote hazard probability (0–100) to a track-fault alert.

    Attributes
    ----------
    alert_threshold : float
        Probabilities above this value raise an alert.
    critical_threshold : float
        Probabilities above this value raise a CRITICAL alert instead of
        a HIGH one.
    location : str
        Location reported on analysis alerts.
    """

    alert_threshold: float = 50.0
    critical_threshold: float = 80.0
    location: str = "Remote Analysis Node"

    def severity_for(self, probability: float) -> Optional[AlertSeverity]:
        if probability > self.critical_threshold:
            return AlertSeverity.CRITICAL
        if probability > self.alert_threshold:
            return AlertSeverity.HIGH
        return None

    def evaluate(self, probability: float, assessment: str, clock: Optional[Clock] = None) -> Optional[AlertRecord]:
        severity = self.severity_for(probability)
        if severity is None:
            return None
        return make_alert(AlertCategory.TRACK_FAULT, severity, assessment, self.location, clock=clock)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "HazardRule":
        return cls(
            alert_threshold=float(cfg.get("alert_threshold", cls.alert_threshold)),
            critical_threshold=float(cfg.get("critical_threshold", cls.critical_threshold)),
            location=cfg.get("location", cls.location),
        )
