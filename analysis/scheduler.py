"""Periodic remote analysis cycle.

One cycle captures a frame, encodes it as JPEG and asks the remote model
for a hazard assessment and a pilot directive at the same time. The
outcome is published as an `AnalysisReport`; the console owns the state
and folds the report into alerts and the directive text.

Cycles never overlap. `CycleGuard` is a two-state machine (IDLE/RUNNING):
a cycle started while another is RUNNING is skipped, not queued, and the
guard returns to IDLE on every exit path.
"""

from __future__ import annotations

import asyncio
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from camera_adapters.encoding import encode_jpeg
from camera_adapters.frame_grabber import FrameGrabber
from rules.alert_rules import HazardRule
from telemetry.state import AlertRecord, Clock, TrackStatus

from .gemini_client import AnalysisResult, RemoteAnalysisClient


class CycleState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class CycleOutcome(str, Enum):
    SKIPPED = "skipped"
    NO_FRAME = "no_frame"
    COMPLETED = "completed"


class CycleGuard:
    """Explicit IDLE/RUNNING state with guarded transitions."""

    def __init__(self) -> None:
        self.state = CycleState.IDLE

    @property
    def running(self) -> bool:
        return self.state is CycleState.RUNNING

    def try_enter(self) -> bool:
        """Move IDLE -> RUNNING. Returns False, changing nothing, if busy."""
        if self.state is CycleState.RUNNING:
            return False
        self.state = CycleState.RUNNING
        return True

    def leave(self) -> None:
        self.state = CycleState.IDLE


@dataclass(frozen=True)
class AnalysisReport:
    """Result of one completed cycle.

    ``result`` is None when the structured analysis failed; ``directive``
    always carries some text (possibly a fallback).
    """

    result: Optional[AnalysisResult]
    directive: str


def fold_report(report: AnalysisReport, rule: HazardRule, clock: Optional[Clock] = None) -> Optional[AlertRecord]:
    """Return the alert a report raises, if any."""
    if report.result is None:
        return None
    return rule.evaluate(report.result.hazard_probability, report.result.assessment, clock=clock)


class AnalysisScheduler:
    """Runs capture-analyze cycles against a remote model.

    Parameters
    ----------
    client : RemoteAnalysisClient
        Collaborator answering both requests.
    grabber : FrameGrabber, optional
        Frame source. Without one every cycle ends with ``NO_FRAME``.
    status_provider : callable
        Returns the current `TrackStatus` for the directive request.
    publish : callable
        Receives the `AnalysisReport` of each completed cycle.
    jpeg_quality : int, optional
        Quality used when encoding the captured frame.
    """

    def __init__(
        self,
        client: RemoteAnalysisClient,
        grabber: Optional[FrameGrabber],
        status_provider: Callable[[], TrackStatus],
        publish: Callable[[AnalysisReport], None],
        jpeg_quality: int = 80,
    ) -> None:
        self.client = client
        self.grabber = grabber
        self.status_provider = status_provider
        self.publish = publish
        self.jpeg_quality = jpeg_quality
        self.guard = CycleGuard()

    @property
    def running(self) -> bool:
        return self.guard.running

    async def _capture(self) -> Optional[bytes]:
        if self.grabber is None:
            return None
        frame = await asyncio.to_thread(self.grabber.grab)
        if frame is None:
            return None
        try:
            return encode_jpeg(frame, self.jpeg_quality)
        except ValueError as exc:
            warnings.warn(f"Frame encoding failed: {exc}", stacklevel=2)
            return None

    async def run_cycle(self) -> CycleOutcome:
        if not self.guard.try_enter():
            return CycleOutcome.SKIPPED
        try:
            payload = await self._capture()
            if payload is None:
                return CycleOutcome.NO_FRAME
            result, directive = await asyncio.gather(
                self.client.analyze_frame(payload),
                self.client.safety_directive(self.status_provider()),
            )
            self.publish(AnalysisReport(result=result, directive=directive))
            return CycleOutcome.COMPLETED
        finally:
            self.guard.leave()
