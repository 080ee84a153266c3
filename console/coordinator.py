"""Monitoring console: the single owner of all console state.

Two periodic timers produce events: the telemetry timer draws a
`TelemetrySample` every few seconds and the analysis timer starts an
analysis cycle that eventually publishes an `AnalysisReport`. Both go
through one event queue. A single consumer task applies them with the
pure reducers (`telemetry.simulator.advance`, `analysis.scheduler.fold_report`),
appends any resulting alert to the ledger, sounds the buzzer and notifies
listeners. Nothing else writes to the state, so no locking is needed.

Switching to maintenance mode cancels both timers at once. An analysis
cycle already waiting on the remote model is not cancelled and its report
is still applied when it arrives.
"""

from __future__ import annotations

import asyncio
import random
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple, Union

from alarms.buzzer import AudioOutput, AudioWarningEmitter, ClipQueueOutput
from analysis.gemini_client import AnalysisResult, RemoteAnalysisClient
from analysis.scheduler import AnalysisReport, AnalysisScheduler, CycleOutcome, fold_report
from analytics.history import SEED_HISTORY
from camera_adapters.frame_grabber import FrameGrabber, create_camera
from monitoring.metrics import MetricsExporter
from rules.alert_rules import HazardRule, IntrusionRule
from storage.alert_ledger import AlertLedger
from telemetry.simulator import TelemetrySample, TelemetrySimulator, advance
from telemetry.state import (
    INITIAL_TRACK_STATUS,
    AlertRecord,
    Clock,
    HistoryPoint,
    TrackStatus,
)

from .config import ConsoleConfig
from .timers import PeriodicTimer

INITIAL_DIRECTIVE = "System online. Monitoring track vectors..."

ConsoleEvent = Union[TelemetrySample, AnalysisReport]


class ConsoleMode(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class ConsoleSnapshot:
    """Read-only view of the console for presentation."""

    mode: ConsoleMode
    status: TrackStatus
    alerts: Tuple[AlertRecord, ...]
    last_analysis: Optional[AnalysisResult]
    directive: str
    analyzing: bool
    camera_available: bool
    history: Tuple[HistoryPoint, ...]


class MonitoringConsole:
    """Coordinates telemetry, remote analysis, alerts and the buzzer.

    Parameters
    ----------
    client : RemoteAnalysisClient
        Remote model used by the analysis cycle.
    grabber : FrameGrabber, optional
        Shared camera access. Without one, analysis cycles find no frame.
    simulator : TelemetrySimulator, optional
        Source of telemetry samples.
    emitter : AudioWarningEmitter, optional
        Buzzer sounded for every new alert.
    metrics : MetricsExporter, optional
        Prometheus exporter; metrics are skipped when omitted.
    clock : callable, optional
        Time source for alert timestamps.
    """

    def __init__(
        self,
        client: RemoteAnalysisClient,
        grabber: Optional[FrameGrabber] = None,
        simulator: Optional[TelemetrySimulator] = None,
        emitter: Optional[AudioWarningEmitter] = None,
        ledger: Optional[AlertLedger] = None,
        intrusion_rule: Optional[IntrusionRule] = None,
        hazard_rule: Optional[HazardRule] = None,
        telemetry_period: float = 3.0,
        analysis_period: float = 15.0,
        intrusion_threshold: float = 0.98,
        nominal_speed: float = 120.0,
        jpeg_quality: int = 80,
        metrics: Optional[MetricsExporter] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.grabber = grabber
        self.simulator = simulator if simulator is not None else TelemetrySimulator()
        self.emitter = emitter if emitter is not None else AudioWarningEmitter()
        self.ledger = ledger if ledger is not None else AlertLedger()
        self.intrusion_rule = intrusion_rule if intrusion_rule is not None else IntrusionRule()
        self.hazard_rule = hazard_rule if hazard_rule is not None else HazardRule()
        self.intrusion_threshold = intrusion_threshold
        self.nominal_speed = nominal_speed
        self.metrics = metrics
        self.clock = clock

        self.mode = ConsoleMode.ACTIVE
        self.status: TrackStatus = INITIAL_TRACK_STATUS
        self.last_analysis: Optional[AnalysisResult] = None
        self.directive = INITIAL_DIRECTIVE
        self.history: Tuple[HistoryPoint, ...] = SEED_HISTORY

        self.scheduler = AnalysisScheduler(
            client,
            grabber,
            status_provider=lambda: self.status,
            publish=self._publish,
            jpeg_quality=jpeg_quality,
        )
        self._events: asyncio.Queue = asyncio.Queue()
        self._listeners: List[Callable[[ConsoleSnapshot], None]] = []
        self._telemetry_timer = PeriodicTimer(telemetry_period, self._on_telemetry_tick, "telemetry")
        self._analysis_timer = PeriodicTimer(analysis_period, self._on_analysis_tick, "analysis")
        self._cycles: Set[asyncio.Task] = set()
        self._owner: Optional[asyncio.Task] = None

    @classmethod
    def from_config(
        cls,
        config: ConsoleConfig,
        client: Optional[RemoteAnalysisClient] = None,
        grabber: Optional[FrameGrabber] = None,
        output_factory: Callable[[], AudioOutput] = ClipQueueOutput,
        metrics: Optional[MetricsExporter] = None,
    ) -> "MonitoringConsole":
        """Build a console and its collaborators from a `ConsoleConfig`."""
        if client is None:
            client = RemoteAnalysisClient(
                model=config.analysis.model,
                api_key_env=config.analysis.api_key_env,
            )
        if grabber is None:
            camera = create_camera(config.camera.source, config.camera.width, config.camera.height)
            grabber = FrameGrabber(camera)
        tel = config.telemetry
        audio = config.audio
        return cls(
            client,
            grabber=grabber,
            simulator=TelemetrySimulator(
                rng=random.Random(tel.seed),
                fog_step=tel.fog_step,
                speed_jitter=tel.speed_jitter,
            ),
            emitter=AudioWarningEmitter(
                output_factory,
                frequency=audio.frequency,
                gain=audio.gain,
                duration=audio.duration,
                pulse=audio.pulse,
                sample_rate=audio.sample_rate,
            ),
            ledger=AlertLedger(config.alert_capacity),
            intrusion_rule=IntrusionRule.from_config(config.intrusion_rule),
            hazard_rule=HazardRule.from_config(config.hazard_rule),
            telemetry_period=tel.period,
            analysis_period=config.analysis.period,
            intrusion_threshold=tel.intrusion_threshold,
            nominal_speed=tel.nominal_speed,
            jpeg_quality=config.analysis.jpeg_quality,
            metrics=metrics,
        )

    # -- life cycle -------------------------------------------------------

    @property
    def active(self) -> bool:
        return self.mode is ConsoleMode.ACTIVE

    async def start(self) -> None:
        """Open the camera, start the state owner and, if active, the timers."""
        if self.grabber is not None:
            await asyncio.to_thread(self.grabber.start)
        if self._owner is None:
            self._owner = asyncio.get_running_loop().create_task(self._consume(), name="console-state")
        if self.active:
            self._start_timers()

    async def stop(self) -> None:
        """Tear down: stop timers and cycles, apply what is queued, free the camera."""
        self._stop_timers()
        for task in list(self._cycles):
            task.cancel()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)
        if self._owner is not None:
            self._owner.cancel()
            await asyncio.gather(self._owner, return_exceptions=True)
            self._owner = None
        self.process_pending()
        if self.grabber is not None:
            self.grabber.release()

    async def drain(self) -> None:
        """Wait until every published event has been applied."""
        await self._events.join()

    def set_active(self, active: bool) -> None:
        """Switch between ACTIVE and MAINTENANCE immediately."""
        self.mode = ConsoleMode.ACTIVE if active else ConsoleMode.MAINTENANCE
        if active:
            self._start_timers()
        else:
            self._stop_timers()
        self._notify()

    def toggle(self) -> ConsoleMode:
        """Operator toggle; also unlocks audio since it is a user gesture."""
        self.emitter.prime()
        self.set_active(not self.active)
        return self.mode

    async def analyze_now(self) -> CycleOutcome:
        """Run an analysis cycle on demand (skipped if one is running)."""
        self.emitter.prime()
        return await self._run_cycle()

    # -- state owner ------------------------------------------------------

    def apply(self, event: ConsoleEvent) -> None:
        """Fold one event into the state. Only the state owner calls this.

        Telemetry samples still queued when the console enters maintenance
        are discarded. Analysis reports are always applied.
        """
        if isinstance(event, TelemetrySample):
            if self.mode is ConsoleMode.MAINTENANCE:
                return
            self._apply_telemetry(event)
        elif isinstance(event, AnalysisReport):
            self._apply_report(event)
        else:
            raise TypeError(f"Unsupported console event: {type(event).__name__}")
        self._notify()

    def process_pending(self) -> int:
        """Handle queued events synchronously; returns how many were taken."""
        applied = 0
        while True:
            try:
                event = self._events.get_nowait()
            except asyncio.QueueEmpty:
                return applied
            try:
                self.apply(event)
                applied += 1
            finally:
                self._events.task_done()

    def snapshot(self) -> ConsoleSnapshot:
        return ConsoleSnapshot(
            mode=self.mode,
            status=self.status,
            alerts=self.ledger.records(),
            last_analysis=self.last_analysis,
            directive=self.directive,
            analyzing=self.scheduler.running,
            camera_available=bool(self.grabber and self.grabber.available),
            history=self.history,
        )

    def subscribe(self, listener: Callable[[ConsoleSnapshot], None]) -> None:
        """Register a callback invoked with a snapshot after every change."""
        self._listeners.append(listener)

    def _apply_telemetry(self, sample: TelemetrySample) -> None:
        self.status, intrusion = advance(
            self.status,
            sample,
            intrusion_threshold=self.intrusion_threshold,
            nominal_speed=self.nominal_speed,
        )
        if self.metrics is not None:
            s = self.status
            self.metrics.record_tick(s.fog_level, s.visibility, s.speed, s.track_health)
        if intrusion:
            self._raise(self.intrusion_rule.alert(clock=self.clock))

    def _apply_report(self, report: AnalysisReport) -> None:
        if report.result is not None:
            self.last_analysis = report.result
            alert = fold_report(report, self.hazard_rule, clock=self.clock)
            if alert is not None:
                self._raise(alert)
        elif self.metrics is not None:
            self.metrics.record_analysis_failure()
        self.directive = report.directive

    def _raise(self, alert: AlertRecord) -> None:
        self.ledger.append(alert)
        if self.metrics is not None:
            self.metrics.record_alert(alert.category.value, alert.severity.value)
        self.emitter.emit()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in self._listeners:
            try:
                listener(snap)
            except Exception as exc:
                warnings.warn(f"Console listener failed: {exc}", stacklevel=2)

    async def _consume(self) -> None:
        while True:
            event = await self._events.get()
            try:
                self.apply(event)
            except Exception as exc:
                warnings.warn(f"Dropping console event {type(event).__name__}: {exc}", stacklevel=2)
            finally:
                self._events.task_done()

    # -- producers --------------------------------------------------------

    def _publish(self, event: ConsoleEvent) -> None:
        self._events.put_nowait(event)

    def _start_timers(self) -> None:
        self._telemetry_timer.start()
        self._analysis_timer.start()

    def _stop_timers(self) -> None:
        self._telemetry_timer.cancel()
        self._analysis_timer.cancel()

    def _on_telemetry_tick(self) -> None:
        self._publish(self.simulator.sample())

    def _on_analysis_tick(self) -> None:
        task = asyncio.get_running_loop().create_task(self._run_cycle(), name="analysis-cycle")
        self._cycles.add(task)
        task.add_done_callback(self._cycle_done)

    def _cycle_done(self, task: asyncio.Task) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            warnings.warn(f"Analysis cycle failed: {exc}", stacklevel=2)

    async def _run_cycle(self) -> CycleOutcome:
        outcome = await self.scheduler.run_cycle()
        if self.metrics is not None:
            self.metrics.record_cycle(outcome.value)
        return outcome
