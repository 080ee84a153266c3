from __future__ import annotations

import asyncio
import random

import pytest

from alarms.buzzer import AudioWarningEmitter
from analysis.scheduler import AnalysisReport, CycleOutcome
from analysis.gemini_client import AnalysisResult
from console.config import ConsoleConfig
from console.coordinator import INITIAL_DIRECTIVE, ConsoleMode, MonitoringConsole
from conftest import FakeModels, RiggedRandom, analysis_payload, fake_client
from storage.alert_ledger import AlertLedger
from telemetry.simulator import TelemetrySample, TelemetrySimulator
from telemetry.state import INITIAL_TRACK_STATUS, AlertCategory, AlertSeverity


def make_console(emitter, models=None, grabber=None, rng=None, **kwargs) -> MonitoringConsole:
    return MonitoringConsole(
        fake_client(models or FakeModels(analysis=analysis_payload(10))),
        grabber=grabber,
        simulator=TelemetrySimulator(rng=rng or random.Random(1)),
        emitter=emitter,
        **kwargs,
    )


def result(probability: float) -> AnalysisResult:
    return AnalysisResult.model_validate(analysis_payload(probability, assessment="Debris on rail"))


def test_rigged_intrusion_tick_raises_one_critical_alert(emitter, output) -> None:
    console = make_console(emitter, rng=RiggedRandom(roll=0.99))
    console.apply(console.simulator.sample())

    alerts = console.ledger.records()
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.category is AlertCategory.INTRUSION
    assert alert.severity is AlertSeverity.CRITICAL
    assert alert.location == "Sector 4-B"
    assert output.plays == 1
    assert console.status.intrusion_detected is True


def test_quiet_tick_raises_nothing(emitter, output) -> None:
    console = make_console(emitter, rng=RiggedRandom(roll=0.5, delta=0.5))
    console.apply(console.simulator.sample())
    assert len(console.ledger) == 0
    assert output.plays == 0
    assert console.status.fog_level == pytest.approx(12.5)
    assert console.status.visibility == pytest.approx(87.5)
    assert console.status.speed == pytest.approx(120.5)


@pytest.mark.parametrize(
    "probability, severity",
    [(81, AlertSeverity.CRITICAL), (60, AlertSeverity.HIGH), (50, None)],
)
def test_analysis_report_alerts(emitter, output, probability, severity) -> None:
    console = make_console(emitter)
    console.apply(AnalysisReport(result=result(probability), directive="Hold at signal."))

    assert console.directive == "Hold at signal."
    assert console.last_analysis is not None
    if severity is None:
        assert len(console.ledger) == 0
        assert output.plays == 0
    else:
        alert = console.ledger.latest
        assert alert.severity is severity
        assert alert.category is AlertCategory.TRACK_FAULT
        assert alert.location == "Remote Analysis Node"
        assert alert.message == "Debris on rail"
        assert output.plays == 1


def test_failed_analysis_keeps_last_result(emitter) -> None:
    console = make_console(emitter)
    console.apply(AnalysisReport(result=result(20), directive="Proceed."))
    previous = console.last_analysis
    console.apply(AnalysisReport(result=None, directive="System monitoring active."))
    assert console.last_analysis is previous
    assert console.directive == "System monitoring active."
    assert len(console.ledger) == 0


def test_alerts_from_both_producers_share_the_ledger(emitter, output) -> None:
    console = make_console(emitter, rng=RiggedRandom(roll=0.99))
    console.apply(console.simulator.sample())
    console.apply(AnalysisReport(result=result(90), directive="Stop."))
    categories = [a.category for a in console.ledger]
    assert categories == [AlertCategory.TRACK_FAULT, AlertCategory.INTRUSION]
    assert output.plays == 2


def test_manual_analysis_runs_cycle(emitter, output, grabber) -> None:
    console = make_console(emitter, models=FakeModels(analysis=analysis_payload(85)), grabber=grabber)
    outcome = asyncio.run(console.analyze_now())
    assert outcome is CycleOutcome.COMPLETED
    assert console.process_pending() == 1
    assert console.ledger.latest.severity is AlertSeverity.CRITICAL
    assert output.resumed == 1


def test_maintenance_stops_telemetry(emitter) -> None:
    async def scenario():
        console = make_console(emitter, telemetry_period=0.01, analysis_period=60)
        await console.start()
        await asyncio.sleep(0.1)
        await console.drain()
        moved = console.status != INITIAL_TRACK_STATUS

        console.set_active(False)
        await console.drain()
        frozen = console.status
        await asyncio.sleep(0.1)
        await console.drain()
        unchanged = console.status == frozen
        mode = console.mode
        await console.stop()
        return moved, unchanged, mode

    moved, unchanged, mode = asyncio.run(scenario())
    assert moved
    assert unchanged
    assert mode is ConsoleMode.MAINTENANCE


def test_resume_restarts_telemetry(emitter) -> None:
    async def scenario():
        console = make_console(emitter, telemetry_period=0.01, analysis_period=60)
        console.set_active(False)
        await console.start()
        await asyncio.sleep(0.05)
        idle_status = console.status
        console.set_active(True)
        await asyncio.sleep(0.1)
        await console.drain()
        changed = console.status != idle_status
        await console.stop()
        return idle_status, changed

    idle_status, changed = asyncio.run(scenario())
    assert idle_status == INITIAL_TRACK_STATUS
    assert changed


def test_in_flight_cycle_completes_after_maintenance(emitter, output, grabber) -> None:
    async def scenario():
        gate = asyncio.Event()
        console = make_console(
            emitter, models=FakeModels(analysis=analysis_payload(95), gate=gate), grabber=grabber
        )
        cycle = asyncio.create_task(console.analyze_now())
        await asyncio.sleep(0)
        console.set_active(False)
        gate.set()
        outcome = await cycle
        console.process_pending()
        return console, outcome

    console, outcome = asyncio.run(scenario())
    assert outcome is CycleOutcome.COMPLETED
    assert console.mode is ConsoleMode.MAINTENANCE
    assert console.ledger.latest.severity is AlertSeverity.CRITICAL


def test_periodic_analysis_fires_and_releases_camera(emitter, grabber) -> None:
    async def scenario():
        console = make_console(
            emitter,
            models=FakeModels(analysis=analysis_payload(10), directive="All clear."),
            grabber=grabber,
            telemetry_period=60,
            analysis_period=0.02,
        )
        await console.start()
        for _ in range(100):
            await asyncio.sleep(0.02)
            if console.directive != INITIAL_DIRECTIVE:
                break
        await console.stop()
        return console

    console = asyncio.run(scenario())
    assert console.directive == "All clear."
    assert console.last_analysis.hazard_probability == 10
    assert grabber.camera.released


def test_toggle_flips_mode_and_primes_audio(output) -> None:
    emitter = AudioWarningEmitter(lambda: output)
    console = make_console(emitter)

    async def scenario():
        first = console.toggle()
        second = console.toggle()
        console.set_active(False)
        return first, second

    first, second = asyncio.run(scenario())
    assert first is ConsoleMode.MAINTENANCE
    assert second is ConsoleMode.ACTIVE
    assert output.state == "running"


def test_snapshot_and_listeners(emitter) -> None:
    console = make_console(emitter, rng=RiggedRandom(roll=0.99))
    seen = []
    console.subscribe(seen.append)
    console.apply(TelemetrySample(0.0, 0.0, 0.99))
    snap = seen[-1]
    assert snap.mode is ConsoleMode.ACTIVE
    assert snap.status.intrusion_detected
    assert len(snap.alerts) == 1
    assert snap.directive == INITIAL_DIRECTIVE
    assert snap.analyzing is False
    assert snap.camera_available is False
    assert len(snap.history) == 7


def test_unknown_event_is_rejected(emitter) -> None:
    with pytest.raises(TypeError):
        make_console(emitter).apply("not an event")


def test_from_config_wires_settings() -> None:
    config = ConsoleConfig.from_dict(
        {
            "camera": {"source": "rtsp://example/stream"},
            "alerts": {"capacity": 5},
            "rules": {"intrusion": {"location": "Sector 7"}, "hazard": {"alert_threshold": 30}},
            "telemetry": {"seed": 4, "period": 1.5},
        }
    )
    console = MonitoringConsole.from_config(config, client=fake_client(FakeModels()))
    assert console.ledger.capacity == 5
    assert console.intrusion_rule.location == "Sector 7"
    assert console.hazard_rule.alert_threshold == 30
    assert console.grabber.camera.source == "rtsp://example/stream"


def test_injected_empty_ledger_is_kept(emitter) -> None:
    ledger = AlertLedger(capacity=5)
    console = make_console(emitter, ledger=ledger)
    assert console.ledger is ledger
    console.apply(AnalysisReport(result=result(90), directive="Stop."))
    assert len(ledger) == 1


def test_sample_queued_before_maintenance_is_discarded(emitter, output) -> None:
    console = make_console(emitter)
    console._publish(TelemetrySample(0.5, 0.0, 0.99))
    console.set_active(False)

    assert console.process_pending() == 1
    assert console.status == INITIAL_TRACK_STATUS
    assert len(console.ledger) == 0
    assert output.plays == 0


def test_report_is_applied_during_maintenance(emitter, output) -> None:
    console = make_console(emitter)
    console.set_active(False)
    console._publish(AnalysisReport(result=result(85), directive="Hold at signal."))

    assert console.process_pending() == 1
    assert console.directive == "Hold at signal."
    assert console.ledger.latest.severity is AlertSeverity.CRITICAL
    assert output.plays == 1
