"""Headless entry point for the monitoring console.

Runs the telemetry and analysis loop without the dashboard and prints every
new alert and directive to the terminal. The buzzer becomes the terminal
bell unless ``--quiet`` is given.

Usage
-----
```bash
python run_console.py --config configs/default.yaml
```
"""

from __future__ import annotations

import argparse
import asyncio
import functools
from typing import Optional, Set

from alarms.buzzer import ClipQueueOutput, TerminalBellOutput
from console.config import DEFAULT_CONFIG_PATH, load_config
from console.coordinator import ConsoleSnapshot, MonitoringConsole
from monitoring.metrics import MetricsExporter


class TerminalReporter:
    """Print alerts and directives the first time they are seen."""

    def __init__(self) -> None:
        self.seen: Set[str] = set()
        self.directive: Optional[str] = None
        self.mode: Optional[str] = None

    def __call__(self, snap: ConsoleSnapshot) -> None:
        if snap.mode.value != self.mode:
            self.mode = snap.mode.value
            print(f"[MODE] {self.mode.upper()}")
        for alert in reversed(snap.alerts):
            if alert.id in self.seen:
                continue
            self.seen.add(alert.id)
            print(
                f"[ALERT] {alert.timestamp} {alert.severity.value:<8} {alert.category.value:<11} "
                f"@ {alert.location}: {alert.message}"
            )
        if snap.directive != self.directive:
            self.directive = snap.directive
            print(f"[DIRECTIVE] {snap.directive}")


async def run(console: MonitoringConsole, duration: Optional[float]) -> None:
    await console.start()
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        await console.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the railway safety monitoring console.")
    parser.add_argument("--config", type=str, default=str(DEFAULT_CONFIG_PATH), help="Path to configuration file.")
    parser.add_argument("--source", type=str, default=None, help="Override the camera source.")
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port (overrides config).",
    )
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds.")
    parser.add_argument("--quiet", action="store_true", help="Do not ring the terminal bell on alerts.")
    args = parser.parse_args()

    config = load_config(args.config)
    if args.source is not None:
        config.camera.source = args.source

    monitoring_cfg = config.monitoring
    metrics_port = args.metrics_port if args.metrics_port is not None else monitoring_cfg.metrics_port
    metrics: MetricsExporter | None = None
    if monitoring_cfg.enable_metrics or args.metrics_port is not None:
        metrics = MetricsExporter(port=metrics_port)

    if args.quiet:
        output_factory = ClipQueueOutput
    else:
        output_factory = functools.partial(TerminalBellOutput, pulse=config.audio.pulse)
    console = MonitoringConsole.from_config(config, output_factory=output_factory, metrics=metrics)
    console.subscribe(TerminalReporter())

    print(f"Monitoring started (telemetry every {config.telemetry.period}s, analysis every {config.analysis.period}s).")
    try:
        asyncio.run(run(console, args.duration))
    except KeyboardInterrupt:
        print("Stopping console...")


if __name__ == "__main__":
    main()
