"""Prometheus metrics exporter utilities for console observability."""

from __future__ import annotations

import threading
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

_server_lock = threading.Lock()
_server_started_ports: set[int] = set()


class MetricsExporter:
    """Expose console metrics via Prometheus.

    ``port=None`` registers the metrics without starting an HTTP server;
    pass a private ``registry`` to keep instances independent (tests).
    """

    def __init__(self, port: Optional[int] = 9095, registry: CollectorRegistry = REGISTRY) -> None:
        self.port = port
        if port is not None:
            with _server_lock:
                if port not in _server_started_ports:
                    start_http_server(port, registry=registry)
                    _server_started_ports.add(port)

        self.telemetry_ticks = Counter(
            "saferail_telemetry_ticks_total",
            "Telemetry samples applied to the track status",
            registry=registry,
        )
        self.alerts = Counter(
            "saferail_alerts_total",
            "Alerts appended to the ledger",
            ["category", "severity"],
            registry=registry,
        )
        self.analysis_cycles = Counter(
            "saferail_analysis_cycles_total",
            "Analysis cycles by outcome",
            ["outcome"],
            registry=registry,
        )
        self.analysis_failures = Counter(
            "saferail_analysis_failures_total",
            "Completed cycles whose structured analysis returned no result",
            registry=registry,
        )
        self.track = Gauge(
            "saferail_track_reading",
            "Latest simulated track readings",
            ["reading"],
            registry=registry,
        )

    def record_tick(self, fog_level: float, visibility: float, speed: float, track_health: float) -> None:
        self.telemetry_ticks.inc()
        self.track.labels("fog_level").set(fog_level)
        self.track.labels("visibility").set(visibility)
        self.track.labels("speed").set(speed)
        self.track.labels("track_health").set(track_health)

    def record_alert(self, category: str, severity: str) -> None:
        self.alerts.labels(category, severity).inc()

    def record_cycle(self, outcome: str) -> None:
        self.analysis_cycles.labels(outcome).inc()

    def record_analysis_failure(self) -> None:
        self.analysis_failures.inc()
