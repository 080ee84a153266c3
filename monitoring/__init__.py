"""Monitoring package: optional Prometheus metrics for the console."""

from .metrics import MetricsExporter

__all__ = ["MetricsExporter"]
