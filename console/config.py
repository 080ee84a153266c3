"""Console configuration.

Settings live in a YAML file (``configs/default.yaml`` by default). Every
key is optional; anything missing falls back to the defaults below, and a
missing file yields a fully default configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


@dataclass
class CameraConfig:
    source: Union[int, str] = 0
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class TelemetryConfig:
    period: float = 3.0
    intrusion_threshold: float = 0.98
    fog_step: float = 1.0
    speed_jitter: float = 5.0
    nominal_speed: float = 120.0
    seed: Optional[int] = None


@dataclass
class AnalysisConfig:
    period: float = 15.0
    model: str = "gemini-3-flash-preview"
    api_key_env: str = "GEMINI_API_KEY"
    jpeg_quality: int = 80


@dataclass
class AudioConfig:
    frequency: float = 550.0
    gain: float = 0.15
    duration: float = 5.0
    pulse: float = 0.5
    sample_rate: int = 22050


@dataclass
class MonitoringConfig:
    enable_metrics: bool = False
    metrics_port: int = 9095


@dataclass
class ConsoleConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    alert_capacity: int = 20
    intrusion_rule: Dict[str, Any] = field(default_factory=dict)
    hazard_rule: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ConsoleConfig":
        data = data or {}
        rules_cfg = data.get("rules", {}) or {}
        alerts_cfg = data.get("alerts", {}) or {}
        return cls(
            camera=_section(CameraConfig, data.get("camera")),
            telemetry=_section(TelemetryConfig, data.get("telemetry")),
            analysis=_section(AnalysisConfig, data.get("analysis")),
            audio=_section(AudioConfig, data.get("audio")),
            monitoring=_section(MonitoringConfig, data.get("monitoring")),
            alert_capacity=int(alerts_cfg.get("capacity", 20)),
            intrusion_rule=dict(rules_cfg.get("intrusion", {}) or {}),
            hazard_rule=dict(rules_cfg.get("hazard", {}) or {}),
        )


def _section(cls, raw: Optional[Dict[str, Any]]):
    """Build a section dataclass, ignoring unknown keys."""
    raw = raw or {}
    known = {name: raw[name] for name in cls.__dataclass_fields__ if name in raw}
    return cls(**known)


def load_config(config_path: Optional[Union[str, Path]] = None) -> ConsoleConfig:
    """Load the YAML configuration file.

    Parameters
    ----------
    config_path : str or Path, optional
        Path to the YAML file. Defaults to ``configs/default.yaml``.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        data = None
    return ConsoleConfig.from_dict(data)
