"""Track telemetry simulator.

There are no physical sensors behind the console. Every telemetry tick
draws a `TelemetrySample` (fog drift, speed jitter and an intrusion roll)
and the pure reducer `advance` folds it into the previous `TrackStatus`.
Splitting the random draw from the state update lets the console apply
samples in its own event loop and lets tests feed rigged samples.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Optional, Protocol, Tuple

from .state import TrackStatus


class RandomSource(Protocol):
    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...


@dataclass(frozen=True)
class TelemetrySample:
    fog_delta: float
    speed_delta: float
    intrusion_roll: float


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def advance(
    status: TrackStatus,
    sample: TelemetrySample,
    intrusion_threshold: float = 0.98,
    nominal_speed: float = 120.0,
) -> Tuple[TrackStatus, bool]:
    """Apply one telemetry sample to ``status``.

    Returns
    -------
    status : TrackStatus
        The updated status. ``intrusion_detected`` is OR'd with the
        previous value and never cleared here.
    intrusion : bool
        True if this particular sample flagged an intrusion.
    """
    fog = _clamp(status.fog_level + sample.fog_delta)
    intrusion = sample.intrusion_roll > intrusion_threshold
    updated = replace(
        status,
        fog_level=fog,
        visibility=100.0 - fog,
        speed=nominal_speed + sample.speed_delta,
        intrusion_detected=intrusion or status.intrusion_detected,
    )
    return updated, intrusion


class TelemetrySimulator:
    """Draws telemetry samples from a random source.

    Parameters
    ----------
    rng : random.Random-like, optional
        Source of uniform draws. Pass a seeded ``random.Random`` (or a
        stub) for reproducible runs.
    fog_step : float, optional
        Maximum absolute fog change per tick.
    speed_jitter : float, optional
        Maximum absolute deviation from the nominal speed.
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        fog_step: float = 1.0,
        speed_jitter: float = 5.0,
    ) -> None:
        self.rng = rng or random.Random()
        self.fog_step = fog_step
        self.speed_jitter = speed_jitter

    def sample(self) -> TelemetrySample:
        return TelemetrySample(
            fog_delta=self.rng.uniform(-self.fog_step, self.fog_step),
            speed_delta=self.rng.uniform(-self.speed_jitter, self.speed_jitter),
            intrusion_roll=self.rng.random(),
        )
