from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import List, Optional

import numpy as np
import pytest

from alarms.buzzer import AudioWarningEmitter
from analysis.gemini_client import RemoteAnalysisClient
from camera_adapters.frame_grabber import FrameGrabber


class RiggedRandom:
    """Random source returning fixed draws."""

    def __init__(self, roll: float = 0.99, delta: float = 0.0) -> None:
        self.roll = roll
        self.delta = delta

    def random(self) -> float:
        return self.roll

    def uniform(self, a: float, b: float) -> float:
        return self.delta


class FakeCamera:
    def __init__(self, fail_open: bool = False, frames: bool = True) -> None:
        self.fail_open = fail_open
        self.frames = frames
        self.opened = False
        self.released = False

    def open(self) -> None:
        if self.fail_open:
            raise RuntimeError("no camera")
        self.opened = True

    def read(self):
        if not self.opened:
            raise RuntimeError("FakeCamera: not opened")
        if not self.frames:
            return False, None
        return True, np.full((48, 64, 3), 127, dtype=np.uint8)

    def release(self) -> None:
        self.opened = False
        self.released = True


class FakeModels:
    """Stands in for ``client.aio.models`` of google-genai."""

    def __init__(
        self,
        analysis: Optional[dict] = None,
        directive: str = "Reduce speed to 80 km/h.",
        fail: bool = False,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.analysis_text = json.dumps(analysis) if analysis is not None else ""
        self.directive = directive
        self.fail = fail
        self.gate = gate
        self.calls: List[dict] = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionError("network unreachable")
        if config is not None:
            return SimpleNamespace(text=self.analysis_text)
        return SimpleNamespace(text=self.directive)


def fake_client(models: FakeModels) -> RemoteAnalysisClient:
    return RemoteAnalysisClient(model="test-model", client=SimpleNamespace(aio=SimpleNamespace(models=models)))


def analysis_payload(probability: float, assessment: str = "Obstacle near rail") -> dict:
    return {
        "assessment": assessment,
        "hazardProbability": probability,
        "recommendations": ["Slow down"],
        "detectedObjects": ["debris"],
    }


class RecordingOutput:
    def __init__(self) -> None:
        self.state = "suspended"
        self.plays = 0
        self.resumed = 0

    def resume(self) -> None:
        self.resumed += 1
        self.state = "running"

    def play(self, samples, sample_rate) -> None:
        self.plays += 1


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def emitter(output: RecordingOutput) -> AudioWarningEmitter:
    return AudioWarningEmitter(lambda: output)


@pytest.fixture
def grabber() -> FrameGrabber:
    grabber = FrameGrabber(FakeCamera())
    assert grabber.start()
    return grabber
