"""Pulsed buzzer tone and audio outputs.

The warning is a harsh square wave, switched on and off every ``pulse``
seconds for ``duration`` seconds. Each `AudioWarningEmitter.emit` call
hands a complete, independent tone to the output; rapid alerts overlap
instead of being merged or cut short.

Outputs follow a browser-like life cycle: they may start ``"suspended"``
(autoplay policy) and are resumed on the first user interaction or the
first emission, whichever comes first.
"""

from __future__ import annotations

import io
import sys
import threading
import warnings
import wave
from collections import deque
from typing import Callable, Deque, List, Optional, Protocol, TextIO

import numpy as np


def synthesize_tone(
    frequency: float = 550.0,
    gain: float = 0.15,
    duration: float = 5.0,
    pulse: float = 0.5,
    sample_rate: int = 22050,
) -> np.ndarray:
    """Return a pulsed square wave as float32 samples in [-gain, gain].

    The tone is on during ``[k * 2 * pulse, k * 2 * pulse + pulse)`` and
    silent for the rest of each period.
    """
    n = int(round(duration * sample_rate))
    t = np.arange(n, dtype=np.float64) / sample_rate
    square = np.where(np.sin(2.0 * np.pi * frequency * t) >= 0.0, 1.0, -1.0)
    gate = (np.mod(t, 2.0 * pulse) < pulse).astype(np.float64)
    return (gain * square * gate).astype(np.float32)


def to_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode float samples in [-1, 1] as a mono 16-bit WAV file."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm.tobytes())
    return buf.getvalue()


class AudioOutput(Protocol):
    state: str

    def resume(self) -> None: ...

    def play(self, samples: np.ndarray, sample_rate: int) -> None: ...


class ClipQueueOutput:
    """Queue WAV clips for a browser to play.

    The Streamlit dashboard drains the queue on every refresh and renders
    each clip with autoplay, so overlapping alerts produce overlapping
    sound. ``max_clips`` bounds the backlog when nobody is draining.
    """

    def __init__(self, max_clips: int = 8) -> None:
        self.state = "suspended"
        self._clips: Deque[bytes] = deque(maxlen=max_clips)
        self._lock = threading.Lock()

    def resume(self) -> None:
        self.state = "running"

    def play(self, samples: np.ndarray, sample_rate: int) -> None:
        clip = to_wav(samples, sample_rate)
        with self._lock:
            self._clips.append(clip)

    def drain(self) -> List[bytes]:
        with self._lock:
            clips = list(self._clips)
            self._clips.clear()
        return clips


class TerminalBellOutput:
    """Ring the terminal bell once per pulse, for headless runs."""

    def __init__(self, stream: Optional[TextIO] = None, pulse: float = 0.5) -> None:
        self.state = "running"
        self.stream = stream or sys.stdout
        self.pulse = pulse

    def resume(self) -> None:
        self.state = "running"

    def play(self, samples: np.ndarray, sample_rate: int) -> None:
        pulses = max(1, int(round(len(samples) / sample_rate / (2 * self.pulse))))
        self.stream.write("\a" * pulses)
        self.stream.flush()


class AudioWarningEmitter:
    """Best-effort audible alarm.

    Parameters
    ----------
    output_factory : callable, optional
        Builds the audio output on first use. If it raises, the emitter
        warns once and stays silent for the rest of the session.
    frequency, gain, duration, pulse, sample_rate
        Tone parameters passed to `synthesize_tone`.
    """

    def __init__(
        self,
        output_factory: Callable[[], AudioOutput] = ClipQueueOutput,
        frequency: float = 550.0,
        gain: float = 0.15,
        duration: float = 5.0,
        pulse: float = 0.5,
        sample_rate: int = 22050,
    ) -> None:
        self.output_factory = output_factory
        self.frequency = frequency
        self.gain = gain
        self.duration = duration
        self.pulse = pulse
        self.sample_rate = sample_rate
        self.output: Optional[AudioOutput] = None
        self.unavailable = False
        self.emitted = 0
        self._tone: Optional[np.ndarray] = None

    @property
    def tone(self) -> np.ndarray:
        if self._tone is None:
            self._tone = synthesize_tone(
                self.frequency, self.gain, self.duration, self.pulse, self.sample_rate
            )
        return self._tone

    def prime(self) -> Optional[AudioOutput]:
        """Open the output if needed and resume it when suspended."""
        if self.unavailable:
            return None
        if self.output is None:
            try:
                self.output = self.output_factory()
            except Exception as exc:
                warnings.warn(f"Audio output unavailable: {exc}", stacklevel=2)
                self.unavailable = True
                return None
        if self.output.state == "suspended":
            try:
                self.output.resume()
            except Exception as exc:
                warnings.warn(f"Audio output could not be resumed: {exc}", stacklevel=2)
        return self.output

    def emit(self) -> bool:
        """Schedule one pulsed tone. Returns False if nothing was played."""
        output = self.prime()
        if output is None:
            return False
        try:
            output.play(self.tone, self.sample_rate)
        except Exception as exc:
            warnings.warn(f"Audio playback failed: {exc}", stacklevel=2)
            return False
        self.emitted += 1
        return True
