"""Alarm package.

Audible warnings raised whenever a new alert enters the ledger. The tone is
synthesised with numpy and handed to an audio output; outputs are opened
lazily and any failure leaves the console silent rather than broken.
"""

from .buzzer import (
    AudioWarningEmitter,
    ClipQueueOutput,
    TerminalBellOutput,
    synthesize_tone,
    to_wav,
)

__all__ = [
    "AudioWarningEmitter",
    "ClipQueueOutput",
    "TerminalBellOutput",
    "synthesize_tone",
    "to_wav",
]
