"""Shared frame grabber.

The live feed on the dashboard and the analysis scheduler both need frames
from the same camera. `FrameGrabber` owns the adapter, serialises reads with
a lock and hands out copies of each frame. A camera that cannot be opened
leaves the grabber "blank": every grab returns None and the console keeps
running without a feed.
"""

from __future__ import annotations

import threading
import warnings
from typing import Any, Optional, Protocol, Tuple, Union

import cv2
import numpy as np

from .opencv_camera import OpenCVCamera


class CameraAdapter(Protocol):
    def open(self) -> None: ...

    def read(self) -> Tuple[bool, Any]: ...

    def release(self) -> None: ...


def create_camera(
    source: Union[int, str, None],
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> OpenCVCamera:
    """Configure an adapter for ``source``.

    Integers (or digit strings) select a capture device at the requested
    resolution, ``rtsp://`` URLs an RTSP stream read through FFmpeg, and
    anything else a video file that loops at its end.
    """
    if source is None:
        source = 0
    if isinstance(source, int):
        return OpenCVCamera(source, width=width, height=height)
    text = str(source).strip()
    if text.isdigit():
        return OpenCVCamera(int(text), width=width, height=height)
    if text.startswith("rtsp://"):
        return OpenCVCamera(text, api_preference=cv2.CAP_FFMPEG)
    return OpenCVCamera(text, loop=True)


class FrameGrabber:
    """Thread-safe access to one camera adapter."""

    def __init__(self, camera: Optional[CameraAdapter]) -> None:
        self.camera = camera
        self.available = False
        self._lock = threading.Lock()

    def start(self) -> bool:
        """Open the camera. Returns False (with a warning) if it fails."""
        if self.camera is None:
            return False
        with self._lock:
            try:
                self.camera.open()
            except Exception as exc:
                warnings.warn(f"Camera access failed: {exc}", stacklevel=2)
                self.available = False
                return False
            self.available = True
            return True

    def grab(self) -> Optional[np.ndarray]:
        """Read a fresh frame, or None if the camera is unavailable."""
        if not self.available or self.camera is None:
            return None
        with self._lock:
            try:
                ret, frame = self.camera.read()
            except RuntimeError as exc:
                warnings.warn(f"Camera read failed: {exc}", stacklevel=2)
                return None
            if not ret or frame is None:
                return None
            return frame.copy()

    def release(self) -> None:
        """Stop the stream and free the device."""
        with self._lock:
            if self.camera is not None:
                self.camera.release()
            self.available = False
