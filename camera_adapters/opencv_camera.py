"""OpenCV capture adapter.

One adapter covers every source the console accepts: a local capture
device addressed by index (index 0 is the rear-facing trackside camera),
a network stream such as an RTSP URL, or a recorded track video for demos.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple, Union

import cv2


class OpenCVCamera:
    """Frame source backed by `cv2.VideoCapture`.

    Attributes
    ----------
    source : int or str
        Device index, stream URL or video file path.
    api_preference : int, optional
        OpenCV backend, e.g. ``cv2.CAP_FFMPEG`` for RTSP streams.
    loop : bool
        Rewind to the first frame at end of stream (video files).
    width, height : int, optional
        Requested capture resolution. Drivers are free to ignore it.
    """

    def __init__(
        self,
        source: Union[int, str],
        api_preference: Optional[int] = None,
        loop: bool = False,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        self.source = source
        self.api_preference = api_preference
        self.loop = loop
        self.width = width
        self.height = height
        self.capture: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        if self.capture is None:
            if self.api_preference is None:
                self.capture = cv2.VideoCapture(self.source)
            else:
                self.capture = cv2.VideoCapture(self.source, self.api_preference)
        if not self.capture.isOpened():
            self.capture = None
            raise RuntimeError(f"Failed to open video source: {self.source}")
        if self.width:
            self.capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        if self.height:
            self.capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

    def read(self) -> Tuple[bool, Any]:
        """Read the next frame, rewinding once at the end when looping."""
        if self.capture is None:
            raise RuntimeError("OpenCVCamera: source not opened. Call open() first.")
        ret, frame = self.capture.read()
        if not ret and self.loop:
            self.capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
            ret, frame = self.capture.read()
        return ret, frame

    def release(self) -> None:
        if self.capture is not None:
            self.capture.release()
            self.capture = None
