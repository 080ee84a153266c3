"""Camera adapters package.

Frames come from the console's camera through `OpenCVCamera`, which reads
a local capture device (USB webcam or built-in camera), an RTSP stream, or
a local video file for demos. `create_camera` picks the settings for a
configured source, and `FrameGrabber` shares one adapter between the
dashboard's live feed and the analysis scheduler.
"""

from .opencv_camera import OpenCVCamera
from .frame_grabber import FrameGrabber, create_camera
from .encoding import encode_jpeg

__all__ = [
    "OpenCVCamera",
    "FrameGrabber",
    "create_camera",
    "encode_jpeg",
]
