"""Frame encoding helpers."""

from __future__ import annotations

import cv2
import numpy as np


def encode_jpeg(frame: np.ndarray, quality: int = 80) -> bytes:
    """Encode a BGR frame as JPEG bytes.

    Parameters
    ----------
    frame : numpy.ndarray
        Image in OpenCV's BGR layout.
    quality : int, optional
        JPEG quality between 0 and 100.

    Raises
    ------
    ValueError
        If OpenCV cannot encode the frame (e.g. an empty array).
    """
    if frame is None or frame.size == 0:
        raise ValueError("Cannot encode an empty frame")
    quality = int(max(0, min(100, quality)))
    ok, buffer = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    if not ok:
        raise ValueError("OpenCV failed to encode frame as JPEG")
    return buffer.tobytes()
