# output.py
"""Processed-video output: resize to the stream resolution, keep the latest
frame for whoever serves it, optionally show it in a window."""
from __future__ import annotations

import threading
from typing import Optional

import cv2
import numpy as np

from target_vision.config import OutputConfig


class VideoOutput:
    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self._lock = threading.Lock()
        self._latest: Optional[np.ndarray] = None
        self.frames_out = 0
        self._window_open = False

    def put_frame(self, image: np.ndarray) -> None:
        size = (self.config.width, self.config.height)
        if image.shape[1] != size[0] or image.shape[0] != size[1]:
            frame = cv2.resize(image, size, interpolation=cv2.INTER_AREA)
        else:
            frame = image
        with self._lock:
            self._latest = frame
            self.frames_out += 1

        if self.config.show_window:
            if not self._window_open:
                cv2.namedWindow(self.config.name, cv2.WINDOW_NORMAL)
                self._window_open = True
            cv2.imshow(self.config.name, frame)
            cv2.waitKey(1)

    @property
    def latest(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._latest

    def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.config.name)
            self._window_open = False
