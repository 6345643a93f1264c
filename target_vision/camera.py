# camera.py
"""Thin VideoCapture wrapper configured from an FRC camera descriptor, with
a v4l2-ctl fallback for controls OpenCV doesn't expose."""

from __future__ import annotations

import subprocess
import time
from typing import Any, Optional, Tuple

import cv2
import numpy as np

from target_vision.config import CameraConfig

# Descriptor pixel formats -> FOURCC codes
_FOURCC = {"MJPEG": "MJPG", "YUYV": "YUYV", "RGB565": "RGBP", "BGR": "BGR3", "GRAY": "GREY"}


class Camera:
    def __init__(self, config: CameraConfig) -> None:
        self.config = config
        self.cap: Optional[cv2.VideoCapture] = None

        # Exposed runtime-queryable values
        self.actual_width: int = 0
        self.actual_height: int = 0
        self.actual_fps: float = 0.0

    # ------------------------------------------------------------------ #
    #   I N T E R N A L   H E L P E R S
    # ------------------------------------------------------------------ #
    def _source(self) -> int | str:
        path = self.config.path
        return int(path) if path.isdigit() else path

    @staticmethod
    def _set_v4l2_ctrl(dev: int | str, name: str, value: Any) -> None:
        """Best-effort helper: silently ignore if v4l2-ctl is not installed."""
        node = f"/dev/video{dev}" if isinstance(dev, int) else str(dev)
        cmd = ["v4l2-ctl", "-d", node, "--set-ctrl", f"{name}={value}"]
        try:
            subprocess.run(cmd, check=True, capture_output=True)
            print(f"[Camera] v4l2-ctl set-ctrl {name}={value}")
        except FileNotFoundError:
            print("[Camera] Warning: v4l2-ctl not installed; skipping", name)
        except subprocess.CalledProcessError as exc:
            print(f"[Camera] v4l2-ctl error: {exc.stderr.decode().strip()}")

    def _apply_settings(self) -> None:
        cfg = self.config
        if cfg.pixel_format:
            code = _FOURCC.get(cfg.pixel_format.upper(), cfg.pixel_format.upper()[:4])
            self.cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*code.ljust(4)))
        if cfg.width:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.width)
        if cfg.height:
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.height)
        if cfg.fps:
            self.cap.set(cv2.CAP_PROP_FPS, cfg.fps)
        if cfg.brightness is not None:
            self.cap.set(cv2.CAP_PROP_BRIGHTNESS, cfg.brightness)

        # "auto" / "hold" / numeric, as in the descriptor
        if cfg.white_balance == "auto":
            self.cap.set(cv2.CAP_PROP_AUTO_WB, 1)
        elif cfg.white_balance == "hold":
            self.cap.set(cv2.CAP_PROP_AUTO_WB, 0)
        elif isinstance(cfg.white_balance, (int, float)):
            self.cap.set(cv2.CAP_PROP_AUTO_WB, 0)
            self.cap.set(cv2.CAP_PROP_WB_TEMPERATURE, cfg.white_balance)

        # 3 = aperture-priority auto, 1 = manual on V4L2
        if cfg.exposure == "auto":
            self.cap.set(cv2.CAP_PROP_AUTO_EXPOSURE, 3)
        elif cfg.exposure == "hold":
            self.cap.set(cv2.CAP_PROP_AUTO_EXPOSURE, 1)
        elif isinstance(cfg.exposure, (int, float)):
            self.cap.set(cv2.CAP_PROP_AUTO_EXPOSURE, 1)
            self.cap.set(cv2.CAP_PROP_EXPOSURE, cfg.exposure)

        for prop in cfg.properties:
            name, value = prop.get("name"), prop.get("value")
            if name is not None and value is not None:
                self._set_v4l2_ctrl(self._source(), name, value)

    # ------------------------------------------------------------------ #
    #   P U B L I C   A P I
    # ------------------------------------------------------------------ #
    def open(self) -> bool:
        """Open the device and apply the configured video mode."""
        print(f"[Camera] Starting camera '{self.config.name}' on {self.config.path}")
        self.cap = cv2.VideoCapture(self._source())
        if not self.cap or not self.cap.isOpened():
            print(f"[Camera] Could not open '{self.config.name}' ({self.config.path})")
            self.cap = None
            return False

        self._apply_settings()
        time.sleep(0.1)  # Let driver settle

        self.actual_width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.actual_height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.actual_fps = self.cap.get(cv2.CAP_PROP_FPS)

        print(
            f"[Camera] '{self.config.name}' "
            f"{self.actual_width}x{self.actual_height}@{self.actual_fps:.1f} FPS"
        )
        if self.actual_width == 0 or self.actual_height == 0:
            print("[Camera] Error: camera returned zero resolution")
            self.release()
            return False
        return True

    # ------------------------------------------------------------------ #
    #   S T A N D A R D   W R A P P E R S
    # ------------------------------------------------------------------ #
    def read(self) -> Optional[np.ndarray]:
        if not self.is_opened():
            return None
        ret, frame = self.cap.read()
        return frame if ret and frame is not None else None

    def is_opened(self) -> bool:
        return bool(self.cap and self.cap.isOpened())

    def release(self) -> None:
        if self.cap:
            print(f"[Camera] Releasing '{self.config.name}'")
            self.cap.release()
            self.cap = None

    def frame_size(self) -> Tuple[int, int]:
        return self.actual_width, self.actual_height
