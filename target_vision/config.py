# config.py
"""Typed configuration blobs plus the FRC camera-descriptor reader.

The descriptor is the JSON file the coprocessor image ships at
``/boot/frc.json``::

    {
        "team": <team number>,
        "ntmode": <"client" or "server", "client" if unspecified>,
        "cameras": [
            {
                "name": <camera name>,
                "path": <path, e.g. "/dev/video0">,
                "pixel format": <"MJPEG", "YUYV", etc>,   // optional
                "width": <video mode width>,              // optional
                "height": <video mode height>,            // optional
                "fps": <video mode fps>,                  // optional
                "brightness": <percentage brightness>,    // optional
                "white balance": <"auto", "hold", value>, // optional
                "exposure": <"auto", "hold", value>,      // optional
                "properties": [{"name": ..., "value": ...}],  // optional
                "stream": {...}   // optional, MJPEG server settings; ignored here
            }
        ]
    }
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_CONFIG_FILE = "/boot/frc.json"


class ConfigError(ValueError):
    """Raised when the camera descriptor is missing or structurally wrong."""


@dataclass
class CameraConfig:
    name: str = "camera"
    path: str = "/dev/video0"
    pixel_format: Optional[str] = None   # "MJPEG", "YUYV", ...
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[int] = None
    brightness: Optional[int] = None     # 0‒100
    white_balance: Any = None            # "auto", "hold" or a value
    exposure: Any = None                 # "auto", "hold" or a value
    properties: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class PipelineConfig:
    # Bright green retro-reflective tape under an LED ring
    hsv_lower: Tuple[int, int, int] = (55, 100, 80)
    hsv_upper: Tuple[int, int, int] = (95, 255, 255)
    min_area_px: float = 40.0
    min_perimeter_px: float = 20.0
    approx_epsilon_frac: float = 0.02   # of contour perimeter


@dataclass
class TargetConfig:
    min_skew_deg: float = 5.0      # within this of vertical or horizontal -> UNKNOWN
    min_elongation: float = 1.5    # major/minor axis ratio below this -> UNKNOWN


@dataclass
class OutputConfig:
    name: str = "Processed"
    width: int = 320
    height: int = 240
    show_window: bool = False


@dataclass
class VisionConfig:
    team: int = 0
    server: bool = False
    cameras: List[CameraConfig] = field(default_factory=list)


# ────────────────────────────────────────────────────────────────────────────
#   D E S C R I P T O R   R E A D E R
# ────────────────────────────────────────────────────────────────────────────
def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _read_camera_config(obj: Dict[str, Any], where: str) -> CameraConfig:
    name = obj.get("name")
    if name is None:
        raise ConfigError(f"config error in '{where}': could not read camera name")
    path = obj.get("path")
    if path is None:
        raise ConfigError(
            f"config error in '{where}': camera '{name}': could not read path"
        )
    try:
        return CameraConfig(
            name=str(name),
            path=str(path),
            pixel_format=obj.get("pixel format"),
            width=_opt_int(obj.get("width")),
            height=_opt_int(obj.get("height")),
            fps=_opt_int(obj.get("fps")),
            brightness=_opt_int(obj.get("brightness")),
            white_balance=obj.get("white balance"),
            exposure=obj.get("exposure"),
            properties=list(obj.get("properties") or []),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"config error in '{where}': camera '{name}': {exc}"
        ) from exc


def parse_config(top: Any, where: str = "<memory>") -> VisionConfig:
    """Build a :class:`VisionConfig` from an already-decoded JSON value."""
    if not isinstance(top, dict):
        raise ConfigError(f"config error in '{where}': must be JSON object")

    if "team" not in top:
        raise ConfigError(f"config error in '{where}': could not read team number")
    try:
        team = int(top["team"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"config error in '{where}': could not read team number"
        ) from exc

    server = False
    if "ntmode" in top:
        mode = str(top["ntmode"])
        if mode.lower() == "client":
            server = False
        elif mode.lower() == "server":
            server = True
        else:
            # Reported, not fatal: stays in client mode
            print(
                f"[Config] config error in '{where}': "
                f"could not understand ntmode value '{mode}'"
            )

    cameras = top.get("cameras")
    if cameras is None:
        raise ConfigError(f"config error in '{where}': could not read cameras")
    if not isinstance(cameras, list):
        raise ConfigError(f"config error in '{where}': cameras must be a list")

    cam_cfgs: List[CameraConfig] = []
    for cam in cameras:
        if not isinstance(cam, dict):
            raise ConfigError(f"config error in '{where}': camera must be JSON object")
        cam_cfgs.append(_read_camera_config(cam, where))

    return VisionConfig(team=team, server=server, cameras=cam_cfgs)


def read_config(path: str | Path = DEFAULT_CONFIG_FILE) -> VisionConfig:
    """Read and validate the camera descriptor at *path*."""
    where = str(path)
    try:
        with Path(path).expanduser().open("r", encoding="utf-8") as fp:
            top = json.load(fp)
    except OSError as exc:
        raise ConfigError(f"could not open '{where}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config error in '{where}': {exc}") from exc
    return parse_config(top, where)
