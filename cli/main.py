# main.py
"""
Entry-point for the target-pair vision coprocessor.

Usage::

    python cli/main.py [/boot/frc.json] [--tuning runtime_params.json] [--show]

Live-tuning
-----------
While the program is running you can edit the tuning file (default
``runtime_params.json``) and set ``"Vision/cameraInverted"`` to ``true`` or
``false``; the new value is picked up on the very next frame.
"""
from __future__ import annotations

import argparse
import sys
import time
from typing import List, Optional

from target_vision.camera import Camera
from target_vision.config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    OutputConfig,
    PipelineConfig,
    TargetConfig,
    read_config,
)
from target_vision.live_tuning import CAMERA_INVERTED_KEY, RuntimeParamWatcher
from target_vision.output import VideoOutput
from target_vision.pipeline import ContourPipeline
from target_vision.processor import FrameProcessor, VisionThread
from target_vision.telemetry import ConsoleTelemetry


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Finds and pairs retro-reflective vision targets")
    parser.add_argument("config", nargs="?", default=DEFAULT_CONFIG_FILE,
                        help="camera descriptor JSON (default: %(default)s)")
    parser.add_argument("--tuning", default="runtime_params.json",
                        help="live-tuning JSON file (default: %(default)s)")
    parser.add_argument("--show", action="store_true",
                        help="show the processed stream in a window")
    return parser.parse_args(argv)


# ────────────────────────────────────────────────────────────────────────────
#   M A I N
# ────────────────────────────────────────────────────────────────────────────
def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        cfg = read_config(args.config)
    except ConfigError as exc:
        print(f"[Config] {exc}", file=sys.stderr)
        return 1

    # ------------------------ Banner ----------------------
    if cfg.server:
        print("Setting up telemetry server")
    else:
        print(f"Setting up telemetry client for team {cfg.team}")
    print(f"Cameras: {', '.join(c.name for c in cfg.cameras) or 'none'}")

    cameras = [Camera(c) for c in cfg.cameras]
    for cam in cameras:
        cam.open()

    telemetry = ConsoleTelemetry()
    watcher = RuntimeParamWatcher(args.tuning)
    output: Optional[VideoOutput] = None
    vision: Optional[VisionThread] = None

    # Image processing runs on camera 0 if present
    if cameras and cameras[0].is_opened():
        output = VideoOutput(OutputConfig(show_window=args.show))
        processor = FrameProcessor(
            cameras[0].frame_size(),
            telemetry,
            is_inverted=watcher.flag(CAMERA_INVERTED_KEY, False),
            output=output,
            target_cfg=TargetConfig(),
        )
        vision = VisionThread(cameras[0], ContourPipeline(PipelineConfig()), processor)
        vision.start()
    elif cameras:
        print(f"[Vision] Camera '{cameras[0].config.name}' not open – processing disabled")

    # ------------------------ Park ------------------------
    try:
        while True:
            time.sleep(10)
    except KeyboardInterrupt:
        print("\n[Main] Stopped by user.")
    finally:
        if vision is not None:
            vision.stop()
            vision.join(timeout=2.0)
        if output is not None:
            output.close()
        for cam in cameras:
            cam.release()
    return 0


if __name__ == "__main__":
    sys.exit(main())
