# telemetry.py
"""Fire-and-forget key/value telemetry sinks (last write wins)."""
from __future__ import annotations

import threading
import time
from typing import Any, Dict, Protocol

KEY_TARGET_PAIRS = "Vision/targetPairs"
KEY_PROCESS_TIME = "Vision/processTime"
KEY_POST_PROCESS_TIME = "Vision/postProcessTime"
KEY_IMAGE_CENTER_X = "Vision/imageCenterX"
KEY_IS_ORDERED = "Vision/isOrdered"


class TelemetrySink(Protocol):
    def publish(self, key: str, value: Any) -> None: ...


class MemoryTelemetry:
    """Holds the latest value per key; safe to read from another thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, Any] = {}

    def publish(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def get(self, key: str, default: Any | None = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._values)


class ConsoleTelemetry(MemoryTelemetry):
    """
    Stand-in for a dashboard: keeps the latest values and prints a
    one-line summary of a whole frame at most every ``interval_s`` seconds.
    """

    def __init__(self, interval_s: float = 1.0) -> None:
        super().__init__()
        self.interval_s = interval_s
        self._last_print = 0.0

    def publish(self, key: str, value: Any) -> None:
        super().publish(key, value)
        # isOrdered closes each frame, so the summary never mixes two frames
        if key != KEY_IS_ORDERED:
            return
        now = time.monotonic()
        if now - self._last_print < self.interval_s:
            return
        self._last_print = now
        snap = self.snapshot()
        pairs = snap.get(KEY_TARGET_PAIRS) or []
        proc = snap.get(KEY_PROCESS_TIME)
        post = snap.get(KEY_POST_PROCESS_TIME)
        print(
            f"[Telemetry] pairs={len(pairs)} "
            f"ordered={snap.get(KEY_IS_ORDERED)} "
            f"proc={proc if proc is None else f'{proc:.1f}'}ms "
            f"post={post if post is None else f'{post:.1f}'}ms "
            f"cx={snap.get(KEY_IMAGE_CENTER_X)}"
        )
