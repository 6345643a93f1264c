# live_tuning.py
"""Hot-reloaded JSON tunables, e.g. ``{"Vision/cameraInverted": true}``."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

CAMERA_INVERTED_KEY = "Vision/cameraInverted"

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


class RuntimeParamWatcher:
    """Watch a JSON file and hot-reload its contents when it changes."""

    def __init__(self, path: str | Path = "runtime_params.json") -> None:
        self.path = Path(path).expanduser().resolve()
        self._stamp: Tuple[float, int] = (0.0, -1)  # (mtime, size)
        self.params: Dict[str, Any] = {}

        print(f"[Runtime] Watching: {self.path}")
        self._load(initial=True)

    # ------------------------------------------------------------------
    #   Internal helpers
    # ------------------------------------------------------------------
    def _load(self, *, initial: bool = False) -> None:
        try:
            with self.path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
            stat = self.path.stat()
            self._stamp = (stat.st_mtime, stat.st_size)
            if not isinstance(data, dict):
                print(f"[Runtime] {self.path} must hold a JSON object – keeping old params.")
                return
            # Swap the whole dict so readers never see a half-built one
            self.params = data
            if not initial:
                print(f"[Runtime] Reloaded parameters from {self.path}")
        except FileNotFoundError:
            if initial:
                print(
                    f"[Runtime] {self.path} not found – using defaults "
                    "(create the file to enable live tuning)."
                )
            else:
                print(f"[Runtime] {self.path} was deleted – keeping old params.")
        except json.JSONDecodeError as exc:
            print(f"[Runtime] JSON error in {self.path}: {exc}")
        except OSError as exc:
            print(f"[Runtime] Failed to reload {self.path}: {exc}")

    # ------------------------------------------------------------------
    #   Public API
    # ------------------------------------------------------------------
    def maybe_reload(self) -> bool:
        """
        If the watched file changed since the last call reload it and
        return **True**, else return **False**.
        """
        try:
            stat = self.path.stat()
        except OSError:
            return False

        mtime, fsize = self._stamp
        if stat.st_size != fsize or stat.st_mtime != mtime:
            self._load()
            return True
        return False

    def get(self, key: str, default: Any | None = None) -> Any:
        return self.params.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.params.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return default

    def flag(self, key: str = CAMERA_INVERTED_KEY, default: bool = False) -> Callable[[], bool]:
        """Zero-argument accessor that re-checks the file on every call."""
        def _read() -> bool:
            self.maybe_reload()
            return self.get_bool(key, default)
        return _read
