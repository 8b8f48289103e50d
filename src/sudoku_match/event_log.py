"""Light-weight JSONL log of match lifecycle events with rotation support.

The log is disabled until :func:`configure` is called with a directory.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from .project_config import SessionConfig

__all__ = ["append_event", "configure", "configure_from", "current_log_path", "disable", "is_enabled"]

_DEFAULT_MAX_BYTES = 100 * 1024 * 1024
_LOCK = threading.Lock()
_LOG_DIR: Path | None = None
_MAX_BYTES = _DEFAULT_MAX_BYTES
_CURRENT_PATH: Path | None = None


def configure(base_dir: str | Path, *, max_bytes: int | None = None) -> None:
    """Write subsequent events below ``base_dir``."""

    global _LOG_DIR, _MAX_BYTES, _CURRENT_PATH
    with _LOCK:
        _LOG_DIR = Path(base_dir)
        _MAX_BYTES = max_bytes or _DEFAULT_MAX_BYTES
        _CURRENT_PATH = None


def disable() -> None:
    global _LOG_DIR, _CURRENT_PATH
    with _LOCK:
        _LOG_DIR = None
        _CURRENT_PATH = None


def is_enabled() -> bool:
    return _LOG_DIR is not None


def configure_from(config: SessionConfig) -> None:
    """Apply the ``[logging]`` settings; an empty ``events_dir`` disables the log."""

    if config.events_dir:
        configure(config.events_dir, max_bytes=config.events_max_bytes)
    else:
        disable()


def _date_prefix() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d")


def _resolve_log_path(base_dir: Path) -> Path:
    global _CURRENT_PATH
    date_dir = base_dir / _date_prefix()
    date_dir.mkdir(parents=True, exist_ok=True)

    if _CURRENT_PATH is not None and _CURRENT_PATH.parent == date_dir and _CURRENT_PATH.exists():
        if _CURRENT_PATH.stat().st_size < _MAX_BYTES:
            return _CURRENT_PATH

    counter = 0
    while True:
        candidate = date_dir / f"matches_{counter:02d}.jsonl"
        if not candidate.exists() or candidate.stat().st_size < _MAX_BYTES:
            _CURRENT_PATH = candidate
            return candidate
        counter += 1


def append_event(event: Dict[str, Any]) -> Path | None:
    """Append ``event`` to the active JSONL file and return the file path.

    Returns ``None`` without touching the filesystem when logging is disabled.
    """

    payload = dict(event)
    payload.setdefault("ts", datetime.now(timezone.utc).isoformat(timespec="milliseconds"))

    line = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    with _LOCK:
        if _LOG_DIR is None:
            return None
        path = _resolve_log_path(_LOG_DIR)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
    return path


def current_log_path() -> Path | None:
    return _CURRENT_PATH
