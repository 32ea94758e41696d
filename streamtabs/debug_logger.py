#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Debug logging for streamtabs.

Outputs JSON lines format to ~/.local/state/streamtabs/debug.log when
STREAMTABS_DEBUG (or STREAMTABS_LOG_LEVEL) is set. The terminal belongs to
the viewer, so nothing is ever printed while it runs.

Levels:
  0 or unset: disabled
  1: info - session start, pause/unpause, end of input, errors, quit
  2: debug - tab focus, selection changes, render timing
  3: trace - every routed line
"""

import json
import os
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


# Configuration
DEBUG_ENV_VAR = "STREAMTABS_DEBUG"  # Primary name
DEBUG_ENV_VAR_FALLBACK = "STREAMTABS_LOG_LEVEL"
CONFIG_ENV_VAR = "STREAMTABS_CONFIG"
STATE_ENV_VAR = "STREAMTABS_STATE"
LOG_FILE_NAME = "debug.log"
MAX_LOG_SIZE_MB = 10
MAX_LOG_FILES = 3

# Session ID - generated once per process
_SESSION_ID: Optional[str] = None


def _get_session_id() -> str:
    """Get or create a session ID for correlating events."""
    global _SESSION_ID
    if _SESSION_ID is None:
        _SESSION_ID = uuid.uuid4().hex[:12]
    return _SESSION_ID


def _get_settings_path() -> Path:
    """Settings file: STREAMTABS_CONFIG, else XDG_CONFIG_HOME/streamtabs/settings.json."""
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit)
    xdg_config = os.environ.get("XDG_CONFIG_HOME") or (Path.home() / ".config")
    return Path(xdg_config) / "streamtabs" / "settings.json"


def _read_settings_debug_level() -> Optional[int]:
    """Read debugLevel from the settings file if it exists.

    Returns None if file doesn't exist or debugLevel isn't set.
    """
    settings_path = _get_settings_path()
    try:
        if not settings_path.exists():
            return None
        with open(settings_path) as f:
            settings = json.load(f)
        level = settings.get("debugLevel")
        if level is not None:
            return int(level)
    except (OSError, json.JSONDecodeError, ValueError, TypeError, AttributeError):
        pass
    return None


def _get_debug_level() -> int:
    """Get the configured debug level.

    Checks in order of precedence:
    1. STREAMTABS_DEBUG / STREAMTABS_LOG_LEVEL env var
    2. debugLevel in the settings file
    3. Default: 0 (disabled)
    """
    env_level = os.environ.get(DEBUG_ENV_VAR) or os.environ.get(DEBUG_ENV_VAR_FALLBACK)
    if env_level:
        try:
            return int(env_level)
        except ValueError:
            # Treat any non-numeric truthy value as level 1
            return 1 if env_level.lower() in ("true", "yes", "on") else 0

    settings_level = _read_settings_debug_level()
    if settings_level is not None:
        return settings_level

    return 0


def _get_log_path() -> Path:
    """Get the log file path.

    Uses XDG_STATE_HOME (~/.local/state) for logs per the XDG base directory layout.
    STREAMTABS_STATE overrides with full path to state dir.
    """
    explicit_state = os.environ.get(STATE_ENV_VAR)
    if explicit_state:
        state_dir = Path(explicit_state)
    else:
        xdg_state = os.environ.get("XDG_STATE_HOME") or (Path.home() / ".local" / "state")
        state_dir = Path(xdg_state) / "streamtabs"
    return state_dir / LOG_FILE_NAME


def _rotate_if_needed(log_path: Path) -> None:
    """Rotate log file if it exceeds size limit."""
    if not log_path.exists():
        return

    size_mb = log_path.stat().st_size / (1024 * 1024)
    if size_mb < MAX_LOG_SIZE_MB:
        return

    # Rotate: debug.log.2 -> delete, debug.log.1 -> .2, debug.log -> .1
    for i in range(MAX_LOG_FILES - 1, 0, -1):
        old_path = log_path.parent / f"{LOG_FILE_NAME}.{i}"
        new_path = log_path.parent / f"{LOG_FILE_NAME}.{i + 1}"
        if old_path.exists():
            if i == MAX_LOG_FILES - 1:
                old_path.unlink()
            else:
                old_path.rename(new_path)

    backup_path = log_path.parent / f"{LOG_FILE_NAME}.1"
    log_path.rename(backup_path)


class DebugLogger:
    """
    JSON lines debug logger for streamtabs.

    All methods are no-ops when STREAMTABS_DEBUG is 0 or unset.
    """

    def __init__(self) -> None:
        self._level = _get_debug_level()
        self._log_path = _get_log_path() if self._level > 0 else None

    @property
    def enabled(self) -> bool:
        return self._level > 0

    @property
    def level(self) -> int:
        return self._level

    @property
    def log_path(self) -> Optional[Path]:
        return self._log_path

    def _write(self, event: Dict[str, Any]) -> None:
        """Write an event to the log file."""
        if not self.enabled or self._log_path is None:
            return

        event["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        event["session_id"] = _get_session_id()
        event["pid"] = os.getpid()

        try:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            _rotate_if_needed(self._log_path)

            with open(self._log_path, "a") as f:
                f.write(json.dumps(event, default=str) + "\n")
        except (OSError, ValueError) as e:
            # Never let logging errors affect the viewer.
            if self._level >= 3:
                print(f"[debug_logger] write failed: {type(e).__name__}: {e}", file=sys.stderr)

    # =========================================================================
    # Level 1: Info events
    # =========================================================================

    def session_start(self, filters: List[str], capacity: int) -> None:
        """Log viewer start with the configured tabs."""
        if self._level < 1:
            return
        self._write(
            {
                "event": "session_start",
                "level": "info",
                "filters": filters[:9],
                "tab_count": len(filters) + 1,
                "capacity": capacity,
            }
        )

    def input_closed(self, lines_read: int, reason: str = "eof") -> None:
        """Log the end of the input stream."""
        if self._level < 1:
            return
        self._write(
            {
                "event": "input_closed",
                "level": "info",
                "lines_read": lines_read,
                "reason": reason,
            }
        )

    def pause_changed(self, paused: bool, snapshot: Optional[List[int]] = None) -> None:
        """Log a pause/unpause with the captured per-tab lengths."""
        if self._level < 1:
            return
        event: Dict[str, Any] = {"event": "pause_changed", "level": "info", "paused": paused}
        if snapshot is not None:
            event["snapshot"] = snapshot
        self._write(event)

    def error(self, operation: str, error: str, context: Optional[Dict] = None) -> None:
        """Log errors - level 1 (always shown when debug enabled)."""
        if self._level < 1:
            return
        event = {"event": "error", "level": "error", "op": operation, "err": error}
        if context:
            event["ctx"] = context
        self._write(event)

    def quit(self, lines_read: int) -> None:
        """Log a user quit."""
        if self._level < 1:
            return
        self._write({"event": "quit", "level": "info", "lines_read": lines_read})

    # =========================================================================
    # Level 2: Debug events (includes timing)
    # =========================================================================

    def tab_focused(self, index: int, unread_before: int, paused: bool) -> None:
        """Log a focus change and how much it marked read."""
        if self._level < 2:
            return
        self._write(
            {
                "event": "tab_focused",
                "level": "debug",
                "tab": index,
                "unread_before": unread_before,
                "paused": paused,
            }
        )

    def selection_changed(self, sequence: Optional[int]) -> None:
        """Log a selection toggle; sequence is None when cleared."""
        if self._level < 2:
            return
        self._write({"event": "selection_changed", "level": "debug", "sequence": sequence})

    @contextmanager
    def timer(self, operation: str, context: Optional[Dict[str, Any]] = None):
        """Context manager to time any operation at level 2.

        Usage:
            with logger.timer("render", {"rows": 40}):
                draw()

        Logs: {"event": "timing", "op": "render", "ms": 1.5, "rows": 40}
        """
        if self._level < 2:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            event = {
                "event": "timing",
                "level": "debug",
                "op": operation,
                "ms": round(duration_ms, 2),
            }
            if context:
                event.update(context)
            self._write(event)

    # =========================================================================
    # Level 3: Trace events
    # =========================================================================

    def line_routed(self, sequence: int, tabs: List[int]) -> None:
        """Log the tabs a single line was appended to."""
        if self._level < 3:
            return
        self._write(
            {
                "event": "line_routed",
                "level": "trace",
                "sequence": sequence,
                "tabs": tabs,
            }
        )


# Global singleton
_logger: Optional[DebugLogger] = None


def get_logger() -> DebugLogger:
    """Get the global debug logger instance."""
    global _logger
    if _logger is None:
        _logger = DebugLogger()
    return _logger


def reset_logger() -> None:
    """Reset the global logger (for testing)."""
    global _logger
    _logger = None
