# uiauto_android/diaglogger.py
"""
@file diaglogger.py
@brief Structured diagnostics for element resolution.

Every failed resolution attempt emits a record with a fixed shape so that
misses can be replayed offline against the saved hierarchy dump:

    {device_id, x, y, node_count, from_cache, label, xml_snippet}
"""

from __future__ import annotations

import json
import os
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Mapping, Optional

NO_MATCH_FIELDS = ("device_id", "x", "y", "node_count", "from_cache", "label", "xml_snippet")

_TRUTHY = {"1", "true", "yes", "on"}


class DiagnosticLogger:
    """Thread-safe diagnostic logger with line/jsonl output and a ring buffer of recent records."""

    def __init__(self, maxlen: int = 200) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None
        self._format = "line"
        self._recent: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def configure(
        self,
        *,
        console: bool = True,
        file_path: Optional[str] = None,
        format: str = "line",
    ) -> None:
        fmt = (format or "line").lower()
        if fmt not in {"line", "jsonl"}:
            raise ValueError("DiagnosticLogger format must be 'line' or 'jsonl'")

        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            self._format = fmt

    def configure_from_env(self, env: Optional[Mapping[str, str]] = None) -> None:
        env = os.environ if env is None else env
        if env.get("UIAUTO_DIAG_LOGGING", "").lower() not in _TRUTHY:
            self.disable()
            return
        self.configure(
            console=True,
            file_path=env.get("UIAUTO_DIAG_LOG_FILE") or None,
            format=env.get("UIAUTO_DIAG_LOG_FORMAT", "line"),
        )
        self.enable()

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def recent(self) -> List[Dict[str, Any]]:
        """Most recent records, oldest first. Kept whether or not output is enabled."""
        with self._lock:
            return list(self._recent)

    def clear(self) -> None:
        with self._lock:
            self._recent.clear()

    def log(self, *, event: str, status: str = "warning", record: Dict[str, Any]) -> Dict[str, Any]:
        event_obj: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "event": event,
            "status": status,
            **record,
        }
        with self._lock:
            self._recent.append(event_obj)
            enabled = self._enabled
            console = self._console
            file_path = self._file_path

        if not enabled:
            return event_obj

        line = self._format_output(event_obj)
        if console:
            print(line, flush=True)
        if file_path:
            self._write_file(file_path, line)
        return event_obj

    def log_no_match(
        self,
        *,
        device_id: str,
        x: float,
        y: float,
        node_count: int,
        from_cache: bool,
        label: str,
        xml_snippet: Optional[str] = None,
    ) -> Dict[str, Any]:
        record = {
            "device_id": device_id,
            "x": x,
            "y": y,
            "node_count": node_count,
            "from_cache": from_cache,
            "label": label,
            "xml_snippet": xml_snippet,
        }
        return self.log(event="no_match", record=record)

    def _write_file(self, file_path: str, line: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(file_path)) or ".", exist_ok=True)
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            pass

    def _format_output(self, event: Dict[str, Any]) -> str:
        if self._format == "jsonl":
            return json.dumps(event, ensure_ascii=False, separators=(",", ":"))
        parts = [
            event.get("ts", ""),
            str(event.get("status", "")).upper(),
            f"event={event.get('event')}",
        ]
        for key, value in event.items():
            if key in {"ts", "status", "event"}:
                continue
            if key == "xml_snippet" and value:
                value = json.dumps(value, ensure_ascii=False)
            parts.append(f"{key}={value}")
        return " | ".join(parts)


DIAG_LOGGER = DiagnosticLogger()
