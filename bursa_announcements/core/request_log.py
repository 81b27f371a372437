"""
Append-only request log shared by the HTTP layer and the fetcher.

Each line goes to the console stream and to a persistent file sink:

    [2025-10-06 14:02:11] [INFO] GET /announcements -> 200

Writers on different threads are serialized by the instance lock, so a line
is never interleaved with another one.
"""

import logging
import os
import sys
import threading
from datetime import datetime
from typing import Callable, Optional, TextIO, Union

logger = logging.getLogger(__name__)


class RequestLog:
    def __init__(
        self,
        path: Optional[str],
        stream: Optional[TextIO] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.path = path
        self.stream = stream
        self._clock = clock
        self._lock = threading.Lock()
        self._sink_failed = False

    def log(self, level: str, method: str, path: str, status: Union[int, str]) -> None:
        """Record one handled request (or fetch attempt)."""
        self.event(level, f"{method} {path} -> {status}")

    def event(self, level: str, message: str) -> None:
        """Record a free-form event such as START, in the same envelope."""
        stamp = self._clock().strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{stamp}] [{level.upper()}] {message}"
        with self._lock:
            self._write_console(line)
            self._write_sink(line)

    def _write_console(self, line: str) -> None:
        stream = self.stream or sys.stdout
        try:
            stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError):
            # closed or broken console; the file sink still gets the line
            pass

    def _write_sink(self, line: str) -> None:
        if not self.path:
            return
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as sink:
                sink.write(line + "\n")
            self._sink_failed = False
        except OSError as e:
            if not self._sink_failed:
                logger.warning("Log sink %s unavailable (%s), console only", self.path, e)
            self._sink_failed = True

    @property
    def degraded(self) -> bool:
        """True when the last write to the file sink failed."""
        return self._sink_failed


def level_for_status(status: int) -> str:
    if status >= 500:
        return "ERROR"
    if status >= 400:
        return "WARN"
    return "INFO"
