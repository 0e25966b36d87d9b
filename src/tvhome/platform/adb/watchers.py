"""Background threads turning shell output into change callbacks.

:class:`PollingWatcher` re-runs a snapshot function and hands consecutive
snapshots to a diff callback.  :class:`StreamWatcher` reads a long-running
command line by line.  Both are started lazily by the first registration
and stopped only from the factory's ``cleanup()``; unregistering never
joins a thread, because callbacks can hold the relay lock.
"""

from __future__ import annotations

import logging as _logging
import subprocess
import threading
from typing import Callable, Generic, TypeVar

_log = _logging.getLogger(__name__)

T = TypeVar("T")

_ERROR_BACKOFF_SECONDS = 5.0


class PollingWatcher(Generic[T]):
    """Poll *snapshot* every *interval* seconds and diff the results.

    The first successful snapshot is the baseline and produces no call.

    Args:
        name: Thread name (shows up in log records).
        interval: Seconds between polls.
        snapshot: Returns the current state; may raise.
        on_change: ``on_change(old, new)`` when two snapshots differ.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        snapshot: Callable[[], T],
        on_change: Callable[[T, T], None],
    ) -> None:
        self._name = name
        self._interval = interval
        self._snapshot = snapshot
        self._on_change = on_change
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._last: T | None = None
        self._has_baseline = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
            self._thread.start()
        _log.debug("%s started", self._name)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        _log.debug("%s stopped", self._name)

    def poll_once(self) -> None:
        """Take one snapshot and report a change against the previous one."""
        current = self._snapshot()
        if not self._has_baseline:
            self._last, self._has_baseline = current, True
            return
        previous, self._last = self._last, current
        if previous != current:
            self._on_change(previous, current)

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                _log.exception("%s: poll failed", self._name)
                self._stop.wait(_ERROR_BACKOFF_SECONDS)
            else:
                self._stop.wait(self._interval)


class StreamWatcher:
    """Feed each stdout line of a long-running process to *on_line*.

    The process is restarted after it exits, until :meth:`stop`.

    Args:
        name: Thread name.
        open_stream: Starts the process (e.g. ``AdbShell.stream``).
        on_line: Called with each line, newline stripped.
    """

    def __init__(
        self,
        name: str,
        open_stream: Callable[[], subprocess.Popen],
        on_line: Callable[[str], None],
    ) -> None:
        self._name = name
        self._open_stream = open_stream
        self._on_line = on_line
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._proc: subprocess.Popen | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
            self._thread.start()
        _log.debug("%s started", self._name)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        proc = self._proc
        if proc is not None and proc.poll() is None:
            proc.terminate()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        _log.debug("%s stopped", self._name)

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self._proc = self._open_stream()
                for line in self._proc.stdout:
                    if self._stop.is_set():
                        break
                    try:
                        self._on_line(line.rstrip("\n"))
                    except Exception:
                        _log.exception("%s: line handler failed", self._name)
                self._proc.wait()
            except Exception:
                _log.exception("%s: stream failed", self._name)
            if not self._stop.is_set():
                _log.warning("%s: stream ended, restarting", self._name)
                self._stop.wait(_ERROR_BACKOFF_SECONDS)
