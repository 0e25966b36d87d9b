"""AdbShell — runs device shell commands over adb (or locally on the TV).

With ``transport="adb"`` commands go through ``adb [-s serial] shell``;
with ``transport="local"`` the process runs on the device itself via
``sh -c``.  ``subprocess`` is the only dependency, so tests patch
``tvhome.platform.adb.shell.subprocess``.
"""

from __future__ import annotations

import logging as _logging
import shlex
import shutil
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from tvhome.core.errors import PlatformCallError
from tvhome.core.interfaces.platform import ShellInterface
from tvhome.core.models.config import DeviceConfig

_log = _logging.getLogger(__name__)

# Shell tools report many failures on stdout with exit status 0.
_ERROR_PREFIXES = ("Error:", "Error type", "Exception", "java.lang.", "Failure [")


class AdbShell(ShellInterface):
    """Command runner for one device.

    Args:
        config: Device section of the configuration.
    """

    def __init__(self, config: DeviceConfig) -> None:
        self._config = config
        self._timeout = config.command_timeout_seconds

    # ------------------------------------------------------------------
    # Argument building
    # ------------------------------------------------------------------

    def _adb(self, *args: str) -> list[str]:
        argv = [self._config.adb_path]
        if self._config.serial:
            argv += ["-s", self._config.serial]
        return argv + list(args)

    def _argv(self, command: str, *, adb_verb: str = "shell") -> list[str]:
        if self._config.transport == "local":
            return ["sh", "-c", command]
        return self._adb(adb_verb, command)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self, command: str) -> str:
        """Run *command* and return its stdout.

        Raises:
            PlatformCallError: Non-zero exit, timeout, missing executable,
                or error text in the output.
        """
        argv = self._argv(command)
        _log.debug("shell: %s", command)
        try:
            proc = subprocess.run(
                argv, capture_output=True, text=True, timeout=self._timeout, check=False
            )
        except subprocess.TimeoutExpired as exc:
            raise PlatformCallError(f"timed out after {self._timeout}s: {command}") from exc
        except OSError as exc:
            raise PlatformCallError(f"cannot run {argv[0]}: {exc}") from exc

        output = proc.stdout or ""
        if proc.returncode != 0:
            detail = (proc.stderr or output).strip() or f"exit status {proc.returncode}"
            raise PlatformCallError(f"{command}: {detail}")
        for line in output.splitlines():
            if line.lstrip().startswith(_ERROR_PREFIXES):
                raise PlatformCallError(f"{command}: {line.strip()}")
        return output

    @contextmanager
    def run_with_input(self, command: str) -> Iterator[BinaryIO]:
        """Run *command* with a writable binary stdin.

        The process is waited for when the ``with`` block exits; a failed
        exit raises :class:`PlatformCallError`.  Uses ``adb exec-in`` so
        the byte stream is not mangled by a pty.
        """
        argv = self._argv(command, adb_verb="exec-in")
        _log.debug("shell (stdin): %s", command)
        try:
            proc = subprocess.Popen(
                argv, stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            )
        except OSError as exc:
            raise PlatformCallError(f"cannot run {argv[0]}: {exc}") from exc

        try:
            yield proc.stdin
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        try:
            stdout, stderr = proc.communicate(timeout=self._timeout)
        except subprocess.TimeoutExpired as exc:
            proc.kill()
            proc.wait()
            raise PlatformCallError(f"timed out after {self._timeout}s: {command}") from exc
        text = stdout.decode(errors="replace")
        if proc.returncode != 0 or text.lstrip().startswith(_ERROR_PREFIXES):
            detail = (stderr.decode(errors="replace") or text).strip()
            raise PlatformCallError(f"{command}: {detail or f'exit status {proc.returncode}'}")

    def spawn(self, command: str, elevated: bool = False) -> None:
        """Start *command* detached; only launch failures are reported."""
        if elevated:
            command = f"su -c {shlex.quote(command)}"
        argv = self._argv(command)
        _log.debug("spawn: %s", command)
        try:
            subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise PlatformCallError(f"cannot spawn {command}: {exc}") from exc

    def stream(self, command: str) -> subprocess.Popen:
        """Start a long-running *command* whose stdout is read line by line."""
        argv = self._argv(command)
        try:
            return subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise PlatformCallError(f"cannot stream {command}: {exc}") from exc

    def getprop(self, name: str) -> str:
        return self.run(f"getprop {shlex.quote(name)}").strip()

    def push(self, local: Path, remote: str) -> None:
        """Copy *local* to *remote* on the device."""
        if self._config.transport == "local":
            try:
                shutil.copyfile(local, remote)
            except OSError as exc:
                raise PlatformCallError(f"copy to {remote} failed: {exc}") from exc
            return
        argv = self._adb("push", str(local), remote)
        try:
            proc = subprocess.run(argv, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise PlatformCallError(f"cannot run {argv[0]}: {exc}") from exc
        if proc.returncode != 0:
            raise PlatformCallError(f"adb push failed: {(proc.stderr or proc.stdout).strip()}")
