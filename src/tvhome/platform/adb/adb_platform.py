"""adb platform implementations.

Each class implements the corresponding ABC from
:mod:`tvhome.core.interfaces.platform` on top of :class:`AdbShell`, using
the stock Android shell tools (``am``, ``cmd package``, ``pm``,
``dumpsys``, ``appops``, ``getevent``).  Output parsers are module-level
functions so tests can feed them captured text.
"""

from __future__ import annotations

import logging as _logging
import re
import shlex
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from tvhome.core import intents
from tvhome.core.errors import (
    MissingPermissionError,
    NotFoundError,
    PlatformCallError,
    UnsupportedCapability,
)
from tvhome.core.interfaces.platform import (
    ActivityManagerInterface,
    DevicePolicyInterface,
    InstallSession,
    KeyEventSourceInterface,
    LauncherAppsCallback,
    LauncherAppsInterface,
    PackageInstallerInterface,
    PackageManagerInterface,
    PowerManagerInterface,
    TvInputCallback,
    TvInputManagerInterface,
    VendorServicesInterface,
)
from tvhome.core.intents import Intent
from tvhome.core.models.config import DeviceConfig, VendorConfig
from tvhome.core.models.device import DisplayInput, LaunchTarget, PackageInfo, RemoteKeyEvent
from tvhome.core.models.state import InputKind, KeyAction
from tvhome.platform.adb.intents import broadcast_command, start_command
from tvhome.platform.adb.keymap import android_keycode
from tvhome.platform.adb.shell import AdbShell
from tvhome.platform.adb.watchers import PollingWatcher, StreamWatcher

_log = _logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

_COMPONENT_RE = re.compile(r"^\s*([A-Za-z][\w.]*)/([\w.$]+)\s*$")
_VERSION_NAME_RE = re.compile(r"versionName=(\S+)")
_PKG_FLAGS_RE = re.compile(r"pkgFlags=\[([^\]]*)\]")
_SESSION_RE = re.compile(r"\[(\d+)\]")
_INPUT_ID_RE = re.compile(r"TvInputInfo\{id=([^,}\s]+)")
_INPUT_STATE_RE = re.compile(r"state[:=]\s*(-?\d+)")
_HW_PORT_RE = re.compile(r"/HW\d+$")
_PACKAGE_LINE_RE = re.compile(r"^package:(\S+)(?:\s+versionCode:(\d+))?")
_GETEVENT_RE = re.compile(
    r"^\[\s*(\d+)\.(\d+)\]\s+(?:/dev/input/event(\d+):\s+)?"
    r"([0-9a-f]{4})\s+([0-9a-f]{4})\s+([0-9a-f]{8})\s*$"
)

_EV_KEY = 0x0001
_RESOLVER_PACKAGE = "android"


def parse_components(output: str) -> list[tuple[str, str]]:
    """``pkg/cls`` lines of ``cmd package ... --brief`` output, in order.

    Short class names (``.Main``) are expanded with the package.
    """
    found: list[tuple[str, str]] = []
    for line in output.splitlines():
        m = _COMPONENT_RE.match(line)
        if not m:
            continue
        package, cls = m.groups()
        if cls.startswith("."):
            cls = package + cls
        found.append((package, cls))
    return found


def parse_package_info(package_id: str, output: str) -> PackageInfo:
    if f"Package [{package_id}]" not in output:
        raise NotFoundError(f"package {package_id} not installed")
    version = _VERSION_NAME_RE.search(output)
    flags = _PKG_FLAGS_RE.search(output)
    return PackageInfo(
        package_id=package_id,
        version_name=version.group(1) if version else None,
        is_system_app=bool(flags and "SYSTEM" in flags.group(1).split()),
    )


def parse_package_versions(output: str) -> dict[str, int]:
    """``pm list packages --show-versioncode`` → ``{package: versionCode}``."""
    versions: dict[str, int] = {}
    for line in output.splitlines():
        m = _PACKAGE_LINE_RE.match(line.strip())
        if m:
            versions[m.group(1)] = int(m.group(2) or 0)
    return versions


def classify_input(input_id: str) -> InputKind:
    lowered = input_id.lower()
    if "hdmi" in lowered:
        return InputKind.HDMI
    for marker, kind in (
        ("tuner", InputKind.TUNER),
        ("component", InputKind.COMPONENT),
        ("composite", InputKind.COMPOSITE),
    ):
        if marker in lowered:
            return kind
    # Bare hardware ports are usually pass-through inputs.
    if _HW_PORT_RE.search(input_id):
        return InputKind.HDMI
    return InputKind.OTHER


def parse_tv_inputs(output: str) -> dict[str, tuple[DisplayInput, int]]:
    """``dumpsys tv_input`` → ``{input_id: (DisplayInput, state)}``."""
    inputs: dict[str, tuple[DisplayInput, int]] = {}
    for line in output.splitlines():
        m = _INPUT_ID_RE.search(line)
        if not m or m.group(1) in inputs:
            continue
        input_id = m.group(1)
        state = _INPUT_STATE_RE.search(line[m.end():])
        inputs[input_id] = (
            DisplayInput(
                id=input_id,
                display_name=input_id.rsplit("/", 1)[-1],
                kind=classify_input(input_id),
            ),
            int(state.group(1)) if state else 0,
        )
    return inputs


def parse_getevent_line(line: str) -> tuple[int, int, int, int, int] | None:
    """Return ``(time_ms, device_id, type, code, value)`` or ``None``."""
    m = _GETEVENT_RE.match(line.strip())
    if not m:
        return None
    seconds, micros, device, ev_type, code, value = m.groups()
    time_ms = int(seconds) * 1000 + int(micros.ljust(6, "0")[:6]) // 1000
    return time_ms, int(device or 0), int(ev_type, 16), int(code, 16), int(value, 16)


# ---------------------------------------------------------------------------
# Activity manager
# ---------------------------------------------------------------------------

class AdbActivityManager(ActivityManagerInterface):
    def __init__(self, shell: AdbShell) -> None:
        self._shell = shell

    def start_activity(self, intent: Intent) -> None:
        self._shell.run(start_command(intent))

    def send_broadcast(self, intent: Intent) -> None:
        self._shell.run(broadcast_command(intent))


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

class AdbPackageManager(PackageManagerInterface):
    """Package queries through ``cmd package`` / ``pm`` / ``dumpsys``.

    Labels, icons and banners are not exposed by the shell tools, so launch
    targets carry only the component.

    Args:
        shell: Command runner.
        config: Device section (own package id, staging directory).
    """

    def __init__(self, shell: AdbShell, config: DeviceConfig) -> None:
        self._shell = shell
        self._own_package = config.package_id
        self._staging_dir = config.staging_dir.rstrip("/")
        self._sdk: int | None = None

    def _query(self, *args: str) -> list[tuple[str, str]]:
        return parse_components(
            self._shell.run(shlex.join(["cmd", "package", "query-activities", "--brief", *args]))
        )

    def _resolve(self, *args: str) -> list[tuple[str, str]]:
        return parse_components(
            self._shell.run(shlex.join(["cmd", "package", "resolve-activity", "--brief", *args]))
        )

    def query_launch_targets(self, category: str) -> list[LaunchTarget]:
        return [
            LaunchTarget(package_id=pkg, activity=cls)
            for pkg, cls in self._query("-a", intents.ACTION_MAIN, "-c", category)
        ]

    def resolve_launch_target(self, package_id: str, category: str) -> LaunchTarget | None:
        try:
            components = self._resolve("-a", intents.ACTION_MAIN, "-c", category, package_id)
        except PlatformCallError as exc:
            _log.debug("resolve %s in %s: %s", package_id, category, exc)
            return None
        for pkg, cls in components:
            if pkg == package_id:
                return LaunchTarget(package_id=pkg, activity=cls)
        return None

    def get_package_info(self, package_id: str) -> PackageInfo:
        return parse_package_info(
            package_id, self._shell.run(f"dumpsys package {shlex.quote(package_id)}")
        )

    def package_exists(self, package_id: str) -> bool:
        listed = parse_package_versions(self._shell.run("pm list packages -u"))
        return package_id in listed

    def resolve_home_package(self) -> str | None:
        components = self._resolve("-a", intents.ACTION_MAIN, "-c", intents.CATEGORY_HOME)
        if not components:
            return None
        package = components[-1][0]
        # The chooser resolves when no default home is set.
        return None if package == _RESOLVER_PACKAGE else package

    def query_content_handlers(self, action: str, mime_type: str) -> list[LaunchTarget]:
        return [
            LaunchTarget(package_id=pkg, activity=cls)
            for pkg, cls in self._query("-a", action, "-t", mime_type)
        ]

    def sdk_level(self) -> int:
        if self._sdk is None:
            value = self._shell.getprop("ro.build.version.sdk")
            try:
                self._sdk = int(value)
            except ValueError as exc:
                raise PlatformCallError(f"unexpected SDK level {value!r}") from exc
        return self._sdk

    def can_request_package_installs(self) -> bool:
        declared = self._shell.run(f"dumpsys package {shlex.quote(self._own_package)}")
        if intents.PERMISSION_REQUEST_INSTALL_PACKAGES not in declared:
            raise MissingPermissionError(intents.PERMISSION_REQUEST_INSTALL_PACKAGES)
        mode = self._shell.run(
            f"appops get {shlex.quote(self._own_package)} REQUEST_INSTALL_PACKAGES"
        )
        return "allow" in mode

    def share_file(self, path: Path) -> str:
        remote = f"{self._staging_dir}/{path.name}"
        self._shell.push(path, remote)
        return f"file://{remote}"


class AdbInstallSession(InstallSession):
    """A ``pm install-create`` session driven by ``pm install-*`` calls."""

    def __init__(self, shell: AdbShell, session_id: int) -> None:
        self._shell = shell
        self.session_id = session_id

    @contextmanager
    def open_write(self, name: str, size: int) -> Iterator[BinaryIO]:
        command = f"pm install-write -S {size} {self.session_id} {shlex.quote(name)} -"
        with self._shell.run_with_input(command) as stream:
            yield stream

    def commit(self, on_complete: Callable[[bool, str], None]) -> None:
        """Commit synchronously; a rejected or lost commit raises.

        ``pm install-commit`` blocks until the package manager decides, so
        *on_complete* only ever sees the success message.
        """
        output = self._shell.run(f"pm install-commit {self.session_id}")
        if "Success" not in output:
            raise PlatformCallError(
                f"install session {self.session_id} not committed: {output.strip()!r}"
            )
        on_complete(True, output.strip())

    def abandon(self) -> None:
        self._shell.run(f"pm install-abandon {self.session_id}")


class AdbPackageInstaller(PackageInstallerInterface):
    def __init__(self, shell: AdbShell) -> None:
        self._shell = shell

    def create_session(self) -> AdbInstallSession:
        output = self._shell.run("pm install-create -r")
        m = _SESSION_RE.search(output)
        if not m:
            raise PlatformCallError(f"unexpected install-create output: {output.strip()!r}")
        return AdbInstallSession(self._shell, int(m.group(1)))


class AdbDevicePolicy(DevicePolicyInterface):
    def __init__(self, shell: AdbShell) -> None:
        self._shell = shell

    def is_device_owner(self, package_id: str) -> bool:
        output = self._shell.run("dumpsys device_policy")
        section = output.partition("Device Owner")[2]
        if not section:
            return False
        # Owner details sit in the next indented block.
        block = section.split("\n\n", 1)[0]
        return f"package={package_id}" in block or f"{{{package_id}/" in block


# ---------------------------------------------------------------------------
# Notification sources
# ---------------------------------------------------------------------------

class AdbTvInputManager(TvInputManagerInterface):
    """Inputs from ``dumpsys tv_input``; changes from a polling watcher."""

    def __init__(self, shell: AdbShell, poll_interval: float) -> None:
        self._shell = shell
        self._callbacks: list[TvInputCallback] = []
        self._lock = threading.Lock()
        self.watcher: PollingWatcher[dict[str, tuple[DisplayInput, int]]] = PollingWatcher(
            "tv-input-poll", poll_interval, self._snapshot, self._on_change
        )

    def _snapshot(self) -> dict[str, tuple[DisplayInput, int]]:
        return parse_tv_inputs(self._shell.run("dumpsys tv_input"))

    def list_inputs(self) -> list[DisplayInput]:
        return [display_input for display_input, _ in self._snapshot().values()]

    def get_input(self, input_id: str) -> DisplayInput | None:
        entry = self._snapshot().get(input_id)
        return entry[0] if entry else None

    def register_callback(self, callback: TvInputCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)
        self.watcher.start()

    def unregister_callback(self, callback: TvInputCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _on_change(
        self,
        old: dict[str, tuple[DisplayInput, int]],
        new: dict[str, tuple[DisplayInput, int]],
    ) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for input_id in new.keys() - old.keys():
            for cb in callbacks:
                cb.on_input_added(input_id)
        for input_id in old.keys() - new.keys():
            for cb in callbacks:
                cb.on_input_removed(input_id)
        for input_id in new.keys() & old.keys():
            (old_input, old_state), (new_input, new_state) = old[input_id], new[input_id]
            if old_input != new_input:
                for cb in callbacks:
                    cb.on_input_updated(input_id)
            if old_state != new_state:
                for cb in callbacks:
                    cb.on_input_state_changed(input_id, new_state)

    def stop(self) -> None:
        self.watcher.stop()


class AdbLauncherApps(LauncherAppsInterface):
    """Package changes from polling ``pm list packages --show-versioncode``.

    Several packages appearing in one poll are reported together through
    ``on_packages_available``.
    """

    def __init__(self, shell: AdbShell, poll_interval: float) -> None:
        self._shell = shell
        self._callbacks: list[LauncherAppsCallback] = []
        self._lock = threading.Lock()
        self.watcher: PollingWatcher[dict[str, int]] = PollingWatcher(
            "package-poll", poll_interval, self._snapshot, self._on_change
        )

    def _snapshot(self) -> dict[str, int]:
        return parse_package_versions(self._shell.run("pm list packages --show-versioncode"))

    def register_callback(self, callback: LauncherAppsCallback) -> None:
        with self._lock:
            self._callbacks.append(callback)
        self.watcher.start()

    def unregister_callback(self, callback: LauncherAppsCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _on_change(self, old: dict[str, int], new: dict[str, int]) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        added = sorted(new.keys() - old.keys())
        removed = sorted(old.keys() - new.keys())
        changed = sorted(p for p in new.keys() & old.keys() if new[p] != old[p])
        for cb in callbacks:
            if len(added) > 1:
                cb.on_packages_available(added)
            elif added:
                cb.on_package_added(added[0])
            for package_id in removed:
                cb.on_package_removed(package_id)
            for package_id in changed:
                cb.on_package_changed(package_id)

    def stop(self) -> None:
        self.watcher.stop()


class AdbKeyEventSource(KeyEventSourceInterface):
    """Remote keys from a ``getevent -t`` stream.

    Auto-repeat (value 2) is reported as DOWN with an increasing
    ``repeat_count``.
    """

    def __init__(self, shell: AdbShell, device: str | None = None) -> None:
        self._shell = shell
        command = "getevent -t" + (f" {shlex.quote(device)}" if device else "")
        self._callbacks: list[Callable[[RemoteKeyEvent], None]] = []
        self._lock = threading.Lock()
        self._repeats: dict[int, int] = {}
        self.watcher = StreamWatcher(
            "getevent", lambda: self._shell.stream(command), self.handle_line
        )

    def register_callback(self, callback: Callable[[RemoteKeyEvent], None]) -> None:
        with self._lock:
            self._callbacks.append(callback)
        self.watcher.start()

    def unregister_callback(self, callback: Callable[[RemoteKeyEvent], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def handle_line(self, line: str) -> None:
        parsed = parse_getevent_line(line)
        if parsed is None:
            return
        time_ms, device_id, ev_type, scan_code, value = parsed
        if ev_type != _EV_KEY:
            return

        if value == 1:
            action, repeat = KeyAction.DOWN, 0
        elif value == 2:
            action, repeat = KeyAction.DOWN, self._repeats.get(scan_code, 0) + 1
        elif value == 0:
            action, repeat = KeyAction.UP, 0
        else:
            action, repeat = KeyAction.OTHER, 0
        self._repeats[scan_code] = repeat

        event = RemoteKeyEvent(
            origin="getevent",
            action=action,
            key_code=android_keycode(scan_code),
            scan_code=scan_code,
            repeat_count=repeat,
            device_id=device_id,
            event_time_ms=time_ms,
        )
        with self._lock:
            callbacks = list(self._callbacks)
        for cb in callbacks:
            cb(event)

    def stop(self) -> None:
        self.watcher.stop()


# ---------------------------------------------------------------------------
# Vendor, power
# ---------------------------------------------------------------------------

class AdbVendorServices(VendorServicesInterface):
    """Vendor surfaces through configured shell templates.

    Presence checks ask ``pm path`` (packages) and then ``service check``
    (system services).  Calls whose template is unset raise
    :class:`UnsupportedCapability`.
    """

    def __init__(self, shell: AdbShell, config: VendorConfig) -> None:
        self._shell = shell
        self._config = config

    def has_component(self, identifier: str) -> bool:
        quoted = shlex.quote(identifier)
        try:
            if self._shell.run(f"pm path {quoted}").strip().startswith("package:"):
                return True
        except PlatformCallError:
            pass
        output = self._shell.run(f"service check {quoted}")
        return ": found" in output

    def _call(self, template: str | None, surface: str, **values: int) -> None:
        if not template:
            raise UnsupportedCapability(f"no shell command configured for {surface}")
        self._shell.run(template.format(**values))

    def set_input_source(self, source_code: int) -> None:
        self._call(self._config.input_source_command, "input source", code=source_code)

    def set_power_state(self, state_code: int) -> None:
        self._call(self._config.power_state_command, "power state", code=state_code)

    def low_level_power_off(self) -> None:
        self._call(self._config.low_level_power_command, "low-level power off")


class AdbPowerManager(PowerManagerInterface):
    """Standard power service through ``svc power``."""

    def __init__(self, shell: AdbShell) -> None:
        self._shell = shell

    def shutdown(self, confirm: bool, reason: str) -> None:
        if confirm:
            _log.debug("svc power cannot show a confirmation; shutting down directly")
        _log.info("Requesting shutdown (reason=%s)", reason)
        self._shell.run("svc power shutdown")
