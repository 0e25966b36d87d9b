"""Mock platform implementations for development and testing.

Each class implements the corresponding ABC from
:mod:`tvhome.core.interfaces.platform` with in-memory state, records the
calls it receives, and offers ``simulate_*()`` helpers for the dev panel
and tests.  Adding a method name to an object's ``fail`` set makes that
method raise :class:`PlatformCallError`.
"""

from __future__ import annotations

import io
import itertools
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from tvhome.core import intents
from tvhome.core.errors import MissingPermissionError, NotFoundError, PlatformCallError
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
    ShellInterface,
    TvInputCallback,
    TvInputManagerInterface,
    VendorServicesInterface,
)
from tvhome.core.intents import Intent
from tvhome.core.models.device import DisplayInput, LaunchTarget, PackageInfo, RemoteKeyEvent
from tvhome.core.models.state import KeyAction

_log = logging.getLogger(__name__)


class _FailureInjection:
    """``fail`` holds method names that should raise on their next calls."""

    def __init__(self) -> None:
        self.fail: set[str] = set()

    def _check(self, method: str) -> None:
        if method in self.fail:
            raise PlatformCallError(f"{type(self).__name__}.{method} failed (injected)")


# ---------------------------------------------------------------------------
# Activity manager
# ---------------------------------------------------------------------------

class MockActivityManager(_FailureInjection, ActivityManagerInterface):
    """Records started activities and broadcasts.

    Attributes:
        started: Intents passed to :meth:`start_activity`, in order.
        broadcasts: Intents passed to :meth:`send_broadcast`, in order.
        rejected_components: Components whose start raises.
    """

    def __init__(self) -> None:
        super().__init__()
        self.started: list[Intent] = []
        self.broadcasts: list[Intent] = []
        self.rejected_components: set[str] = set()

    def start_activity(self, intent: Intent) -> None:
        self._check("start_activity")
        if intent.component and intent.component.flatten() in self.rejected_components:
            raise PlatformCallError(f"Activity not found: {intent.component.flatten()}")
        self.started.append(intent)
        _log.info("MockActivityManager: start %s", intent.action)

    def send_broadcast(self, intent: Intent) -> None:
        self._check("send_broadcast")
        self.broadcasts.append(intent)
        _log.info("MockActivityManager: broadcast %s", intent.action)


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

class MockPackageManager(_FailureInjection, PackageManagerInterface):
    """In-memory package database.

    Attributes:
        sdk: Reported API level.
        home_package: Current default HOME package.
        install_permission_declared: ``False`` makes
            :meth:`can_request_package_installs` raise
            :class:`MissingPermissionError`.
        install_permission_granted: Unknown-sources consent state.
        content_handlers: ``(action, mime)`` → handling activities.
    """

    def __init__(self) -> None:
        super().__init__()
        self.sdk = 30
        self.home_package: str | None = None
        self.install_permission_declared = True
        self.install_permission_granted = True
        self.content_handlers: dict[tuple[str, str], list[LaunchTarget]] = {}
        self.shared_files: list[Path] = []
        self._packages: dict[str, PackageInfo] = {}
        self._targets: dict[str, list[LaunchTarget]] = {
            intents.CATEGORY_LEANBACK_LAUNCHER: [],
            intents.CATEGORY_LAUNCHER: [],
        }

    # -- Simulation helpers --

    def add_app(
        self,
        package_id: str,
        label: str | None = None,
        *,
        leanback: bool = True,
        launcher: bool = False,
        version: str | None = "1.0",
        system: bool = False,
    ) -> None:
        """Install *package_id* with launch targets in the chosen categories."""
        self._packages[package_id] = PackageInfo(
            package_id=package_id, version_name=version, is_system_app=system
        )
        for category, wanted in (
            (intents.CATEGORY_LEANBACK_LAUNCHER, leanback),
            (intents.CATEGORY_LAUNCHER, launcher),
        ):
            if wanted:
                self._targets[category].append(
                    LaunchTarget(
                        package_id=package_id,
                        activity=f"{package_id}.MainActivity",
                        label=label,
                    )
                )

    def remove_app(self, package_id: str, *, keep_targets: bool = False) -> None:
        """Uninstall *package_id*.

        With *keep_targets* the enumeration still lists it, mimicking an
        uninstall racing a catalog query.
        """
        self._packages.pop(package_id, None)
        if not keep_targets:
            for category, targets in self._targets.items():
                self._targets[category] = [t for t in targets if t.package_id != package_id]

    # -- Interface --

    def query_launch_targets(self, category: str) -> list[LaunchTarget]:
        self._check("query_launch_targets")
        return list(self._targets.get(category, []))

    def resolve_launch_target(self, package_id: str, category: str) -> LaunchTarget | None:
        self._check("resolve_launch_target")
        for target in self._targets.get(category, []):
            if target.package_id == package_id:
                return target
        return None

    def get_package_info(self, package_id: str) -> PackageInfo:
        self._check("get_package_info")
        try:
            return self._packages[package_id]
        except KeyError:
            raise NotFoundError(f"package {package_id} not installed") from None

    def package_exists(self, package_id: str) -> bool:
        self._check("package_exists")
        return package_id in self._packages

    def resolve_home_package(self) -> str | None:
        self._check("resolve_home_package")
        return self.home_package

    def query_content_handlers(self, action: str, mime_type: str) -> list[LaunchTarget]:
        self._check("query_content_handlers")
        return list(self.content_handlers.get((action, mime_type), []))

    def sdk_level(self) -> int:
        return self.sdk

    def can_request_package_installs(self) -> bool:
        self._check("can_request_package_installs")
        if not self.install_permission_declared:
            raise MissingPermissionError(intents.PERMISSION_REQUEST_INSTALL_PACKAGES)
        return self.install_permission_granted

    def share_file(self, path: Path) -> str:
        self._check("share_file")
        self.shared_files.append(path)
        return f"content://mock.fileprovider/{path.name}"


class MockInstallSession(InstallSession):
    """Session that buffers written bytes and reports a fixed commit result."""

    def __init__(self, session_id: int, installer: MockPackageInstaller) -> None:
        self.session_id = session_id
        self._installer = installer
        self.written: dict[str, bytes] = {}
        self.committed = False
        self.abandoned = False
        self.closed = False

    @contextmanager
    def open_write(self, name: str, size: int) -> Iterator[BinaryIO]:
        self._installer._check("write")
        buf = io.BytesIO()
        yield buf
        data = buf.getvalue()
        if len(data) != size:
            raise PlatformCallError(f"short write for {name}: {len(data)}/{size} bytes")
        self.written[name] = data

    def commit(self, on_complete: Callable[[bool, str], None]) -> None:
        self._installer._check("commit")
        self.committed = True
        on_complete(self._installer.commit_ok, "Success" if self._installer.commit_ok else "Failure")

    def abandon(self) -> None:
        self.abandoned = True

    def close(self) -> None:
        self.closed = True


class MockPackageInstaller(_FailureInjection, PackageInstallerInterface):
    """Creates :class:`MockInstallSession` objects.

    ``fail`` may contain ``"create_session"``, ``"write"`` or ``"commit"``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.commit_ok = True
        self.sessions: list[MockInstallSession] = []
        self._ids = itertools.count(1)

    def create_session(self) -> MockInstallSession:
        self._check("create_session")
        session = MockInstallSession(next(self._ids), self)
        self.sessions.append(session)
        return session


class MockDevicePolicy(_FailureInjection, DevicePolicyInterface):
    def __init__(self) -> None:
        super().__init__()
        self.device_owners: set[str] = set()

    def is_device_owner(self, package_id: str) -> bool:
        self._check("is_device_owner")
        return package_id in self.device_owners


# ---------------------------------------------------------------------------
# Notification sources
# ---------------------------------------------------------------------------

class MockTvInputManager(_FailureInjection, TvInputManagerInterface):
    """In-memory input list with ``simulate_*`` change helpers."""

    def __init__(self) -> None:
        super().__init__()
        self._inputs: dict[str, DisplayInput] = {}
        self.callbacks: list[TvInputCallback] = []

    def list_inputs(self) -> list[DisplayInput]:
        self._check("list_inputs")
        return list(self._inputs.values())

    def get_input(self, input_id: str) -> DisplayInput | None:
        self._check("get_input")
        return self._inputs.get(input_id)

    def register_callback(self, callback: TvInputCallback) -> None:
        self._check("register_callback")
        self.callbacks.append(callback)

    def unregister_callback(self, callback: TvInputCallback) -> None:
        if callback in self.callbacks:
            self.callbacks.remove(callback)

    # -- Simulation helpers --

    def simulate_input_added(self, display_input: DisplayInput) -> None:
        self._inputs[display_input.id] = display_input
        for cb in list(self.callbacks):
            cb.on_input_added(display_input.id)

    def simulate_input_updated(self, display_input: DisplayInput) -> None:
        self._inputs[display_input.id] = display_input
        for cb in list(self.callbacks):
            cb.on_input_updated(display_input.id)

    def simulate_input_removed(self, input_id: str) -> None:
        self._inputs.pop(input_id, None)
        for cb in list(self.callbacks):
            cb.on_input_removed(input_id)

    def simulate_state_changed(self, input_id: str, state: int) -> None:
        for cb in list(self.callbacks):
            cb.on_input_state_changed(input_id, state)


class MockLauncherApps(_FailureInjection, LauncherAppsInterface):
    """Package-change notifications driven by ``simulate_*`` helpers."""

    def __init__(self) -> None:
        super().__init__()
        self.callbacks: list[LauncherAppsCallback] = []

    def register_callback(self, callback: LauncherAppsCallback) -> None:
        self._check("register_callback")
        self.callbacks.append(callback)

    def unregister_callback(self, callback: LauncherAppsCallback) -> None:
        if callback in self.callbacks:
            self.callbacks.remove(callback)

    def simulate_package_added(self, package_id: str) -> None:
        for cb in list(self.callbacks):
            cb.on_package_added(package_id)

    def simulate_package_changed(self, package_id: str) -> None:
        for cb in list(self.callbacks):
            cb.on_package_changed(package_id)

    def simulate_package_removed(self, package_id: str) -> None:
        for cb in list(self.callbacks):
            cb.on_package_removed(package_id)

    def simulate_packages_available(self, package_ids: list[str]) -> None:
        for cb in list(self.callbacks):
            cb.on_packages_available(list(package_ids))


class MockKeyEventSource(_FailureInjection, KeyEventSourceInterface):
    def __init__(self) -> None:
        super().__init__()
        self.callbacks: list[Callable[[RemoteKeyEvent], None]] = []

    def register_callback(self, callback: Callable[[RemoteKeyEvent], None]) -> None:
        self._check("register_callback")
        self.callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[RemoteKeyEvent], None]) -> None:
        if callback in self.callbacks:
            self.callbacks.remove(callback)

    def simulate_key(
        self, key_code: int, action: KeyAction = KeyAction.DOWN, repeat_count: int = 0
    ) -> RemoteKeyEvent:
        """Fire a key event to every registered callback and return it."""
        event = RemoteKeyEvent(
            origin="mock",
            action=action,
            key_code=key_code,
            repeat_count=repeat_count,
            event_time_ms=int(time.monotonic() * 1000),
        )
        for cb in list(self.callbacks):
            cb(event)
        return event


# ---------------------------------------------------------------------------
# Vendor, power and shell
# ---------------------------------------------------------------------------

class MockVendorServices(_FailureInjection, VendorServicesInterface):
    """Vendor surfaces; present only for identifiers in ``components``.

    Attributes:
        components: Identifiers reported present by :meth:`has_component`.
        input_source_calls: Source codes passed to :meth:`set_input_source`.
        power_state_calls: State codes passed to :meth:`set_power_state`.
        low_level_power_offs: Number of :meth:`low_level_power_off` calls.
    """

    def __init__(self) -> None:
        super().__init__()
        self.components: set[str] = set()
        self.input_source_calls: list[int] = []
        self.power_state_calls: list[int] = []
        self.low_level_power_offs = 0

    def has_component(self, identifier: str) -> bool:
        self._check("has_component")
        return identifier in self.components

    def set_input_source(self, source_code: int) -> None:
        self._check("set_input_source")
        self.input_source_calls.append(source_code)

    def set_power_state(self, state_code: int) -> None:
        self._check("set_power_state")
        self.power_state_calls.append(state_code)

    def low_level_power_off(self) -> None:
        self._check("low_level_power_off")
        self.low_level_power_offs += 1


class MockPowerManager(_FailureInjection, PowerManagerInterface):
    def __init__(self) -> None:
        super().__init__()
        self.shutdowns: list[tuple[bool, str]] = []

    def shutdown(self, confirm: bool, reason: str) -> None:
        self._check("shutdown")
        self.shutdowns.append((confirm, reason))
        _log.info("MockPowerManager: shutdown(confirm=%s, reason=%s)", confirm, reason)


class MockShell(_FailureInjection, ShellInterface):
    def __init__(self) -> None:
        super().__init__()
        self.spawned: list[tuple[str, bool]] = []

    def spawn(self, command: str, elevated: bool = False) -> None:
        self._check("spawn_elevated" if elevated else "spawn")
        self.spawned.append((command, elevated))
