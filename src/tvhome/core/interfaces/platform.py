"""Platform abstraction interfaces (ABCs).

Every control surface of the TV has a matching abstract base class here.
The adb and mock backends both implement these interfaces, so the
cascades and the relay run identically against a real device and in
tests.

Any method may raise :class:`~tvhome.core.errors.PlatformCallError` (or a
subclass) when the underlying call fails; cascades record that as a
failed attempt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Callable, ContextManager

from tvhome.core.intents import Intent
from tvhome.core.models.device import DisplayInput, LaunchTarget, PackageInfo, RemoteKeyEvent


# ---------------------------------------------------------------------------
# Activity manager
# ---------------------------------------------------------------------------

class ActivityManagerInterface(ABC):
    """Starts activities and sends broadcasts."""

    @abstractmethod
    def start_activity(self, intent: Intent) -> None:
        """Start the activity described by *intent*."""

    @abstractmethod
    def send_broadcast(self, intent: Intent) -> None:
        """Send *intent* as a broadcast."""


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

class PackageManagerInterface(ABC):
    """Package queries and install-permission state."""

    @abstractmethod
    def query_launch_targets(self, category: str) -> list[LaunchTarget]:
        """Return MAIN activities in *category*, in platform order."""

    @abstractmethod
    def resolve_launch_target(self, package_id: str, category: str) -> LaunchTarget | None:
        """Return the MAIN activity of *package_id* in *category*, if any."""

    @abstractmethod
    def get_package_info(self, package_id: str) -> PackageInfo:
        """Return package metadata.  Raises ``NotFoundError`` if not installed."""

    @abstractmethod
    def package_exists(self, package_id: str) -> bool:
        """``True`` if installed, including uninstalled-with-data packages."""

    @abstractmethod
    def resolve_home_package(self) -> str | None:
        """Package id of the current default HOME activity."""

    @abstractmethod
    def query_content_handlers(self, action: str, mime_type: str) -> list[LaunchTarget]:
        """Activities handling *action* for *mime_type*."""

    @abstractmethod
    def sdk_level(self) -> int:
        """Platform API level."""

    @abstractmethod
    def can_request_package_installs(self) -> bool:
        """Whether unknown-sources installs are granted to our package.

        Raises ``MissingPermissionError`` when the manifest does not even
        declare the permission.
        """

    @abstractmethod
    def share_file(self, path: Path) -> str:
        """Make *path* readable by the system installer; return its URI."""


class InstallSession(ABC):
    """A writable package-installer session."""

    session_id: int

    @abstractmethod
    def open_write(self, name: str, size: int) -> ContextManager[BinaryIO]:
        """Open a stream for *size* bytes of split *name*; closing it syncs."""

    @abstractmethod
    def commit(self, on_complete: Callable[[bool, str], None]) -> None:
        """Finalize the session.

        Raises when the commit cannot be handed over or is rejected on the
        spot; *on_complete(ok, message)* reports the installer's verdict.
        """

    @abstractmethod
    def abandon(self) -> None:
        """Discard the session."""

    def close(self) -> None:
        """Release local resources.  No-op by default."""


class PackageInstallerInterface(ABC):
    @abstractmethod
    def create_session(self) -> InstallSession:
        """Create a full-install session."""


class DevicePolicyInterface(ABC):
    @abstractmethod
    def is_device_owner(self, package_id: str) -> bool:
        """``True`` if *package_id* holds device-owner privilege."""


# ---------------------------------------------------------------------------
# Notification sources
# ---------------------------------------------------------------------------

class TvInputCallback:
    """Receiver for TV input changes.  Override what you need."""

    def on_input_added(self, input_id: str) -> None:
        pass

    def on_input_removed(self, input_id: str) -> None:
        pass

    def on_input_updated(self, input_id: str) -> None:
        pass

    def on_input_state_changed(self, input_id: str, state: int) -> None:
        pass


class LauncherAppsCallback:
    """Receiver for package changes.  Override what you need."""

    def on_package_added(self, package_id: str) -> None:
        pass

    def on_package_removed(self, package_id: str) -> None:
        pass

    def on_package_changed(self, package_id: str) -> None:
        pass

    def on_packages_available(self, package_ids: list[str]) -> None:
        pass


class TvInputManagerInterface(ABC):
    """Display inputs and their change notifications."""

    @abstractmethod
    def list_inputs(self) -> list[DisplayInput]:
        """Return every input known to the platform."""

    @abstractmethod
    def get_input(self, input_id: str) -> DisplayInput | None:
        """Return the input with *input_id*, or ``None``."""

    @abstractmethod
    def register_callback(self, callback: TvInputCallback) -> None: ...

    @abstractmethod
    def unregister_callback(self, callback: TvInputCallback) -> None: ...


class LauncherAppsInterface(ABC):
    """Package-change notifications."""

    @abstractmethod
    def register_callback(self, callback: LauncherAppsCallback) -> None: ...

    @abstractmethod
    def unregister_callback(self, callback: LauncherAppsCallback) -> None: ...


class KeyEventSourceInterface(ABC):
    """Remote-control key events."""

    @abstractmethod
    def register_callback(self, callback: Callable[[RemoteKeyEvent], None]) -> None: ...

    @abstractmethod
    def unregister_callback(self, callback: Callable[[RemoteKeyEvent], None]) -> None: ...


# ---------------------------------------------------------------------------
# Vendor, power and shell
# ---------------------------------------------------------------------------

class VendorServicesInterface(ABC):
    """Vendor-specific control surfaces (configuration and power services)."""

    @abstractmethod
    def has_component(self, identifier: str) -> bool:
        """Whether a class/service/package named *identifier* exists."""

    @abstractmethod
    def set_input_source(self, source_code: int) -> None:
        """Configuration-service call selecting the input by vendor code."""

    @abstractmethod
    def set_power_state(self, state_code: int) -> None:
        """Configuration-service call writing a numeric power state."""

    @abstractmethod
    def low_level_power_off(self) -> None:
        """Vendor power-service shutdown."""


class PowerManagerInterface(ABC):
    @abstractmethod
    def shutdown(self, confirm: bool, reason: str) -> None:
        """Standard power-service shutdown."""


class ShellInterface(ABC):
    @abstractmethod
    def spawn(self, command: str, elevated: bool = False) -> None:
        """Start *command* without waiting for it (``su -c`` when *elevated*)."""


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

class PlatformFactory(ABC):
    """Creates all platform interface implementations for one device."""

    @abstractmethod
    def create_activity_manager(self) -> ActivityManagerInterface: ...

    @abstractmethod
    def create_package_manager(self) -> PackageManagerInterface: ...

    @abstractmethod
    def create_package_installer(self) -> PackageInstallerInterface: ...

    @abstractmethod
    def create_device_policy(self) -> DevicePolicyInterface: ...

    @abstractmethod
    def create_tv_input_manager(self) -> TvInputManagerInterface: ...

    @abstractmethod
    def create_launcher_apps(self) -> LauncherAppsInterface: ...

    @abstractmethod
    def create_key_event_source(self) -> KeyEventSourceInterface: ...

    @abstractmethod
    def create_vendor_services(self) -> VendorServicesInterface: ...

    @abstractmethod
    def create_power_manager(self) -> PowerManagerInterface: ...

    @abstractmethod
    def create_shell(self) -> ShellInterface: ...

    def cleanup(self) -> None:
        """Stop watcher threads and release resources.  No-op by default."""
