"""AdbPlatformFactory — drives a real TV through adb or its local shell.

All components are created eagerly in ``__init__`` so that
:meth:`cleanup` can reliably stop every watcher thread.
"""

from __future__ import annotations

import logging as _logging

from tvhome.core.interfaces.platform import (
    ActivityManagerInterface,
    DevicePolicyInterface,
    KeyEventSourceInterface,
    LauncherAppsInterface,
    PackageInstallerInterface,
    PackageManagerInterface,
    PlatformFactory,
    PowerManagerInterface,
    ShellInterface,
    TvInputManagerInterface,
    VendorServicesInterface,
)
from tvhome.core.models.config import TvHomeConfig
from tvhome.platform.adb.adb_platform import (
    AdbActivityManager,
    AdbDevicePolicy,
    AdbKeyEventSource,
    AdbLauncherApps,
    AdbPackageInstaller,
    AdbPackageManager,
    AdbPowerManager,
    AdbTvInputManager,
    AdbVendorServices,
)
from tvhome.platform.adb.shell import AdbShell

_log = _logging.getLogger(__name__)


class AdbPlatformFactory(PlatformFactory):
    """Factory that creates shell-backed platform components.

    Args:
        config: Full configuration (``device`` and ``vendor`` sections).
    """

    def __init__(self, config: TvHomeConfig) -> None:
        device = config.device
        self._shell = AdbShell(device)
        self._activity = AdbActivityManager(self._shell)
        self._packages = AdbPackageManager(self._shell, device)
        self._installer = AdbPackageInstaller(self._shell)
        self._policy = AdbDevicePolicy(self._shell)
        self._tv_inputs = AdbTvInputManager(self._shell, device.poll_interval_seconds)
        self._launcher_apps = AdbLauncherApps(self._shell, device.poll_interval_seconds)
        self._keys = AdbKeyEventSource(self._shell, device.key_event_device)
        self._vendor = AdbVendorServices(self._shell, config.vendor)
        self._power = AdbPowerManager(self._shell)

        _log.info(
            "AdbPlatformFactory ready (transport=%s, serial=%s)",
            device.transport,
            device.serial or "default",
        )

    # -- Factory interface --

    def create_activity_manager(self) -> ActivityManagerInterface:
        return self._activity

    def create_package_manager(self) -> PackageManagerInterface:
        return self._packages

    def create_package_installer(self) -> PackageInstallerInterface:
        return self._installer

    def create_device_policy(self) -> DevicePolicyInterface:
        return self._policy

    def create_tv_input_manager(self) -> TvInputManagerInterface:
        return self._tv_inputs

    def create_launcher_apps(self) -> LauncherAppsInterface:
        return self._launcher_apps

    def create_key_event_source(self) -> KeyEventSourceInterface:
        return self._keys

    def create_vendor_services(self) -> VendorServicesInterface:
        return self._vendor

    def create_power_manager(self) -> PowerManagerInterface:
        return self._power

    def create_shell(self) -> ShellInterface:
        return self._shell

    # -- Lifecycle --

    def cleanup(self) -> None:
        """Stop the input, package and key watcher threads."""
        for name, component in [
            ("tv_inputs", self._tv_inputs),
            ("launcher_apps", self._launcher_apps),
            ("keys", self._keys),
        ]:
            try:
                component.stop()
            except Exception:
                _log.exception("Error stopping %s", name)
        _log.info("AdbPlatformFactory cleanup complete")
