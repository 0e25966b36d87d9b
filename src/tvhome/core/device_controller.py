"""DeviceController — the command boundary used by the presentation layer.

Every command resolves to a typed result.  Platform errors are logged and
mapped to ``False`` / ``[]`` / ``InstallResult.ERROR``; nothing raises
past this class.
"""

from __future__ import annotations

import functools
import logging as _logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from tvhome.core import intents
from tvhome.core.app_catalog import ApplicationCatalogQuery
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.cascade_executor import StrategyCascadeExecutor
from tvhome.core.errors import NotFoundError, describe_error
from tvhome.core.input_switch import InputSwitchCascade
from tvhome.core.interfaces.platform import PlatformFactory
from tvhome.core.intents import ComponentName, Intent
from tvhome.core.models.config import TvHomeConfig
from tvhome.core.models.device import Application, DisplayInput
from tvhome.core.models.state import InstallResult
from tvhome.core.package_install import PrivilegedInstallCascade
from tvhome.core.power_off import PowerOffCascade

_log = _logging.getLogger(__name__)

T = TypeVar("T")

_AMBIENT_COMPONENT = ComponentName("com.android.systemui", "com.android.systemui.Somnambulator")
_IMAGE_MIME = "image/*"


def command(fallback: Any) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Run a command method, logging and returning *fallback* on error."""

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(self: DeviceController, *args: Any, **kwargs: Any) -> T:
            try:
                return fn(self, *args, **kwargs)
            except NotFoundError as exc:
                _log.warning("%s: %s", fn.__name__, exc)
            except Exception as exc:
                _log.error("%s failed: %s", fn.__name__, describe_error(exc))
            # Fresh copy so callers never share a mutable fallback.
            return list(fallback) if isinstance(fallback, list) else fallback

        return wrapper

    return decorator


class DeviceController:
    """Issues device commands through the platform created by *factory*.

    Args:
        factory: Platform backend factory (adb or mock).
        config: Full configuration (own package id, vendor tables).
    """

    def __init__(self, factory: PlatformFactory, config: TvHomeConfig) -> None:
        self._config = config
        self._own_package = config.device.package_id

        self._activity = factory.create_activity_manager()
        self._packages = factory.create_package_manager()
        self._tv_inputs = factory.create_tv_input_manager()
        vendor = factory.create_vendor_services()

        executor = StrategyCascadeExecutor()
        probe = CapabilityProbe(vendor, config.vendor)
        self.probe = probe

        self.catalog = ApplicationCatalogQuery(self._packages)
        self.input_switch = InputSwitchCascade(
            self._activity, vendor, probe, config.vendor, executor
        )
        self.power = PowerOffCascade(
            self._activity,
            vendor,
            factory.create_power_manager(),
            factory.create_shell(),
            probe,
            config.vendor,
            executor,
        )
        self.installer = PrivilegedInstallCascade(
            self._packages,
            factory.create_package_installer(),
            factory.create_device_policy(),
            self._activity,
            self._own_package,
            executor,
        )

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    @command(fallback=[])
    def list_applications(self) -> list[Application]:
        return self.catalog.list()

    @command(fallback=False)
    def application_exists(self, package_id: str) -> bool:
        return self._packages.package_exists(package_id)

    @command(fallback=False)
    def launch_application(self, package_id: str) -> bool:
        target = self._packages.resolve_launch_target(
            package_id, intents.CATEGORY_LEANBACK_LAUNCHER
        ) or self._packages.resolve_launch_target(package_id, intents.CATEGORY_LAUNCHER)
        if target is None:
            raise NotFoundError(f"no launch target for {package_id}")
        self._activity.start_activity(
            Intent(
                action=intents.ACTION_MAIN,
                component=ComponentName(target.package_id, target.activity),
            ).with_flags(intents.FLAG_ACTIVITY_NEW_TASK)
        )
        return True

    @command(fallback=False)
    def open_app_info(self, package_id: str) -> bool:
        return self._start(
            Intent(
                action=intents.ACTION_APPLICATION_DETAILS_SETTINGS,
                data=intents.package_uri(package_id),
            )
        )

    @command(fallback=False)
    def uninstall(self, package_id: str) -> bool:
        return self._start(
            Intent(action=intents.ACTION_DELETE, data=intents.package_uri(package_id))
        )

    # ------------------------------------------------------------------
    # Display inputs
    # ------------------------------------------------------------------

    @command(fallback=[])
    def list_display_inputs(self) -> list[DisplayInput]:
        return [i for i in self._tv_inputs.list_inputs() if i.is_hdmi]

    @command(fallback=False)
    def switch_display_input(self, input_id: str) -> bool:
        display_input = self._tv_inputs.get_input(input_id)
        if display_input is None:
            raise NotFoundError(f"unknown input {input_id}")
        return self.input_switch.switch_to(display_input)

    # ------------------------------------------------------------------
    # Power and installs
    # ------------------------------------------------------------------

    @command(fallback=False)
    def power_off(self) -> bool:
        """Advisory: ``True`` means some shutdown call did not raise."""
        return self.power.power_off()

    @command(fallback=InstallResult.ERROR)
    def install_package(self, file_path: str | Path) -> InstallResult:
        return self.installer.install(file_path)

    @command(fallback=False)
    def can_request_package_installs(self) -> bool:
        return self.installer.can_request_package_installs()

    @command(fallback=False)
    def request_package_installs_permission(self) -> bool:
        return self.installer.open_consent_screen()

    # ------------------------------------------------------------------
    # Settings and system screens
    # ------------------------------------------------------------------

    @command(fallback=False)
    def open_system_settings(self) -> bool:
        return self._start(Intent(action=intents.ACTION_SETTINGS))

    @command(fallback=False)
    def open_wifi_settings(self) -> bool:
        return self._start(Intent(action=intents.ACTION_WIFI_SETTINGS))

    @command(fallback=False)
    def check_image_picker_available(self) -> bool:
        return bool(
            self._packages.query_content_handlers(intents.ACTION_GET_CONTENT, _IMAGE_MIME)
        )

    @command(fallback=False)
    def is_default_home_app(self) -> bool:
        return self._packages.resolve_home_package() == self._own_package

    @command(fallback=False)
    def start_ambient_mode(self) -> bool:
        return self._start(Intent(action=intents.ACTION_MAIN, component=_AMBIENT_COMPONENT))

    def _start(self, intent: Intent) -> bool:
        self._activity.start_activity(intent.with_flags(intents.FLAG_ACTIVITY_NEW_TASK))
        return True
