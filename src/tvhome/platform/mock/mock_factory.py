"""MockPlatformFactory — creates the in-memory platform for dev and test.

All created instances are stored as public attributes so the dev panel
and tests can reach the ``simulate_*()`` helpers directly.
"""

from __future__ import annotations

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
from tvhome.core.models.device import DisplayInput
from tvhome.core.models.state import InputKind
from tvhome.platform.mock.mock_platform import (
    MockActivityManager,
    MockDevicePolicy,
    MockKeyEventSource,
    MockLauncherApps,
    MockPackageInstaller,
    MockPackageManager,
    MockPowerManager,
    MockShell,
    MockTvInputManager,
    MockVendorServices,
)


class MockPlatformFactory(PlatformFactory):
    """Factory that returns in-memory mock implementations.

    After creation, the individual mocks are available as attributes
    (e.g. ``factory.activity``, ``factory.tv_inputs``).
    """

    def __init__(self) -> None:
        self.activity = MockActivityManager()
        self.packages = MockPackageManager()
        self.installer = MockPackageInstaller()
        self.policy = MockDevicePolicy()
        self.tv_inputs = MockTvInputManager()
        self.launcher_apps = MockLauncherApps()
        self.keys = MockKeyEventSource()
        self.vendor = MockVendorServices()
        self.power = MockPowerManager()
        self.shell = MockShell()

    def seed_demo_device(self) -> None:
        """Populate a small living-room TV for the dev panel."""
        for port in range(1, 4):
            self.tv_inputs.simulate_input_added(
                DisplayInput(
                    id=f"com.example.tvinput/.HdmiInputService/HW{port + 4}",
                    display_name=f"HDMI {port}",
                    kind=InputKind.HDMI,
                )
            )
        self.tv_inputs.simulate_input_added(
            DisplayInput(id="com.example.tvinput/.TunerService", display_name="TV", kind=InputKind.TUNER)
        )
        self.packages.add_app("com.example.streaming", "Streaming")
        self.packages.add_app("com.example.music", "Music", launcher=True)
        self.packages.add_app("com.example.browser", "Browser", leanback=False, launcher=True)
        self.packages.add_app(
            "com.android.tv.settings", "Settings", system=True, version="13"
        )

    # -- Factory interface --

    def create_activity_manager(self) -> ActivityManagerInterface:
        return self.activity

    def create_package_manager(self) -> PackageManagerInterface:
        return self.packages

    def create_package_installer(self) -> PackageInstallerInterface:
        return self.installer

    def create_device_policy(self) -> DevicePolicyInterface:
        return self.policy

    def create_tv_input_manager(self) -> TvInputManagerInterface:
        return self.tv_inputs

    def create_launcher_apps(self) -> LauncherAppsInterface:
        return self.launcher_apps

    def create_key_event_source(self) -> KeyEventSourceInterface:
        return self.keys

    def create_vendor_services(self) -> VendorServicesInterface:
        return self.vendor

    def create_power_manager(self) -> PowerManagerInterface:
        return self.power

    def create_shell(self) -> ShellInterface:
        return self.shell
