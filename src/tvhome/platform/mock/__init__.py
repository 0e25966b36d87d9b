"""Mock platform backend for development and testing."""

from tvhome.platform.mock.mock_factory import MockPlatformFactory
from tvhome.platform.mock.mock_platform import (
    MockActivityManager,
    MockDevicePolicy,
    MockInstallSession,
    MockKeyEventSource,
    MockLauncherApps,
    MockPackageInstaller,
    MockPackageManager,
    MockPowerManager,
    MockShell,
    MockTvInputManager,
    MockVendorServices,
)

__all__ = [
    "MockActivityManager",
    "MockDevicePolicy",
    "MockInstallSession",
    "MockKeyEventSource",
    "MockLauncherApps",
    "MockPackageInstaller",
    "MockPackageManager",
    "MockPlatformFactory",
    "MockPowerManager",
    "MockShell",
    "MockTvInputManager",
    "MockVendorServices",
]
