"""Platform abstraction interfaces."""

from tvhome.core.interfaces.platform import (
    ActivityManagerInterface,
    DevicePolicyInterface,
    InstallSession,
    KeyEventSourceInterface,
    LauncherAppsCallback,
    LauncherAppsInterface,
    PackageInstallerInterface,
    PackageManagerInterface,
    PlatformFactory,
    PowerManagerInterface,
    ShellInterface,
    TvInputCallback,
    TvInputManagerInterface,
    VendorServicesInterface,
)

__all__ = [
    "ActivityManagerInterface",
    "DevicePolicyInterface",
    "InstallSession",
    "KeyEventSourceInterface",
    "LauncherAppsCallback",
    "LauncherAppsInterface",
    "PackageInstallerInterface",
    "PackageManagerInterface",
    "PlatformFactory",
    "PowerManagerInterface",
    "ShellInterface",
    "TvInputCallback",
    "TvInputManagerInterface",
    "VendorServicesInterface",
]
