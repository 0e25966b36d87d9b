"""adb platform backend (also runs on-device with ``transport="local"``)."""

from tvhome.platform.adb.adb_factory import AdbPlatformFactory
from tvhome.platform.adb.shell import AdbShell

__all__ = ["AdbPlatformFactory", "AdbShell"]
