"""Platform abstraction: factory + backends (adb, mock)."""

from tvhome.platform.factory import create_platform_factory

__all__ = ["create_platform_factory"]
