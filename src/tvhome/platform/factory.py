"""Platform factory — backend detection and factory creation.

Selects adb when a device is reachable, Mock everywhere else (dev, CI).
"""

from __future__ import annotations

import logging
import shutil

from tvhome.core.interfaces.platform import PlatformFactory
from tvhome.core.models.config import TvHomeConfig

_log = logging.getLogger(__name__)


def _adb_available(adb_path: str) -> bool:
    """Return ``True`` if the adb executable can be found."""
    return shutil.which(adb_path) is not None


def create_platform_factory(config: TvHomeConfig) -> PlatformFactory:
    """Return the appropriate :class:`PlatformFactory`.

    * ``dev_mode`` set → ``MockPlatformFactory``.
    * ``transport="adb"`` without an adb executable → ``MockPlatformFactory``.
    * Otherwise → ``AdbPlatformFactory``.
    """
    device = config.device
    if config.system.dev_mode or (
        device.transport == "adb" and not _adb_available(device.adb_path)
    ):
        from tvhome.platform.mock.mock_factory import MockPlatformFactory

        _log.info(
            "Using MockPlatformFactory (dev_mode=%s, transport=%s)",
            config.system.dev_mode,
            device.transport,
        )
        return MockPlatformFactory()

    from tvhome.platform.adb.adb_factory import AdbPlatformFactory

    _log.info("Using AdbPlatformFactory")
    return AdbPlatformFactory(config)
