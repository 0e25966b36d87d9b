"""Tests for platform backend selection."""

from __future__ import annotations

from unittest.mock import patch

from tvhome.core.models.config import DeviceConfig, SystemConfig, TvHomeConfig
from tvhome.platform.adb.adb_factory import AdbPlatformFactory
from tvhome.platform.factory import create_platform_factory
from tvhome.platform.mock.mock_factory import MockPlatformFactory


class TestCreatePlatformFactory:
    def test_dev_mode_returns_mock(self) -> None:
        config = TvHomeConfig(system=SystemConfig(dev_mode=True))
        with patch("tvhome.platform.factory._adb_available", return_value=True):
            assert isinstance(create_platform_factory(config), MockPlatformFactory)

    def test_no_adb_returns_mock(self) -> None:
        with patch("tvhome.platform.factory._adb_available", return_value=False):
            assert isinstance(create_platform_factory(TvHomeConfig()), MockPlatformFactory)

    def test_adb_available_returns_adb(self) -> None:
        with patch("tvhome.platform.factory._adb_available", return_value=True):
            factory = create_platform_factory(TvHomeConfig())
        assert isinstance(factory, AdbPlatformFactory)
        factory.cleanup()

    def test_local_transport_ignores_adb_binary(self) -> None:
        config = TvHomeConfig(device=DeviceConfig(transport="local"))
        with patch("tvhome.platform.factory._adb_available", return_value=False):
            assert isinstance(create_platform_factory(config), AdbPlatformFactory)


class TestAdbPlatformFactory:
    def test_creates_every_component(self) -> None:
        factory = AdbPlatformFactory(TvHomeConfig())
        assert factory.create_shell() is factory.create_shell()
        assert factory.create_activity_manager() is not None
        assert factory.create_tv_input_manager() is not None
        assert factory.create_key_event_source() is not None
        # Nothing started, so cleanup has nothing to join.
        factory.cleanup()
