"""Shared pytest fixtures for tvhome tests."""

from __future__ import annotations

import pytest

from tvhome.core.app_catalog import ApplicationCatalogQuery
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.event_relay import EventRelay
from tvhome.core.models.config import TvHomeConfig, VendorConfig
from tvhome.core.models.device import DisplayInput
from tvhome.core.models.state import InputKind
from tvhome.platform.mock.mock_factory import MockPlatformFactory

MTK_CONFIG_CLASS = "com.mediatek.twoworlds.tv.MtkTvConfig"


@pytest.fixture
def tvhome_config() -> TvHomeConfig:
    """Default config (no file I/O)."""
    return TvHomeConfig()


@pytest.fixture
def vendor_config() -> VendorConfig:
    return VendorConfig()


@pytest.fixture
def factory() -> MockPlatformFactory:
    """Fresh in-memory platform."""
    return MockPlatformFactory()


@pytest.fixture
def mediatek_factory(factory: MockPlatformFactory) -> MockPlatformFactory:
    """Mock platform where the vendor configuration class is present."""
    factory.vendor.components.add(MTK_CONFIG_CLASS)
    return factory


@pytest.fixture
def probe(factory: MockPlatformFactory, vendor_config: VendorConfig) -> CapabilityProbe:
    return CapabilityProbe(factory.vendor, vendor_config)


@pytest.fixture
def relay(factory: MockPlatformFactory):
    relay = EventRelay(
        tv_inputs=factory.tv_inputs,
        launcher_apps=factory.launcher_apps,
        key_source=factory.keys,
        catalog=ApplicationCatalogQuery(factory.packages),
    )
    yield relay
    relay.close()


@pytest.fixture
def hdmi2() -> DisplayInput:
    return DisplayInput(
        id="com.example.tvinput/.HdmiInputService/HW6",
        display_name="HDMI 2",
        kind=InputKind.HDMI,
    )
