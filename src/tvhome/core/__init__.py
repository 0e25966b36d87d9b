"""Core services: cascade engine, device cascades, catalog, event relay."""

from tvhome.core.app_catalog import ApplicationCatalogQuery
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.cascade_executor import StrategyCascadeExecutor
from tvhome.core.device_controller import DeviceController
from tvhome.core.event_relay import EventRelay, RelaySubscription
from tvhome.core.input_switch import InputSwitchCascade, resolve_port
from tvhome.core.package_install import PrivilegedInstallCascade
from tvhome.core.power_off import PowerOffCascade

__all__ = [
    "ApplicationCatalogQuery",
    "CapabilityProbe",
    "DeviceController",
    "EventRelay",
    "InputSwitchCascade",
    "PowerOffCascade",
    "PrivilegedInstallCascade",
    "RelaySubscription",
    "StrategyCascadeExecutor",
    "resolve_port",
]
