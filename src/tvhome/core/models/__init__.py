"""Pydantic models for configuration, cascades, device records and events."""
from tvhome.core.models.cascade import AttemptRecord, CapabilityProfile, CascadeOutcome, Strategy
from tvhome.core.models.config import DeviceConfig, SystemConfig, TvHomeConfig, VendorConfig
from tvhome.core.models.device import (
    Application,
    DisplayInput,
    LaunchTarget,
    PackageInfo,
    RemoteKeyEvent,
)
from tvhome.core.models.event import Event
from tvhome.core.models.state import (
    CascadePolicy,
    InputKind,
    InstallResult,
    KeyAction,
    RelayTopic,
    VendorKind,
)

__all__ = [
    "Application",
    "AttemptRecord",
    "CapabilityProfile",
    "CascadeOutcome",
    "CascadePolicy",
    "DeviceConfig",
    "DisplayInput",
    "Event",
    "InputKind",
    "InstallResult",
    "KeyAction",
    "LaunchTarget",
    "PackageInfo",
    "RelayTopic",
    "RemoteKeyEvent",
    "Strategy",
    "SystemConfig",
    "TvHomeConfig",
    "VendorConfig",
    "VendorKind",
]
