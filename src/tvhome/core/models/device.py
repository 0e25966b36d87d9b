"""Device-facing records: applications, display inputs, remote keys."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tvhome.core.models.state import InputKind, KeyAction


class LaunchTarget(BaseModel):
    """A launchable activity as enumerated by the package manager."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    activity: str
    label: str | None = None
    icon: bytes | None = None
    banner: bytes | None = None


class PackageInfo(BaseModel):
    """Installed-package metadata needed for catalog entries."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    version_name: str | None = None
    is_system_app: bool = False


class Application(BaseModel):
    """A catalog entry.  Identity is ``package_id``."""

    package_id: str
    display_name: str
    icon: bytes | None = None
    banner: bytes | None = None
    version: str | None = None
    sideloaded: bool = False
    is_system_app: bool = False


class DisplayInput(BaseModel):
    """A video input of the display.  Identity is ``id``."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    kind: InputKind = InputKind.OTHER
    icon: bytes | None = None

    @property
    def is_hdmi(self) -> bool:
        return self.kind is InputKind.HDMI


class RemoteKeyEvent(BaseModel):
    """A key transition observed from the remote control."""

    model_config = ConfigDict(frozen=True)

    origin: str = Field(description="Where the event was captured, e.g. 'getevent'")
    action: KeyAction
    key_code: int
    scan_code: int = 0
    repeat_count: int = 0
    device_id: int = 0
    source: int = 0
    flags: int = 0
    meta_state: int = 0
    event_time_ms: int = 0
