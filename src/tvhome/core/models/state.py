"""Enumerations shared across the core and the platform backends."""

from __future__ import annotations

from enum import Enum


class VendorKind(str, Enum):
    """Silicon/firmware vendor family detected on the running device."""

    GENERIC = "generic"
    MEDIATEK = "mediatek"


class InputKind(str, Enum):
    """Hardware kind of a display input."""

    HDMI = "hdmi"
    TUNER = "tuner"
    COMPONENT = "component"
    COMPOSITE = "composite"
    OTHER = "other"


class KeyAction(str, Enum):
    """Remote key transition."""

    DOWN = "down"
    UP = "up"
    OTHER = "other"


class CascadePolicy(str, Enum):
    """When a cascade stops running strategies."""

    FIRST_SUCCESS = "first_success"
    RUN_ALL = "run_all"


class InstallResult(str, Enum):
    """Outcome codes of :class:`~tvhome.core.package_install.PrivilegedInstallCascade`."""

    FILE_MISSING = "file_missing"
    SILENT_STARTED = "silent_started"
    NEEDS_PERMISSION = "needs_permission"
    MISSING_MANIFEST_PERMISSION = "missing_manifest_permission"
    STARTED = "started"
    ERROR = "error"


class RelayTopic(str, Enum):
    """Event relay channels; each has at most one live listener."""

    CATALOG_CHANGE = "catalog-change"
    DISPLAY_INPUT_CHANGE = "display-input-change"
    REMOTE_KEY = "remote-key"
