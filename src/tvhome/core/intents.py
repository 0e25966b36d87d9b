"""Intent record and well-known Android action/category/flag constants.

Defined centrally so cascades and backends reference the same strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# --- Actions ---------------------------------------------------------------

ACTION_MAIN = "android.intent.action.MAIN"
ACTION_VIEW = "android.intent.action.VIEW"
ACTION_DELETE = "android.intent.action.DELETE"
ACTION_GET_CONTENT = "android.intent.action.GET_CONTENT"
ACTION_INSTALL_PACKAGE = "android.intent.action.INSTALL_PACKAGE"
ACTION_REQUEST_SHUTDOWN = "com.android.internal.intent.action.REQUEST_SHUTDOWN"
ACTION_SETTINGS = "android.settings.SETTINGS"
ACTION_WIFI_SETTINGS = "android.settings.WIFI_SETTINGS"
ACTION_APPLICATION_DETAILS_SETTINGS = "android.settings.APPLICATION_DETAILS_SETTINGS"
ACTION_MANAGE_UNKNOWN_APP_SOURCES = "android.settings.MANAGE_UNKNOWN_APP_SOURCES"

# --- Categories ------------------------------------------------------------

CATEGORY_LAUNCHER = "android.intent.category.LAUNCHER"
CATEGORY_LEANBACK_LAUNCHER = "android.intent.category.LEANBACK_LAUNCHER"
CATEGORY_HOME = "android.intent.category.HOME"

# --- Extras ----------------------------------------------------------------

EXTRA_KEY_CONFIRM = "android.intent.extra.KEY_CONFIRM"
EXTRA_NOT_UNKNOWN_SOURCE = "android.intent.extra.NOT_UNKNOWN_SOURCE"

# --- Flags -----------------------------------------------------------------

FLAG_ACTIVITY_NEW_TASK = "FLAG_ACTIVITY_NEW_TASK"
FLAG_GRANT_READ_URI_PERMISSION = "FLAG_GRANT_READ_URI_PERMISSION"

FLAG_VALUES: dict[str, int] = {
    FLAG_GRANT_READ_URI_PERMISSION: 0x00000001,
    FLAG_ACTIVITY_NEW_TASK: 0x10000000,
}

# --- URIs ------------------------------------------------------------------

PASSTHROUGH_URI_PREFIX = "content://android.media.tv/passthrough/"

PERMISSION_REQUEST_INSTALL_PACKAGES = "android.permission.REQUEST_INSTALL_PACKAGES"


def passthrough_uri(input_id: str) -> str:
    """Channel URI addressing a pass-through input (HDMI etc.)."""
    return PASSTHROUGH_URI_PREFIX + input_id


def package_uri(package_id: str) -> str:
    return f"package:{package_id}"


@dataclass(frozen=True)
class ComponentName:
    package: str
    cls: str

    def flatten(self) -> str:
        """``pkg/cls`` form as accepted by ``am -n``."""
        return f"{self.package}/{self.cls}"


@dataclass
class Intent:
    """Platform-neutral description of an activity start or broadcast."""

    action: str | None = None
    data: str | None = None
    component: ComponentName | None = None
    mime_type: str | None = None
    categories: tuple[str, ...] = ()
    extras: dict[str, Any] = field(default_factory=dict)
    flags: tuple[str, ...] = ()

    def with_flags(self, *flags: str) -> Intent:
        self.flags = tuple(dict.fromkeys(self.flags + flags))
        return self

    def flag_mask(self) -> int:
        mask = 0
        for flag in self.flags:
            mask |= FLAG_VALUES[flag]
        return mask
