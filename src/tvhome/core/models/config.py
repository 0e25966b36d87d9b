"""Configuration Pydantic models: TvHomeConfig, DeviceConfig, VendorConfig, SystemConfig."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DeviceConfig(BaseModel):
    """How the platform backend reaches the TV."""

    model_config = ConfigDict(extra="forbid")

    transport: Literal["adb", "local"] = Field(
        default="adb",
        description="'adb' runs commands via adb shell, 'local' via sh -c on the device",
    )
    adb_path: str = Field(default="adb", description="adb executable")
    serial: str | None = Field(default=None, description="adb device serial (host:port for TCP)")
    command_timeout_seconds: float = Field(default=10.0, gt=0)
    package_id: str = Field(
        default="org.tvhome.launcher",
        description="Package id of the home-screen app acting on the device",
    )
    staging_dir: str = Field(
        default="/data/local/tmp", description="On-device directory for shared install files"
    )
    poll_interval_seconds: float = Field(
        default=2.0, gt=0, description="Watcher poll period for input/catalog changes"
    )
    key_event_device: str | None = Field(
        default=None, description="Restrict getevent to one /dev/input node"
    )


class VendorConfig(BaseModel):
    """Vendor identifiers and reverse-engineered constants.

    The source-code table and power-state candidates are observed values,
    not documented ones; override them per device family.
    """

    model_config = ConfigDict(extra="forbid")

    probe_identifiers: list[str] = Field(
        default_factory=lambda: [
            "com.mediatek.twoworlds.tv.MtkTvConfig",
            "com.mediatek.wwtv.tvcenter",
        ],
        description="Class/service/package names whose presence marks the vendor",
    )
    tv_center_package: str = "com.mediatek.wwtv.tvcenter"
    tv_center_activity: str = "com.mediatek.wwtv.tvcenter.nav.TurnkeyUiMainActivity"
    input_broadcast_action: str = "tv.mediatek.intent.action.TV_INPUT"
    hdmi_source_flag: int = 4
    source_codes: dict[int, int] = Field(
        default_factory=lambda: {1: 23, 2: 25, 3: 24, 4: 26},
        description="HDMI port -> vendor input-source code (2 and 3 are swapped)",
    )
    settle_delay_seconds: float = Field(
        default=0.3, ge=0, description="Pause between the input broadcast and the activity launch"
    )
    power_state_codes: list[int] = Field(default_factory=lambda: [0, 1, 2])
    power_broadcast_actions: list[str] = Field(
        default_factory=lambda: [
            "com.mediatek.wwtv.tvcenter.power",
            "android.intent.action.ACTION_SHUTDOWN",
        ]
    )
    shell_power_commands: list[str] = Field(
        default_factory=lambda: [
            "setprop sys.powerctl shutdown",
            "reboot -p",
            "svc power shutdown",
        ]
    )

    # Shell templates for vendor service calls on the adb backend.  ``None``
    # means the surface is unreachable and the strategy reports unsupported.
    input_source_command: str | None = Field(
        default=None, description="Template with {code}, e.g. a vendor CLI call"
    )
    power_state_command: str | None = Field(default=None, description="Template with {code}")
    low_level_power_command: str | None = None


class SystemConfig(BaseModel):
    """Non-device runtime settings."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    webui_port: int = Field(default=8080, description="NiceGUI listen port")
    dev_mode: bool = Field(default=False, description="Use the mock platform")


class TvHomeConfig(BaseModel):
    """Top-level configuration loaded from ``tvhome_config.json``."""

    model_config = ConfigDict(extra="forbid")

    device: DeviceConfig = Field(default_factory=DeviceConfig)
    vendor: VendorConfig = Field(default_factory=VendorConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)
