"""Tests for the DeviceController command boundary."""

from __future__ import annotations

from pathlib import Path

import pytest

from tvhome.core import intents
from tvhome.core.device_controller import DeviceController
from tvhome.core.models.config import TvHomeConfig
from tvhome.core.models.device import DisplayInput, LaunchTarget
from tvhome.core.models.state import InputKind, InstallResult
from tvhome.platform.mock.mock_factory import MockPlatformFactory


@pytest.fixture
def controller(factory: MockPlatformFactory, tvhome_config: TvHomeConfig) -> DeviceController:
    return DeviceController(factory, tvhome_config)


class TestApplications:
    def test_list_applications(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.packages.add_app("com.a", "A")
        assert [a.package_id for a in controller.list_applications()] == ["com.a"]

    def test_list_applications_error_returns_empty(
        self, factory: MockPlatformFactory, controller: DeviceController
    ) -> None:
        factory.packages.fail.add("query_launch_targets")
        assert controller.list_applications() == []

    def test_application_exists(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.packages.add_app("com.a")
        assert controller.application_exists("com.a") is True
        assert controller.application_exists("com.b") is False

    def test_launch_prefers_leanback(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.packages.add_app("com.a", "A", launcher=True)
        assert controller.launch_application("com.a") is True
        intent = factory.activity.started[0]
        assert intent.component.flatten() == "com.a/com.a.MainActivity"
        assert intents.FLAG_ACTIVITY_NEW_TASK in intent.flags

    def test_launch_unknown_is_false(self, controller: DeviceController) -> None:
        assert controller.launch_application("com.none") is False

    def test_open_app_info_and_uninstall(
        self, factory: MockPlatformFactory, controller: DeviceController
    ) -> None:
        assert controller.open_app_info("com.a") is True
        assert controller.uninstall("com.a") is True
        info, delete = factory.activity.started
        assert info.action == intents.ACTION_APPLICATION_DETAILS_SETTINGS
        assert delete.action == intents.ACTION_DELETE
        assert delete.data == "package:com.a"


class TestDisplayInputs:
    def test_lists_only_hdmi(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.seed_demo_device()
        inputs = controller.list_display_inputs()
        assert len(inputs) == 3
        assert all(i.kind is InputKind.HDMI for i in inputs)

    def test_list_error_returns_empty(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.tv_inputs.fail.add("list_inputs")
        assert controller.list_display_inputs() == []

    def test_switch_known_input(
        self, factory: MockPlatformFactory, controller: DeviceController, hdmi2: DisplayInput
    ) -> None:
        factory.tv_inputs.simulate_input_added(hdmi2)
        assert controller.switch_display_input(hdmi2.id) is True
        assert controller.input_switch.last_outcome.succeeded

    def test_switch_unknown_input_is_false(
        self, factory: MockPlatformFactory, controller: DeviceController
    ) -> None:
        assert controller.switch_display_input("missing") is False
        assert factory.activity.started == []


class TestPowerAndInstall:
    def test_power_off(self, controller: DeviceController) -> None:
        assert controller.power_off() is True

    def test_install_missing_file(self, controller: DeviceController, tmp_path: Path) -> None:
        assert controller.install_package(tmp_path / "x.apk") is InstallResult.FILE_MISSING

    def test_install_permission_helpers(
        self, factory: MockPlatformFactory, controller: DeviceController
    ) -> None:
        factory.packages.install_permission_granted = False
        assert controller.can_request_package_installs() is False
        assert controller.request_package_installs_permission() is True
        assert factory.activity.started[0].action == intents.ACTION_MANAGE_UNKNOWN_APP_SOURCES

    def test_missing_manifest_permission_is_false(
        self, factory: MockPlatformFactory, controller: DeviceController
    ) -> None:
        factory.packages.install_permission_declared = False
        assert controller.can_request_package_installs() is False


class TestSystemScreens:
    def test_settings(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        assert controller.open_system_settings() is True
        assert controller.open_wifi_settings() is True
        assert [i.action for i in factory.activity.started] == [
            intents.ACTION_SETTINGS,
            intents.ACTION_WIFI_SETTINGS,
        ]

    def test_settings_failure_is_false(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.activity.fail.add("start_activity")
        assert controller.open_system_settings() is False

    def test_ambient_mode(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        assert controller.start_ambient_mode() is True
        assert factory.activity.started[0].component.flatten() == (
            "com.android.systemui/com.android.systemui.Somnambulator"
        )

    def test_image_picker(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        assert controller.check_image_picker_available() is False
        factory.packages.content_handlers[(intents.ACTION_GET_CONTENT, "image/*")] = [
            LaunchTarget(package_id="com.gallery", activity="com.gallery.Pick")
        ]
        assert controller.check_image_picker_available() is True

    def test_default_home(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        assert controller.is_default_home_app() is False
        factory.packages.home_package = "org.tvhome.launcher"
        assert controller.is_default_home_app() is True


class TestFallbacks:
    def test_list_fallback_is_fresh(self, factory: MockPlatformFactory, controller: DeviceController) -> None:
        factory.packages.fail.add("query_launch_targets")
        first = controller.list_applications()
        first.append("junk")
        assert controller.list_applications() == []
