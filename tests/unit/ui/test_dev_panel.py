"""Unit tests for the DevPanel helpers.

NiceGUI itself is not exercised here, only the relay queue and the small
handlers behind the buttons.  Once a browser tab closes, touching an
element raises ``RuntimeError``; the panel must swallow those so a late
relay event or command result cannot break the drain timer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from tvhome.core.device_controller import DeviceController
from tvhome.core.event_relay import EventRelay
from tvhome.core.models.config import TvHomeConfig
from tvhome.core.models.device import Application, DisplayInput, RemoteKeyEvent
from tvhome.core.models.event import Event
from tvhome.core.models.state import InputKind, InstallResult, KeyAction, RelayTopic
from tvhome.platform.mock.mock_factory import MockPlatformFactory
from tvhome.ui.dev_panel import DevPanel, format_event

_GONE = "The client this element belongs to has been deleted."


class _BrokenLog:
    def push(self, line: str) -> None:
        raise RuntimeError(_GONE)


class _BrokenContainer:
    def clear(self) -> None:
        raise RuntimeError(_GONE)


class _BrokenText:
    @property
    def text(self) -> str:
        return ""

    @text.setter
    def text(self, value: str) -> None:
        raise RuntimeError(_GONE)


class _Log:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def push(self, line: str) -> None:
        self.lines.append(line)


class _Text:
    text = ""


async def _inline_io_bound(fn, *args):
    return fn(*args)


@pytest.fixture
def panel(factory: MockPlatformFactory, relay: EventRelay) -> DevPanel:
    factory.seed_demo_device()
    controller = DeviceController(factory, TvHomeConfig())
    return DevPanel(controller=controller, relay=relay, mock=factory)


_NOON = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestFormatEvent:
    def test_key(self) -> None:
        event = Event(
            topic=RelayTopic.REMOTE_KEY,
            action="down",
            payload={
                "event": RemoteKeyEvent(
                    origin="getevent", action=KeyAction.DOWN, key_code=23, scan_code=352
                )
            },
            timestamp=_NOON,
        )
        assert format_event(event) == "12:00:00 remote-key/down key=23 scan=352"

    def test_application(self) -> None:
        app = Application(package_id="com.example.music", display_name="Music")
        event = Event(
            topic=RelayTopic.CATALOG_CHANGE, action="added", payload={"application": app}, timestamp=_NOON
        )
        assert format_event(event).endswith("catalog-change/added com.example.music")

    def test_batch(self) -> None:
        apps = [
            Application(package_id="com.a", display_name="A"),
            Application(package_id="com.b", display_name="B"),
        ]
        event = Event(topic=RelayTopic.CATALOG_CHANGE, action="batch-available", payload={"applications": apps})
        assert format_event(event).endswith("com.a, com.b")

    def test_input(self) -> None:
        hdmi = DisplayInput(id="hdmi/HW5", display_name="HDMI 1", kind=InputKind.HDMI)
        event = Event(topic=RelayTopic.DISPLAY_INPUT_CHANGE, action="updated", payload={"input": hdmi})
        assert format_event(event).endswith("display-input-change/updated hdmi/HW5")

    def test_plain_payload(self) -> None:
        event = Event(
            topic=RelayTopic.DISPLAY_INPUT_CHANGE,
            action="state-changed",
            payload={"input_id": "hdmi/HW5", "state": 1},
        )
        assert format_event(event).endswith("input_id=hdmi/HW5, state=1")


class TestRelayQueue:
    def test_attach_subscribes_every_topic(self, panel: DevPanel, relay: EventRelay) -> None:
        panel.attach()
        assert all(relay.channel(topic).is_active for topic in RelayTopic)
        panel.detach()
        assert not any(relay.channel(topic).is_active for topic in RelayTopic)

    async def test_events_are_queued_then_drained(self, panel: DevPanel, factory: MockPlatformFactory) -> None:
        panel.attach()
        log = _Log()
        panel._event_log = log

        factory.keys.simulate_key(23)
        assert len(panel._pending) == 1
        assert log.lines == []

        await panel.drain_events()
        assert len(panel._pending) == 0
        assert "remote-key/down key=23" in log.lines[0]

    async def test_drain_ignores_runtime_error(self, panel: DevPanel, factory: MockPlatformFactory) -> None:
        panel.attach()
        panel._event_log = _BrokenLog()
        panel._inputs_column = _BrokenContainer()
        panel._apps_column = _BrokenContainer()

        factory.tv_inputs.simulate_state_changed("com.example.tvinput/.HdmiInputService/HW5", 1)
        panel._simulate_app_added("com.example.weather")
        # drain should complete without raising
        with patch("tvhome.ui.dev_panel.run.io_bound", _inline_io_bound):
            await panel.drain_events()
        assert len(panel._pending) == 0

    async def test_list_refresh_runs_off_the_event_loop(
        self, panel: DevPanel, factory: MockPlatformFactory
    ) -> None:
        offloaded: list[str] = []

        async def recording_io_bound(fn, *args):
            offloaded.append(fn.__name__)
            return fn(*args)

        panel.attach()
        panel._event_log = _Log()
        panel._inputs_column = _BrokenContainer()
        panel._apps_column = _BrokenContainer()
        factory.tv_inputs.simulate_state_changed("com.example.tvinput/.HdmiInputService/HW5", 1)
        panel._simulate_app_added("com.example.weather")

        with patch("tvhome.ui.dev_panel.run.io_bound", recording_io_bound):
            await panel.drain_events()
        assert offloaded == ["list_display_inputs", "list_applications"]

    def test_simulate_app_added_and_removed(self, panel: DevPanel, factory: MockPlatformFactory) -> None:
        panel.attach()
        panel._simulate_app_added("com.example.weather")
        assert factory.packages.package_exists("com.example.weather")
        added = panel._pending.popleft()
        assert added.action == "added"
        assert added.payload["application"].display_name == "Weather"

        panel._simulate_app_removed("com.example.weather")
        assert not factory.packages.package_exists("com.example.weather")
        assert panel._pending.popleft().payload == {"package_id": "com.example.weather"}

    def test_simulation_needs_mock(self, factory: MockPlatformFactory, relay: EventRelay) -> None:
        panel = DevPanel(DeviceController(factory, TvHomeConfig()), relay)
        panel._simulate_app_added("com.example.weather")
        assert not factory.packages.package_exists("com.example.weather")


class TestCommands:
    async def test_command_sets_status(self, panel: DevPanel, factory: MockPlatformFactory) -> None:
        label = _Text()
        panel._status_label = label
        with patch("tvhome.ui.dev_panel.run.io_bound", _inline_io_bound):
            result = await panel._command("settings", panel._controller.open_system_settings)
        assert result is True
        assert label.text == "settings: True"
        assert len(factory.activity.started) == 1

    async def test_command_ignores_runtime_error(self, panel: DevPanel) -> None:
        panel._status_label = _BrokenText()
        with patch("tvhome.ui.dev_panel.run.io_bound", _inline_io_bound):
            assert await panel._command("wifi", panel._controller.open_wifi_settings) is True

    async def test_install_without_path(self, panel: DevPanel) -> None:
        label = _Text()
        panel._status_label = label
        assert await panel._install("") is None
        assert label.text == "install: no file given"

    async def test_install_missing_file(self, panel: DevPanel, tmp_path) -> None:
        with patch("tvhome.ui.dev_panel.run.io_bound", _inline_io_bound):
            result = await panel._install(str(tmp_path / "missing.apk"))
        assert result is InstallResult.FILE_MISSING
