"""Dev panel — drive the device layer from a browser.

Lists display inputs and applications, issues controller commands, and
shows the most recent relay events.  When the platform is
:class:`MockPlatformFactory` an extra row of simulation controls drives the
in-memory device (package added, input state change, remote key).

Relay listeners run on platform threads, so they only append to a queue;
a ``ui.timer`` drains it on the NiceGUI side.
"""

from __future__ import annotations

import logging as _logging
from collections import deque
from typing import Any, Callable

from nicegui import run, ui

from tvhome.core.device_controller import DeviceController
from tvhome.core.event_relay import EventRelay, RelaySubscription
from tvhome.core.models.event import Event
from tvhome.core.models.state import InstallResult, KeyAction, RelayTopic
from tvhome.platform.mock.mock_factory import MockPlatformFactory

_log = _logging.getLogger(__name__)

_MAX_EVENTS = 50
_DPAD_CENTER = 23


def format_event(event: Event) -> str:
    """One log line for *event*."""
    payload = event.payload
    if event.topic is RelayTopic.REMOTE_KEY:
        key = payload["event"]
        detail = f"key={key.key_code} scan={key.scan_code}"
    elif "application" in payload:
        detail = payload["application"].package_id
    elif "applications" in payload:
        detail = ", ".join(app.package_id for app in payload["applications"])
    elif "input" in payload:
        detail = payload["input"].id
    else:
        detail = ", ".join(f"{k}={v}" for k, v in payload.items())
    return f"{event.timestamp:%H:%M:%S} {event.topic.value}/{event.action} {detail}"


class DevPanel:
    """Browser controls wired to a :class:`DeviceController`.

    Args:
        controller: Command boundary.
        relay: Event relay; the panel subscribes to every topic.
        mock: The mock platform, when running without a device.
    """

    def __init__(
        self,
        controller: DeviceController,
        relay: EventRelay,
        mock: MockPlatformFactory | None = None,
    ) -> None:
        self._controller = controller
        self._relay = relay
        self._mock = mock
        self._pending: deque[Event] = deque(maxlen=_MAX_EVENTS)
        self._subscriptions: list[RelaySubscription] = []

        self._event_log: Any = None
        self._status_label: Any = None
        self._inputs_column: Any = None
        self._apps_column: Any = None

    # ------------------------------------------------------------------
    # Relay wiring
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Subscribe to all relay topics.  Replaces earlier listeners."""
        self._subscriptions = [
            self._relay.subscribe(topic, self._on_relay_event) for topic in RelayTopic
        ]

    def detach(self) -> None:
        for sub in self._subscriptions:
            self._relay.unsubscribe(sub)
        self._subscriptions = []

    def _on_relay_event(self, event: Event) -> None:
        self._pending.append(event)

    async def drain_events(self) -> None:
        """Move queued relay events into the log; refresh lists on changes."""
        refresh_inputs = refresh_apps = False
        while self._pending:
            event = self._pending.popleft()
            self._push_log(format_event(event))
            refresh_inputs |= event.topic is RelayTopic.DISPLAY_INPUT_CHANGE
            refresh_apps |= event.topic is RelayTopic.CATALOG_CHANGE
        if refresh_inputs:
            await self._render_inputs()
        if refresh_apps:
            await self._render_apps()

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self) -> None:
        with ui.column().classes("w-full").style("max-width: 1024px; gap: 8px; padding: 8px;"):
            ui.label("TV HOME").style("color: #888888; font-size: 14px; font-weight: bold;")
            self._status_label = ui.label("").style("font-family: monospace; color: #aaaaaa;")

            with ui.row().style("gap: 6px; flex-wrap: wrap;"):
                ui.button("Power off", on_click=lambda: self._command(
                    "power off", self._controller.power_off)).props("color=red")
                ui.button("Settings", on_click=lambda: self._command(
                    "settings", self._controller.open_system_settings))
                ui.button("Wi-Fi", on_click=lambda: self._command(
                    "wifi settings", self._controller.open_wifi_settings))
                ui.button("Ambient", on_click=lambda: self._command(
                    "ambient mode", self._controller.start_ambient_mode))
                ui.button("Install consent", on_click=lambda: self._command(
                    "install consent", self._controller.request_package_installs_permission))

            with ui.row().classes("items-center").style("gap: 6px;"):
                path_input = ui.input("Package file").style("min-width: 360px;")
                ui.button("Install", on_click=lambda: self._install(path_input.value))

            ui.label("INPUTS").style("color: #888888; font-size: 12px; font-weight: bold;")
            self._inputs_column = ui.row().style("gap: 6px; flex-wrap: wrap;")
            ui.label("APPLICATIONS").style("color: #888888; font-size: 12px; font-weight: bold;")
            self._apps_column = ui.column().style("gap: 2px;")

            if self._mock is not None:
                self._build_simulation_row()

            ui.label("EVENTS").style("color: #888888; font-size: 12px; font-weight: bold;")
            self._event_log = ui.log(max_lines=_MAX_EVENTS).classes("w-full").style("height: 180px;")

        ui.timer(0.1, self._render_lists, once=True)
        ui.timer(0.5, self.drain_events)

    async def _render_lists(self) -> None:
        await self._render_inputs()
        await self._render_apps()

    def _build_simulation_row(self) -> None:
        mock = self._mock
        with ui.row().classes("items-center").style("gap: 6px;"):
            ui.label("SIMULATE").style("color: #888888; font-size: 12px; font-weight: bold;")
            pkg_input = ui.input("Package id", value="com.example.new")
            ui.button("Add app", on_click=lambda: self._simulate_app_added(pkg_input.value))
            ui.button("Remove app", on_click=lambda: self._simulate_app_removed(pkg_input.value))
            ui.button("OK key", on_click=lambda: mock.keys.simulate_key(_DPAD_CENTER))
            ui.button("OK release", on_click=lambda: mock.keys.simulate_key(_DPAD_CENTER, KeyAction.UP))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    async def _render_inputs(self) -> None:
        if self._inputs_column is None:
            return
        inputs = await run.io_bound(self._controller.list_display_inputs)
        try:
            self._inputs_column.clear()
            with self._inputs_column:
                for display_input in inputs:
                    ui.button(
                        display_input.display_name,
                        on_click=lambda _, i=display_input.id: self._command(
                            f"switch to {i}", self._controller.switch_display_input, i
                        ),
                    ).tooltip(display_input.id)
        except RuntimeError:
            _log.debug("inputs column client gone, ignoring update")

    async def _render_apps(self) -> None:
        if self._apps_column is None:
            return
        apps = await run.io_bound(self._controller.list_applications)
        try:
            self._apps_column.clear()
            with self._apps_column:
                for app in apps:
                    with ui.row().classes("items-center").style("gap: 6px;"):
                        ui.button(
                            app.display_name,
                            on_click=lambda _, p=app.package_id: self._command(
                                f"launch {p}", self._controller.launch_application, p
                            ),
                        ).props("flat")
                        tags = [app.version or "?"]
                        if app.sideloaded:
                            tags.append("sideloaded")
                        if app.is_system_app:
                            tags.append("system")
                        ui.label(" · ".join(tags)).style("color: #888888; font-size: 11px;")
        except RuntimeError:
            _log.debug("apps column client gone, ignoring update")

    def _push_log(self, line: str) -> None:
        if self._event_log is None:
            return
        try:
            self._event_log.push(line)
        except RuntimeError:
            _log.debug("event log client gone, ignoring update")

    def _set_status(self, text: str) -> None:
        if self._status_label is None:
            return
        try:
            self._status_label.text = text
        except RuntimeError:
            _log.debug("status label client gone, ignoring update")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def _command(self, label: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking controller command off the event loop."""
        result = await run.io_bound(fn, *args)
        self._set_status(f"{label}: {result}")
        return result

    async def _install(self, path: str | None) -> InstallResult | None:
        if not path:
            self._set_status("install: no file given")
            return None
        result = await self._command("install", self._controller.install_package, path)
        if result is InstallResult.NEEDS_PERMISSION:
            self._set_status("install: grant unknown-sources access, then retry")
        return result

    def _simulate_app_added(self, package_id: str | None) -> None:
        if not package_id or self._mock is None:
            return
        self._mock.packages.add_app(package_id, package_id.rsplit(".", 1)[-1].title())
        self._mock.launcher_apps.simulate_package_added(package_id)

    def _simulate_app_removed(self, package_id: str | None) -> None:
        if not package_id or self._mock is None:
            return
        self._mock.packages.remove_app(package_id)
        self._mock.launcher_apps.simulate_package_removed(package_id)
