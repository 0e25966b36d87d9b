"""tvhome — application entry point (NiceGUI composition root).

Wires together: Config → PlatformFactory → DeviceController + EventRelay → UI.
NiceGUI owns the event loop; ``app.on_startup`` / ``app.on_shutdown``
handle lifecycle.
"""

from __future__ import annotations

import logging as _logging

from nicegui import app, run, ui

from tvhome.config.config_manager import load_config
from tvhome.core.app_catalog import ApplicationCatalogQuery
from tvhome.core.device_controller import DeviceController
from tvhome.core.event_relay import EventRelay
from tvhome.log_config.logger import setup_logging
from tvhome.platform.factory import create_platform_factory
from tvhome.platform.mock.mock_factory import MockPlatformFactory
from tvhome.ui.dev_panel import DevPanel

_log = _logging.getLogger(__name__)


def main() -> None:
    """Synchronous entry point: bootstraps and starts NiceGUI."""

    # 1. Load configuration, then logging at the configured level
    config = load_config()
    setup_logging(config.system.log_level, config.system.log_dir)
    _log.info("Starting tvhome")

    # 2. Create platform factory (mock in dev mode or without adb)
    factory = create_platform_factory(config)
    mock = factory if isinstance(factory, MockPlatformFactory) else None
    if mock is not None:
        mock.seed_demo_device()

    # 3. Command boundary and event relay share one package manager
    controller = DeviceController(factory, config)
    relay = EventRelay(
        tv_inputs=factory.create_tv_input_manager(),
        launcher_apps=factory.create_launcher_apps(),
        key_source=factory.create_key_event_source(),
        catalog=ApplicationCatalogQuery(factory.create_package_manager()),
    )

    # 4. UI
    panel = DevPanel(controller=controller, relay=relay, mock=mock)

    @ui.page("/")
    def _index() -> None:
        panel.build()

    # 5. Wire lifecycle hooks
    async def on_startup() -> None:
        panel.attach()
        profile = await run.io_bound(controller.probe.detect_vendor)
        _log.info(
            "tvhome running on http://localhost:%d (vendor=%s)",
            config.system.webui_port,
            profile.vendor_kind.value,
        )

    async def on_shutdown() -> None:
        _log.info("NiceGUI shutdown, releasing relay and platform")
        panel.detach()
        relay.close()
        factory.cleanup()
        _log.info("tvhome stopped")

    app.on_startup(on_startup)
    app.on_shutdown(on_shutdown)

    # 6. Launch NiceGUI (blocks forever)
    ui.run(
        port=config.system.webui_port,
        title="tvhome",
        reload=False,
        show=False,
    )


if __name__ == "__main__":
    main()
