"""InputSwitchCascade — switch the display to an HDMI input.

Sequence:
1. Resolve the HDMI port from the input's name (first digit 1-4), then
   from the last segment of its id when that is a number, else port 1.
2. Map the port to the vendor source code.
3. Try, first success wins:
   a. standard pass-through VIEW intent (vendor-targeted when a vendor
      surface was detected);
   b. vendor configuration-service call;
   c. vendor broadcast, settle delay, vendor activity launch.
"""

from __future__ import annotations

import logging as _logging
import re
import time
from typing import Any, Callable

from tvhome.core import intents
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.cascade_executor import StrategyCascadeExecutor
from tvhome.core.interfaces.platform import ActivityManagerInterface, VendorServicesInterface
from tvhome.core.intents import ComponentName, Intent
from tvhome.core.models.cascade import CapabilityProfile, CascadeOutcome, Strategy
from tvhome.core.models.config import VendorConfig
from tvhome.core.models.device import DisplayInput
from tvhome.core.models.state import CascadePolicy

_log = _logging.getLogger(__name__)

_PORT_DIGIT = re.compile(r"[1-4]")
_NUMERIC = re.compile(r"\d+")

DEFAULT_PORT = 1


def resolve_port(display_name: str, input_id: str) -> int:
    """Return the HDMI port number for an input."""
    match = _PORT_DIGIT.search(display_name or "")
    if match:
        return int(match.group())
    # Only a wholly numeric last segment counts; "HW5" does not.
    segment = (input_id or "").rsplit("/", 1)[-1]
    if _NUMERIC.fullmatch(segment):
        return int(segment)
    return DEFAULT_PORT


def source_code_for(port: int, table: dict[int, int]) -> int:
    """Vendor source code for *port*; unknown ports use the port-1 code."""
    if port in table:
        return table[port]
    return table.get(DEFAULT_PORT, 23)


class InputSwitchCascade:
    """Builds and runs the input-switch strategies.

    Args:
        activity: Activity manager for intents and broadcasts.
        vendor: Vendor services (configuration-service call).
        probe: Capability probe, consulted on every switch.
        config: Vendor identifiers and the source-code table.
        executor: Cascade runner.
        sleep: Delay function between the vendor broadcast and launch.
    """

    def __init__(
        self,
        activity: ActivityManagerInterface,
        vendor: VendorServicesInterface,
        probe: CapabilityProbe,
        config: VendorConfig,
        executor: StrategyCascadeExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._activity = activity
        self._vendor = vendor
        self._probe = probe
        self._config = config
        self._executor = executor or StrategyCascadeExecutor()
        self._sleep = sleep
        self.last_outcome: CascadeOutcome | None = None

    def switch_to(self, display_input: DisplayInput) -> bool:
        profile = self._probe.detect_vendor()
        strategies = self.build_strategies(display_input, profile)
        outcome = self._executor.run(
            strategies, CascadePolicy.FIRST_SUCCESS, cascade_name="input-switch"
        )
        self.last_outcome = outcome
        return outcome.succeeded

    def build_strategies(
        self, display_input: DisplayInput, profile: CapabilityProfile
    ) -> list[Strategy]:
        port = resolve_port(display_input.display_name, display_input.id)
        code = source_code_for(port, self._config.source_codes)
        _log.debug(
            "Switching to %s (port=%d, source=%d, vendor=%s)",
            display_input.id, port, code, profile.vendor_kind.value,
        )
        extras = self._vendor_extras(port, code)

        def standard() -> None:
            intent = Intent(
                action=intents.ACTION_VIEW,
                data=intents.passthrough_uri(display_input.id),
            ).with_flags(intents.FLAG_ACTIVITY_NEW_TASK)
            if not profile.is_generic:
                intent.component = self._tv_center()
                intent.extras.update(extras)
            self._activity.start_activity(intent)

        def vendor_config() -> None:
            self._vendor.set_input_source(code)

        def vendor_activity() -> None:
            self._activity.send_broadcast(
                Intent(action=self._config.input_broadcast_action, extras=dict(extras))
            )
            self._sleep(self._config.settle_delay_seconds)
            self._activity.start_activity(
                Intent(component=self._tv_center(), extras=dict(extras)).with_flags(
                    intents.FLAG_ACTIVITY_NEW_TASK
                )
            )

        return [
            Strategy("standard-passthrough", standard),
            Strategy("vendor-config-service", vendor_config),
            Strategy("vendor-activity", vendor_activity),
        ]

    def _tv_center(self) -> ComponentName:
        return ComponentName(self._config.tv_center_package, self._config.tv_center_activity)

    def _vendor_extras(self, port: int, code: int) -> dict[str, Any]:
        return {
            "from_launcher": True,
            "source_flag": self._config.hdmi_source_flag,
            "source_input_id": port,
            "mtk_input_source": code,
        }
